"""Pytest fixtures for testing the ClusterAddon controller."""

import os
from unittest.mock import MagicMock, patch

import pytest

from clusteraddon.addons.ledger import InstallationLedger
from clusteraddon.addons.manager import AddonManager
from clusteraddon.addons.manifest import ManifestFetcher
from clusteraddon.addons.operator import ResourceOperator
from clusteraddon.addons.registry import AddonManifestSource, AddonRegistry
from clusteraddon.controller.reconciler import ClusterAddonReconciler
from tests.mocks import (
    FIXED_NOW,
    FakeClusterAddonClient,
    FakeCoreV1Api,
    FakeDynamicClient,
    make_response,
)

STACK_MANIFEST = """\
apiVersion: v1
kind: Namespace
metadata:
  name: ksctl-stack
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: stack-controller
  namespace: ksctl-stack
spec:
  replicas: 1
"""

MONITORING_MANIFEST = """\
---
apiVersion: v1
kind: ServiceAccount
metadata:
  name: monitoring-agent
---
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: monitoring-agent
"""


def _url(base: str):
    return lambda version: f"{base}/{version or 'latest'}/install.yaml"


@pytest.fixture(autouse=True)
def clean_environment():
    """Keep developer environment variables and .env files out of tests."""
    with patch.dict(os.environ, {}, clear=True), patch("clusteraddon.config.load_dotenv"):
        yield


@pytest.fixture
def registry() -> AddonRegistry:
    """Registry with one cluster-wide addon and one namespaced addon."""
    return AddonRegistry(
        [
            AddonManifestSource(
                name="stack", org="ksctl", repo="ka", url=_url("https://example.test/stack")
            ),
            AddonManifestSource(
                name="monitoring",
                org="ksctl",
                repo="monitoring",
                url=_url("https://example.test/monitoring"),
                namespace="monitoring",
            ),
        ]
    )


@pytest.fixture
def manifests() -> dict[str, str]:
    """Manifest bodies served by the fake HTTP session, keyed by URL prefix."""
    return {
        "https://example.test/stack": STACK_MANIFEST,
        "https://example.test/monitoring": MONITORING_MANIFEST,
    }


@pytest.fixture
def http_session(manifests) -> MagicMock:
    """requests.Session stand-in serving ``manifests``; 404 for anything else."""
    session = MagicMock()

    def get(url, timeout=None, **kwargs):
        for prefix, body in manifests.items():
            if url.startswith(prefix):
                return make_response(200, body)
        return make_response(404, "not found")

    session.get.side_effect = get
    return session


@pytest.fixture
def fake_core() -> FakeCoreV1Api:
    return FakeCoreV1Api()


@pytest.fixture
def fake_dynamic() -> FakeDynamicClient:
    return FakeDynamicClient()


@pytest.fixture
def fake_resources() -> FakeClusterAddonClient:
    return FakeClusterAddonClient()


@pytest.fixture
def ledger(fake_core) -> InstallationLedger:
    return InstallationLedger(fake_core, clock=lambda: FIXED_NOW, sleep=lambda _: None)


@pytest.fixture
def fetcher(http_session) -> ManifestFetcher:
    return ManifestFetcher(session=http_session, timeout=5.0)


@pytest.fixture
def operator(fake_dynamic) -> ResourceOperator:
    return ResourceOperator(fake_dynamic)


@pytest.fixture
def poller() -> MagicMock:
    """Release poller reporting v1.2.3 as the latest release."""
    mock = MagicMock()
    mock.get_latest_version.return_value = "v1.2.3"
    return mock


@pytest.fixture
def manager(registry, ledger, fetcher, operator, fake_core, poller) -> AddonManager:
    return AddonManager(
        registry=registry,
        ledger=ledger,
        fetcher=fetcher,
        operator=operator,
        core=fake_core,
        poller=poller,
    )


@pytest.fixture
def reconciler(fake_resources, manager) -> ClusterAddonReconciler:
    return ClusterAddonReconciler(
        fake_resources,
        manager,
        failure_requeue_seconds=30.0,
        success_requeue_seconds=300.0,
        pass_timeout=60.0,
    )
