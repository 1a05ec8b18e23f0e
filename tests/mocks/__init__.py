"""Test doubles for the Kubernetes APIs."""

from tests.mocks.fake_cluster import (
    FIXED_NOW,
    FakeClusterAddonClient,
    FakeCoreV1Api,
    FakeDynamicClient,
    make_response,
)

__all__ = [
    "FIXED_NOW",
    "FakeClusterAddonClient",
    "FakeCoreV1Api",
    "FakeDynamicClient",
    "make_response",
]
