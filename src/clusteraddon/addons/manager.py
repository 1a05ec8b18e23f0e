"""Addon manager for orchestrating addon installs and uninstalls."""

import logging
import time
from collections.abc import Iterable
from typing import Any

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from clusteraddon.addons.ledger import InstallationLedger, LedgerRecord
from clusteraddon.addons.manifest import ManifestFetcher, ManifestObject
from clusteraddon.addons.operator import ResourceOperator
from clusteraddon.addons.registry import AddonManifestSource, AddonRegistry
from clusteraddon.addons.versions import ReleasePoller
from clusteraddon.cluster.kube import delete_namespace, ensure_namespace
from clusteraddon.cluster.resource import AddonDeclaration
from clusteraddon.utils.errors import (
    AddonError,
    FetchError,
    LedgerError,
    NamespaceError,
    VersionLookupError,
)

logger = logging.getLogger(__name__)


class AddonManager:
    """Installs and uninstalls addons declared on a ClusterAddon.

    The ledger decides whether work is needed: an addon with a ledger entry
    is installed, one without is not, whatever objects exist in the cluster.
    """

    def __init__(
        self,
        registry: AddonRegistry,
        ledger: InstallationLedger,
        fetcher: ManifestFetcher,
        operator: ResourceOperator,
        core: client.CoreV1Api,
        poller: ReleasePoller | None = None,
        drift_reapply: bool = False,
    ):
        """Initialize addon manager.

        Args:
            registry: Addon manifest sources
            ledger: Installation ledger
            fetcher: Manifest downloader
            operator: Applies and deletes manifest objects
            core: CoreV1Api client used for addon namespaces
            poller: Optional latest-release lookup for unpinned addons
            drift_reapply: Re-apply manifests of already installed addons
        """
        self.registry = registry
        self.ledger = ledger
        self.fetcher = fetcher
        self.operator = operator
        self.core = core
        self.poller = poller
        self.drift_reapply = drift_reapply

    def _load_ledger(self, addon: str) -> LedgerRecord:
        try:
            return self.ledger.load()
        except ApiException as e:
            raise LedgerError(
                f"failed to get/create ledger: {e.status} {e.reason}", addon=addon
            ) from e

    def _resolve_version(self, source: AddonManifestSource, declared: str | None) -> str:
        """Pick the version to install: declared, latest release, or empty."""
        if declared:
            return declared
        if self.poller is None:
            return ""
        try:
            return self.poller.get_latest_version(source.org, source.repo)
        except VersionLookupError as e:
            logger.warning(
                f"[{source.name}] Latest version lookup failed, using manifest default: {e}"
            )
            return ""

    def _fetch(
        self, source: AddonManifestSource, version: str, deadline: float | None
    ) -> list[ManifestObject]:
        timeout = None
        if deadline is not None:
            timeout = deadline - time.monotonic()
            if timeout <= 0:
                raise FetchError(
                    "reconciliation deadline exceeded before manifest download",
                    addon=source.name,
                )
            timeout = min(timeout, self.fetcher.timeout)
        return self.fetcher.fetch(source, version, timeout=timeout)

    def _ensure_namespace(self, source: AddonManifestSource) -> None:
        if not source.namespace:
            return
        try:
            ensure_namespace(self.core, source.namespace)
        except ApiException as e:
            raise NamespaceError(
                f"failed to create namespace {source.namespace}: {e.status} {e.reason}"
            ) from e

    def _tag(self, error: AddonError, addon: str) -> AddonError:
        if error.addon is None:
            error.addon = addon
        return error

    def install(self, addon: AddonDeclaration, deadline: float | None = None) -> dict[str, Any]:
        """Install one addon unless the ledger already records it.

        Args:
            addon: Declared addon
            deadline: Optional ``time.monotonic()`` deadline for network calls

        Returns:
            Dict with installation result:
            - success: bool (always True; failures raise)
            - addon: addon name
            - version: installed version
            - skipped: True if the ledger short-circuited the install
            - objects: number of objects applied

        Raises:
            AddonError: If any step fails; the ledger is left unchanged
        """
        name = addon.name
        # Unknown names fail before the ledger is read or created.
        source = self.registry.resolve(name)
        record = self._load_ledger(name)
        entry = record.get(name)

        if entry is not None and not self.drift_reapply:
            logger.debug(f"[{name}] Already installed, skipping")
            return {
                "success": True,
                "addon": name,
                "version": entry.version,
                "skipped": True,
                "objects": 0,
                "message": f"{name} is already installed",
            }

        try:
            if entry is not None:
                logger.info(f"[{name}] Re-applying manifest (version '{entry.version}')")
                self._ensure_namespace(source)
                objects = self._fetch(source, entry.version, deadline)
                for obj in objects:
                    self.operator.apply(obj)
                return {
                    "success": True,
                    "addon": name,
                    "version": entry.version,
                    "skipped": True,
                    "objects": len(objects),
                    "message": f"{name} manifest re-applied",
                }

            self._ensure_namespace(source)

            version = self._resolve_version(source, addon.version)
            logger.info(f"[{name}] Installing (version '{version or 'latest'}')")

            objects = self._fetch(source, version, deadline)
            for obj in objects:
                self.operator.apply(obj)

            self.ledger.mark_installed(name, version)
        except AddonError as e:
            raise self._tag(e, name)

        logger.info(f"[{name}] Installation completed successfully")
        return {
            "success": True,
            "addon": name,
            "version": version,
            "skipped": False,
            "objects": len(objects),
            "message": f"{name} installed successfully",
        }

    def uninstall(self, addon: AddonDeclaration, deadline: float | None = None) -> dict[str, Any]:
        """Uninstall one addon if the ledger records it.

        Objects are deleted with the manifest of the recorded version.
        Objects that are already gone do not fail the uninstall.

        Args:
            addon: Declared addon
            deadline: Optional ``time.monotonic()`` deadline for network calls

        Returns:
            Dict with uninstall result (same keys as :meth:`install`)

        Raises:
            AddonError: If any step fails; the ledger entry is kept
        """
        name = addon.name
        record = self._load_ledger(name)
        entry = record.get(name)

        if entry is None:
            logger.debug(f"[{name}] Not installed, skipping")
            return {
                "success": True,
                "addon": name,
                "version": "",
                "skipped": True,
                "objects": 0,
                "message": f"{name} is not installed",
            }

        source = self.registry.resolve(name)
        logger.info(f"[{name}] Uninstalling (version '{entry.version or 'latest'}')")

        try:
            objects = self._fetch(source, entry.version, deadline)
            for obj in objects:
                self.operator.delete(obj)

            if source.namespace:
                try:
                    delete_namespace(self.core, source.namespace)
                except ApiException as e:
                    raise NamespaceError(
                        f"failed to delete namespace {source.namespace}: {e.status} {e.reason}"
                    ) from e

            self.ledger.mark_uninstalled(name)
        except AddonError as e:
            raise self._tag(e, name)

        logger.info(f"[{name}] Uninstall completed successfully")
        return {
            "success": True,
            "addon": name,
            "version": entry.version,
            "skipped": False,
            "objects": len(objects),
            "message": f"{name} uninstalled successfully",
        }

    def install_addons(
        self, addons: Iterable[AddonDeclaration], deadline: float | None = None
    ) -> dict[str, Any]:
        """Install addons in declared order, stopping at the first failure.

        Returns:
            Dict with:
            - success: bool
            - results: dict of addon name -> result
            - message: summary message

        Raises:
            AddonError: From the first addon that fails
        """
        return self._run_all(self.install, addons, deadline, "installed")

    def uninstall_addons(
        self, addons: Iterable[AddonDeclaration], deadline: float | None = None
    ) -> dict[str, Any]:
        """Uninstall addons in declared order, stopping at the first failure."""
        return self._run_all(self.uninstall, addons, deadline, "uninstalled")

    def _run_all(self, step, addons, deadline, verb: str) -> dict[str, Any]:
        addons = list(addons)
        if not addons:
            return {"success": True, "results": {}, "message": "No addons specified"}

        results = {}
        for addon in addons:
            logger.info(f"Processing addon: {addon.name}")
            results[addon.name] = step(addon, deadline=deadline)

        skipped = sum(1 for r in results.values() if r.get("skipped"))
        message = f"Addons: {len(results) - skipped}/{len(results)} {verb}"
        if skipped > 0:
            message += f", {skipped} unchanged"

        return {"success": True, "results": results, "message": message}
