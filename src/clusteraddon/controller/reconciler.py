"""ClusterAddon reconciliation.

One call to :meth:`ClusterAddonReconciler.reconcile` is one pass: it reads the
resource fresh, moves it one step through its lifecycle and tells the caller
when to look at it again.

    no status                 -> Pending
    live, no finalizer        -> add finalizer, requeue now
    live, finalizer           -> install addons -> Success (recheck later)
                                                 -> Failed  (retry after backoff)
    deleting, finalizer       -> uninstall addons -> drop finalizer
                                                  -> Failed (retry after backoff)
    deleting, no finalizer    -> nothing to do
"""

import logging
import time
from dataclasses import dataclass

from clusteraddon.addons.manager import AddonManager
from clusteraddon.cluster.kube import ClusterAddonClient
from clusteraddon.cluster.resource import FINALIZER, ClusterAddon, StatusCode
from clusteraddon.utils.errors import AddonError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    """When the resource should be looked at again.

    ``requeue`` asks for another pass right away; ``requeue_after`` asks for
    one after a delay in seconds. ``error`` is set when the pass failed and
    the status carries the reason.
    """

    requeue: bool = False
    requeue_after: float | None = None
    error: AddonError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class ClusterAddonReconciler:
    """Drives ClusterAddon resources towards their declared addon set."""

    def __init__(
        self,
        resources: ClusterAddonClient,
        manager: AddonManager,
        failure_requeue_seconds: float = 30.0,
        success_requeue_seconds: float = 300.0,
        pass_timeout: float | None = None,
        finalizer: str = FINALIZER,
    ):
        self.resources = resources
        self.manager = manager
        self.failure_requeue_seconds = failure_requeue_seconds
        self.success_requeue_seconds = success_requeue_seconds
        self.pass_timeout = pass_timeout
        self.finalizer = finalizer

    def reconcile(self, name: str) -> ReconcileResult:
        """Run one reconciliation pass for the named resource.

        Raises:
            ApiException: If reading the resource or persisting its status
                or finalizers fails; the caller retries with backoff
        """
        logger.info(f"Reconciling ClusterAddon {name}")

        instance = self.resources.get(name)
        if instance is None:
            logger.debug(f"ClusterAddon {name} no longer exists")
            return ReconcileResult()

        if instance.status_code is None:
            instance.set_status(StatusCode.PENDING)
            self.resources.update_status(instance)

        deadline = time.monotonic() + self.pass_timeout if self.pass_timeout else None

        if instance.is_being_deleted:
            return self._finalize(instance, deadline)

        if not instance.has_finalizer(self.finalizer):
            instance.add_finalizer(self.finalizer)
            self.resources.update(instance)
            logger.info(f"Added finalizer to ClusterAddon {name}")
            return ReconcileResult(requeue=True)

        return self._install(instance, deadline)

    def _install(self, instance: ClusterAddon, deadline: float | None) -> ReconcileResult:
        try:
            summary = self.manager.install_addons(instance.addons, deadline=deadline)
        except AddonError as e:
            reason = f"failed to install addon '{e.addon}': {e}"
            return self._fail(instance, reason, e)

        logger.info(f"ClusterAddon {instance.name}: {summary['message']}")
        instance.set_status(StatusCode.SUCCESS)
        self.resources.update_status(instance)
        return ReconcileResult(requeue_after=self.success_requeue_seconds)

    def _finalize(self, instance: ClusterAddon, deadline: float | None) -> ReconcileResult:
        if not instance.has_finalizer(self.finalizer):
            return ReconcileResult()

        try:
            summary = self.manager.uninstall_addons(instance.addons, deadline=deadline)
        except AddonError as e:
            reason = f"failed to uninstall addon '{e.addon}': {e}"
            return self._fail(instance, reason, e)

        logger.info(f"ClusterAddon {instance.name}: {summary['message']}")
        instance.remove_finalizer(self.finalizer)
        self.resources.update(instance)
        logger.info(f"Uninstall of addons for ClusterAddon {instance.name} was successful")
        return ReconcileResult()

    def _fail(self, instance: ClusterAddon, reason: str, error: AddonError) -> ReconcileResult:
        logger.error(f"ClusterAddon {instance.name}: {reason}", exc_info=error)
        instance.set_status(StatusCode.FAILED, reason)
        self.resources.update_status(instance)
        return ReconcileResult(requeue_after=self.failure_requeue_seconds, error=error)
