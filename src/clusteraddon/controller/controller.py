"""Controller runtime: kopf handlers driving the ClusterAddon reconciler.

kopf owns the watch, the per-object serialization of change handlers and the
retry scheduling. Every handler funnels into one reconcile pass:

    create / update / resume  -> pass; failure retried after the failure delay
    timer                     -> periodic pass re-verifying installed addons
    delete                    -> pass that uninstalls and releases the finalizer
"""

import logging
import threading
from collections.abc import Callable

import kopf
from kubernetes import client

from clusteraddon.cluster.resource import GROUP, PLURAL, VERSION
from clusteraddon.controller.reconciler import ClusterAddonReconciler, ReconcileResult

logger = logging.getLogger(__name__)

ANNOTATION_PREFIX = "manage.ksctl.com"
REQUEUE_DELAY = 1.0


class Controller:
    """Registers the ClusterAddon handlers with kopf and runs the operator."""

    def __init__(
        self,
        reconciler: ClusterAddonReconciler,
        workers: int = 2,
        recheck_interval: float | None = None,
        watch_timeout: int = 300,
    ):
        """Initialize controller.

        Args:
            reconciler: Reconciler invoked for every handler call
            workers: Size of the thread pool running reconcile passes
            recheck_interval: Seconds between periodic passes (defaults to the
                reconciler's success requeue interval)
            watch_timeout: Server-side timeout of one watch request in seconds
        """
        self.reconciler = reconciler
        self.workers = workers
        self.recheck_interval = recheck_interval or reconciler.success_requeue_seconds
        self.watch_timeout = watch_timeout
        self.registry = kopf.OperatorRegistry()
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self.register(self.registry)

    def configure(self, settings: kopf.OperatorSettings) -> kopf.OperatorSettings:
        """Apply controller settings to kopf.

        The finalizer kopf manages is the ClusterAddon finalizer, and handler
        progress lives in annotations so the status block stays ours.
        """
        settings.persistence.finalizer = self.reconciler.finalizer
        settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(
            prefix=ANNOTATION_PREFIX
        )
        settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(
            prefix=ANNOTATION_PREFIX,
            key="last-handled-configuration",
        )
        settings.execution.max_workers = self.workers
        settings.watching.server_timeout = self.watch_timeout
        return settings

    def register(self, registry: kopf.OperatorRegistry) -> None:
        """Register the ClusterAddon handlers in ``registry``."""
        resource = (GROUP, VERSION, PLURAL)

        on_change: Callable = self.on_change
        for decorator in (kopf.on.create, kopf.on.update, kopf.on.resume):
            on_change = decorator(*resource, registry=registry)(on_change)

        kopf.on.login(registry=registry)(self.login)
        kopf.on.delete(*resource, registry=registry)(self.on_delete)
        kopf.timer(
            *resource,
            registry=registry,
            interval=self.recheck_interval,
            initial_delay=self.recheck_interval,
        )(self.on_timer)

    def login(self, **kwargs) -> kopf.ConnectionInfo:
        """Hand kopf the connection the kubernetes client was configured with."""
        config = client.Configuration.get_default_copy()
        scheme, _, token = (config.api_key or {}).get("authorization", "").partition(" ")
        return kopf.ConnectionInfo(
            server=config.host,
            ca_path=config.ssl_ca_cert,
            insecure=not config.verify_ssl,
            username=config.username or None,
            password=config.password or None,
            scheme=scheme or None,
            token=token or None,
            certificate_path=config.cert_file,
            private_key_path=config.key_file,
        )

    def on_change(self, name: str, **kwargs) -> None:
        self.run_pass(name)

    def on_delete(self, name: str, **kwargs) -> None:
        self.run_pass(name)

    def on_timer(self, name: str, **kwargs) -> None:
        logger.debug(f"Periodic re-verification of ClusterAddon {name}")
        self.run_pass(name)

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(name, threading.Lock())

    def run_pass(self, name: str) -> ReconcileResult:
        """Run one reconcile pass and translate its result for kopf.

        Passes for the same resource never overlap, whichever handler starts
        them.

        Raises:
            kopf.TemporaryError: If the pass failed or asked for another pass
        """
        with self._lock_for(name):
            result = self.reconciler.reconcile(name)

        if result.failed:
            raise kopf.TemporaryError(str(result.error), delay=result.requeue_after)
        if result.requeue:
            raise kopf.TemporaryError(
                f"ClusterAddon {name} needs another pass", delay=REQUEUE_DELAY
            )
        return result

    def run(self, stop_flag: threading.Event | None = None) -> None:
        """Run the operator until ``stop_flag`` is set or a signal arrives."""
        logger.info(f"Starting ClusterAddon controller with {self.workers} worker(s)")
        kopf.run(
            registry=self.registry,
            settings=self.configure(kopf.OperatorSettings()),
            clusterwide=True,
            standalone=True,
            stop_flag=stop_flag,
        )


__all__ = ["ANNOTATION_PREFIX", "Controller"]
