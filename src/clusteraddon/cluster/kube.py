"""Kubernetes API access for the ClusterAddon controller."""

import logging
import threading

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic import DynamicClient

from clusteraddon.cluster.resource import GROUP, PLURAL, VERSION, ClusterAddon

logger = logging.getLogger(__name__)


def load_kube_config(kubeconfig: str | None = None, context: str | None = None) -> None:
    """Load in-cluster configuration, falling back to a kubeconfig file.

    Args:
        kubeconfig: Optional kubeconfig path (defaults to $KUBECONFIG or ~/.kube/config)
        context: Optional kubeconfig context name
    """
    if kubeconfig is None and context is None:
        try:
            config.load_incluster_config()
            logger.debug("Loaded in-cluster Kubernetes configuration")
            return
        except config.ConfigException:
            pass
    config.load_kube_config(config_file=kubeconfig, context=context)
    logger.debug("Loaded Kubernetes configuration from kubeconfig")


class KubeClients:
    """Lazily constructed API clients sharing one ApiClient."""

    def __init__(self, api_client: client.ApiClient | None = None):
        self._api_client = api_client
        self._dynamic: DynamicClient | None = None
        self._lock = threading.Lock()

    @property
    def api_client(self) -> client.ApiClient:
        if self._api_client is None:
            self._api_client = client.ApiClient()
        return self._api_client

    @property
    def core(self) -> client.CoreV1Api:
        return client.CoreV1Api(self.api_client)

    @property
    def custom(self) -> client.CustomObjectsApi:
        return client.CustomObjectsApi(self.api_client)

    @property
    def dynamic(self) -> DynamicClient:
        # Discovery runs on construction, so build it once.
        with self._lock:
            if self._dynamic is None:
                self._dynamic = DynamicClient(self.api_client)
            return self._dynamic


def ensure_namespace(core: client.CoreV1Api, name: str) -> bool:
    """Create a namespace if it does not exist.

    Args:
        core: CoreV1Api client
        name: Namespace name

    Returns:
        True if the namespace was created, False if it already existed

    Raises:
        ApiException: If the lookup or creation fails
    """
    try:
        core.read_namespace(name)
        return False
    except ApiException as e:
        if e.status != 404:
            raise

    body = client.V1Namespace(metadata=client.V1ObjectMeta(name=name))
    try:
        core.create_namespace(body)
    except ApiException as e:
        if e.status == 409:
            return False
        raise
    logger.info(f"Created namespace {name}")
    return True


def delete_namespace(core: client.CoreV1Api, name: str) -> bool:
    """Delete a namespace if it exists.

    Args:
        core: CoreV1Api client
        name: Namespace name

    Returns:
        True if a delete was issued, False if the namespace was already gone

    Raises:
        ApiException: If the deletion fails
    """
    try:
        core.delete_namespace(name)
    except ApiException as e:
        if e.status == 404:
            return False
        raise
    logger.info(f"Deleted namespace {name}")
    return True


class ClusterAddonClient:
    """Read and write ClusterAddon resources (cluster-scoped)."""

    def __init__(self, custom: client.CustomObjectsApi):
        self.custom = custom

    def get(self, name: str) -> ClusterAddon | None:
        """Fetch a ClusterAddon by name, or None if it does not exist."""
        try:
            body = self.custom.get_cluster_custom_object(GROUP, VERSION, PLURAL, name)
        except ApiException as e:
            if e.status == 404:
                return None
            raise
        return ClusterAddon(body)

    def update(self, instance: ClusterAddon) -> ClusterAddon:
        """Replace the resource (metadata and spec), refreshing ``instance`` in place."""
        body = self.custom.replace_cluster_custom_object(
            GROUP, VERSION, PLURAL, instance.name, instance.body
        )
        instance.body = body
        return instance

    def update_status(self, instance: ClusterAddon) -> ClusterAddon:
        """Replace the status subresource, refreshing ``instance`` in place."""
        body = self.custom.replace_cluster_custom_object_status(
            GROUP, VERSION, PLURAL, instance.name, instance.body
        )
        instance.body = body
        return instance
