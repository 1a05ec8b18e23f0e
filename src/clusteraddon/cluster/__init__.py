"""Kubernetes cluster access and the ClusterAddon resource model."""

from clusteraddon.cluster.kube import ClusterAddonClient, KubeClients, load_kube_config
from clusteraddon.cluster.resource import FINALIZER, AddonDeclaration, ClusterAddon, StatusCode

__all__ = [
    "AddonDeclaration",
    "ClusterAddon",
    "ClusterAddonClient",
    "FINALIZER",
    "KubeClients",
    "StatusCode",
    "load_kube_config",
]
