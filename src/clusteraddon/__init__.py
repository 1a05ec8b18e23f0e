"""ClusterAddon controller.

Installs and removes the Kubernetes objects behind the addons declared on
ClusterAddon resources, and keeps reconciling until the cluster matches.
"""

from importlib.metadata import PackageNotFoundError, version

# Read version from package metadata with fallback
try:
    __version__ = version("clusteraddon-controller")
except PackageNotFoundError:
    # Fallback for development/testing environments
    __version__ = "0.1.0"

__all__ = ["__version__"]
