"""Addon lifecycle management.

This module installs and removes the Kubernetes objects that implement each
addon and records installed addons in a ledger.
"""

from clusteraddon.addons.ledger import InstallationLedger, LedgerEntry, LedgerRecord
from clusteraddon.addons.manager import AddonManager
from clusteraddon.addons.manifest import ManifestFetcher, ManifestObject
from clusteraddon.addons.operator import ResourceOperator
from clusteraddon.addons.registry import AddonManifestSource, AddonRegistry
from clusteraddon.addons.versions import ReleasePoller

__all__ = [
    "AddonManager",
    "AddonManifestSource",
    "AddonRegistry",
    "InstallationLedger",
    "LedgerEntry",
    "LedgerRecord",
    "ManifestFetcher",
    "ManifestObject",
    "ReleasePoller",
    "ResourceOperator",
]
