"""Reconciliation of ClusterAddon resources."""

from clusteraddon.controller.controller import Controller
from clusteraddon.controller.reconciler import ClusterAddonReconciler, ReconcileResult

__all__ = ["ClusterAddonReconciler", "Controller", "ReconcileResult"]
