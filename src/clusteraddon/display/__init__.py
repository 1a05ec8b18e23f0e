"""Terminal rendering for the ClusterAddon CLI."""

from clusteraddon.display.tables import (
    create_ledger_table,
    create_registry_table,
    create_result_table,
)

__all__ = ["create_ledger_table", "create_registry_table", "create_result_table"]
