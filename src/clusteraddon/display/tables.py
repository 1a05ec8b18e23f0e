"""Table rendering utilities for the ClusterAddon CLI."""

from rich.table import Table

from clusteraddon.addons.ledger import LedgerRecord, format_timestamp
from clusteraddon.addons.registry import AddonRegistry
from clusteraddon.controller.reconciler import ReconcileResult


def create_ledger_table(record: LedgerRecord) -> Table:
    """Create a table of installed addons.

    Args:
        record: Ledger snapshot

    Returns:
        Rich Table with one row per installed addon
    """
    table = Table(title="Installed Addons")

    table.add_column("Addon", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Installed At", style="white")

    for name in sorted(record.entries):
        entry = record.entries[name]
        table.add_row(
            name,
            entry.version or "latest",
            format_timestamp(entry.timestamp) if entry.timestamp else "unknown",
        )

    return table


def create_registry_table(registry: AddonRegistry) -> Table:
    """Create a table of supported addons.

    Args:
        registry: Addon registry

    Returns:
        Rich Table with one row per registered addon
    """
    table = Table(title="Supported Addons")

    table.add_column("Addon", style="cyan")
    table.add_column("Release Source", style="white")
    table.add_column("Namespace", style="yellow")
    table.add_column("Latest Manifest", style="white")

    for name in registry.names():
        source = registry.resolve(name)
        table.add_row(
            name,
            f"{source.org}/{source.repo}",
            source.namespace or "-",
            source.manifest_url(""),
        )

    return table


def create_result_table(name: str, result: ReconcileResult, status: dict) -> Table:
    """Create a table describing the outcome of one reconcile pass.

    Args:
        name: ClusterAddon name
        result: Reconcile result
        status: Status block of the resource after the pass

    Returns:
        Rich Table with the pass outcome
    """
    table = Table(title=f"ClusterAddon {name}")

    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    code = status.get("statusCode", "")
    code_style = {"Success": "green", "Failed": "red", "Pending": "yellow"}.get(code, "white")
    table.add_row("Status", f"[{code_style}]{code or 'unknown'}[/{code_style}]")
    table.add_row("Reason", status.get("reasonOfFailure", "") or "-")

    if result.requeue_after:
        next_pass = f"in {result.requeue_after:g}s"
    elif result.requeue:
        next_pass = "immediately"
    else:
        next_pass = "on next change"
    table.add_row("Next Pass", next_pass)

    return table
