"""Tests for CLI table rendering."""

from rich.console import Console

from clusteraddon.addons.ledger import LedgerEntry, LedgerRecord
from clusteraddon.controller.reconciler import ReconcileResult
from clusteraddon.display import create_ledger_table, create_registry_table, create_result_table
from tests.mocks import FIXED_NOW


def _render(table) -> str:
    console = Console(width=200, color_system=None)
    with console.capture() as capture:
        console.print(table)
    return capture.get()


def test_ledger_table():
    """Test installed addons are listed with version and time."""
    record = LedgerRecord(
        entries={
            "stack": LedgerEntry("v1.2.3", FIXED_NOW),
            "monitoring": LedgerEntry(""),
        }
    )

    table = create_ledger_table(record)
    output = _render(table)

    assert table.row_count == 2
    assert "v1.2.3" in output
    assert "2025-03-01T12:00:00Z" in output
    assert "latest" in output
    assert "unknown" in output


def test_empty_ledger_table():
    """Test an empty ledger renders no rows."""
    assert create_ledger_table(LedgerRecord()).row_count == 0


def test_registry_table(registry):
    """Test every supported addon is listed."""
    table = create_registry_table(registry)
    output = _render(table)

    assert table.row_count == 2
    assert "ksctl/ka" in output
    assert "https://example.test/monitoring/latest/install.yaml" in output


def test_result_table_success():
    """Test a successful pass shows the recheck interval."""
    output = _render(
        create_result_table("demo", ReconcileResult(requeue_after=300.0), {"statusCode": "Success"})
    )

    assert "Success" in output
    assert "in 300s" in output


def test_result_table_failure():
    """Test a failed pass shows the failure reason."""
    status = {"statusCode": "Failed", "reasonOfFailure": "unsupported addon: unknown"}

    output = _render(create_result_table("demo", ReconcileResult(requeue_after=30.0), status))

    assert "Failed" in output
    assert "unsupported addon: unknown" in output


def test_result_table_requeue():
    """Test an immediate requeue is reported."""
    output = _render(create_result_table("demo", ReconcileResult(requeue=True), {}))

    assert "immediately" in output
    assert "unknown" in output
