"""CLI interface for the ClusterAddon controller.

This module provides the command-line interface: running the controller,
reconciling a single resource once, and inspecting the ledger and registry.
"""

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from clusteraddon import __version__
from clusteraddon.addons import (
    AddonManager,
    AddonRegistry,
    InstallationLedger,
    ManifestFetcher,
    ReleasePoller,
    ResourceOperator,
)
from clusteraddon.cluster import ClusterAddonClient, KubeClients, load_kube_config
from clusteraddon.config import ControllerConfig
from clusteraddon.controller import ClusterAddonReconciler, Controller
from clusteraddon.display import create_ledger_table, create_registry_table, create_result_table
from clusteraddon.utils.errors import ConfigurationError
from clusteraddon.utils.validation import validate_resource_name

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "info") -> None:
    """Setup logging with Rich handler.

    Args:
        log_level: Logging level (debug, info, warning, error)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=console,
                show_time=True,
                show_path=False,
                rich_tracebacks=True,
            )
        ],
    )
    # The kubernetes client logs every request body at DEBUG.
    logging.getLogger("kubernetes").setLevel(max(level, logging.INFO))


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="clusteraddon",
        description="ClusterAddon controller - declarative addon lifecycle for Kubernetes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output with debug logging",
    )

    parser.add_argument(
        "--kubeconfig",
        type=str,
        help="Path to kubeconfig (defaults to in-cluster config, then $KUBECONFIG)",
    )

    parser.add_argument(
        "--context",
        type=str,
        help="Kubeconfig context to use",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ClusterAddon controller {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Watch ClusterAddon resources and reconcile them")

    reconcile = subparsers.add_parser("reconcile", help="Run one reconcile pass and exit")
    reconcile.add_argument("name", help="ClusterAddon name")

    subparsers.add_parser("ledger", help="Show installed addons")
    subparsers.add_parser("addons", help="Show supported addons")

    return parser


def build_reconciler(
    config: ControllerConfig, clients: KubeClients, registry: AddonRegistry | None = None
) -> ClusterAddonReconciler:
    """Wire the reconciler and its collaborators from configuration."""
    registry = registry or AddonRegistry()
    ledger = InstallationLedger(
        clients.core,
        name=config.ledger_name,
        namespace=config.ledger_namespace,
        max_attempts=config.ledger_retry_attempts,
    )
    manager = AddonManager(
        registry=registry,
        ledger=ledger,
        fetcher=ManifestFetcher(timeout=config.fetch_timeout),
        operator=ResourceOperator(clients.dynamic, field_manager=config.field_manager),
        core=clients.core,
        poller=ReleasePoller(token=config.github_token, cache_ttl=config.version_cache_ttl),
        drift_reapply=config.drift_reapply,
    )
    return ClusterAddonReconciler(
        ClusterAddonClient(clients.custom),
        manager,
        failure_requeue_seconds=config.failure_requeue_seconds,
        success_requeue_seconds=config.success_requeue_seconds,
        pass_timeout=config.pass_timeout,
    )


def run_controller(config: ControllerConfig, clients: KubeClients) -> None:
    """Run the controller until SIGINT or SIGTERM."""
    reconciler = build_reconciler(config, clients)
    controller = Controller(
        reconciler,
        workers=config.workers,
        recheck_interval=config.success_requeue_seconds,
    )
    controller.run()


def run_once(config: ControllerConfig, clients: KubeClients, name: str) -> None:
    """Reconcile one ClusterAddon and print the outcome."""
    validate_resource_name(name)
    reconciler = build_reconciler(config, clients)
    result = reconciler.reconcile(name)
    instance = reconciler.resources.get(name)
    if instance is None:
        console.print(f"[yellow]ClusterAddon '{name}' not found[/yellow]")
        return
    console.print(create_result_table(name, result, instance.status))


def show_ledger(config: ControllerConfig, clients: KubeClients) -> None:
    ledger = InstallationLedger(
        clients.core, name=config.ledger_name, namespace=config.ledger_namespace
    )
    console.print(create_ledger_table(ledger.read()))


def main() -> None:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args()

    try:
        config = ControllerConfig()
        config.validate()

        log_level = "debug" if args.verbose else config.log_level
        setup_logging(log_level)

        if args.command == "addons":
            console.print(create_registry_table(AddonRegistry()))
            return

        load_kube_config(args.kubeconfig, args.context)
        clients = KubeClients()

        if args.command == "run":
            run_controller(config, clients)
        elif args.command == "reconcile":
            run_once(config, clients, args.name)
        elif args.command == "ledger":
            show_ledger(config, clients)

    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(2)
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted[/dim]")
        sys.exit(0)
    except Exception as e:
        console.print(f"[red]Fatal error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
