"""CLI module for environment comparison and schema sync.

Provides commands to list configured environments and to compare (and
optionally sync) their schemas and custom API keys.

Usage:
    env-compare environments
    env-compare compare
    env-compare compare --source production --target staging --check schema
    env-compare compare --columns-to-ignore tmp,legacy --monitor
    env-compare --config ci/env-compare.toml compare --sync --silent

Commands:
    environments - List environments defined in the config file
    compare      - Compare environments, optionally sync the schema

Exit codes:
    0 - success (differences may have been reported)
    1 - configuration or run error
    2 - differences detected in monitor mode
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from env_compare.adapters.snapshot import SnapshotConsoleClient
from env_compare.config.loader import load_compare_config
from env_compare.config.models import Check, CompareConfig, RunOptions
from env_compare.runner import DifferencesDetectedError, RunResult, run_checks

console = Console()

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_DIFFERENCES = 2


# ============================================================================
# Helpers
# ============================================================================


def _load_config(args: argparse.Namespace) -> CompareConfig | None:
    config_path = Path(args.config) if getattr(args, "config", None) else None
    try:
        return load_compare_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return None


def _run_options(args: argparse.Namespace, config: CompareConfig) -> RunOptions:
    """Merge CLI flags over the ``[run]`` table."""
    options = config.run.model_copy(deep=True)

    if args.source:
        options.source = args.source
    if args.target:
        options.targets = list(args.target)
    if args.check:
        options.checks = [Check(check) for check in args.check]
    if args.columns_to_ignore:
        options.columns_to_ignore = [c.strip() for c in args.columns_to_ignore.split(",") if c.strip()]
    if args.sync:
        options.sync = True
    if args.silent:
        options.silent = True
    if args.monitor:
        options.monitor = True

    return options


def _print_result(result: RunResult) -> None:
    console.print()
    if not result.has_differences:
        console.print("[bold green]v[/bold green] No differences found")
        return

    console.print("[bold yellow]![/bold yellow] Differences found")
    if result.sync_result is not None:
        style = "green" if result.sync_result.success else "red"
        console.print(f"[{style}]{result.sync_result.format_summary()}[/{style}]")


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_compare(args: argparse.Namespace) -> int:
    """Async implementation for compare command.

    Args:
        args: Parsed arguments with config, source, target, check,
            columns_to_ignore, sync, silent and monitor.

    Returns:
        0 on success, 1 on error, 2 on differences in monitor mode.
    """
    config = _load_config(args)
    if config is None:
        return EXIT_ERROR

    options = _run_options(args, config)
    names = [options.source, *options.targets]

    missing = [name for name in names if name not in config.environments]
    if missing:
        console.print(f"[red]Error: Unknown environment(s): {', '.join(missing)}[/red]")
        return EXIT_ERROR

    if options.source in options.targets:
        console.print(f"[red]Error: Source is also a target: {options.source}[/red]")
        return EXIT_ERROR

    without_snapshot = [name for name in names if not config.environments[name].snapshot]
    if without_snapshot:
        console.print(
            f"[red]Error: No snapshot configured for: {', '.join(without_snapshot)}[/red]"
        )
        return EXIT_ERROR

    client = SnapshotConsoleClient(
        {config.environments[name].id: config.environments[name].snapshot for name in names}
    )

    console.print("Comparing environments...", style="dim")
    console.print(f"  Source: [bold]{options.source}[/bold]")
    console.print(f"  Targets: [bold cyan]{', '.join(options.targets)}[/bold cyan]")

    try:
        result = await run_checks(
            client,
            [config.environments[name].id for name in names],
            options,
        )
    except DifferencesDetectedError as e:
        _print_result(e.result)
        console.print("[bold red]x[/bold red] Differences detected (monitor mode)")
        return EXIT_DIFFERENCES
    except Exception as e:
        console.print(f"\n[bold red]x[/bold red] {e}")
        return EXIT_ERROR

    _print_result(result)
    if result.sync_result is not None and not result.sync_result.success:
        return EXIT_ERROR
    return EXIT_OK


# ============================================================================
# Sync command wrappers
# ============================================================================


def cmd_compare(args: argparse.Namespace) -> int:
    """Compare environments and optionally sync the schema.

    Wraps the async implementation with ``asyncio.run()``.

    Args:
        args: Parsed CLI arguments.

    Returns:
        Exit code.
    """
    return asyncio.run(_async_compare(args))


def cmd_environments(args: argparse.Namespace) -> int:
    """List environments from the config file.

    Reads only the local TOML config.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 on success, 1 if the config cannot be loaded.
    """
    config = _load_config(args)
    if config is None:
        return EXIT_ERROR

    table = Table(title="Environments", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Name")
    table.add_column("Id")
    table.add_column("Snapshot")
    table.add_column("Description")

    for name, env in config.environments.items():
        if name == config.run.source:
            marker = "[bold green]S[/bold green]"
        elif name in config.run.targets:
            marker = "[cyan]T[/cyan]"
        else:
            marker = " "
        table.add_row(marker, name, env.id, env.snapshot or "", env.description)

    console.print(table)
    console.print("\n[bold green]S[/bold green] = source, [cyan]T[/cyan] = target")

    return EXIT_OK


# ============================================================================
# Main entry point
# ============================================================================


def main() -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors or monitored differences).
    """
    parser = argparse.ArgumentParser(
        prog="env-compare",
        description="Compare and sync schemas across application environments",
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to env-compare.toml (default: ./env-compare.toml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # environments command
    p_envs = subparsers.add_parser(
        "environments",
        help="List configured environments",
    )
    p_envs.set_defaults(func=cmd_environments)

    # compare command
    p_compare = subparsers.add_parser(
        "compare",
        help="Compare environments and optionally sync the schema",
    )
    p_compare.add_argument(
        "--source",
        "-s",
        default=None,
        help="Source environment name (overrides [run].source)",
    )
    p_compare.add_argument(
        "--target",
        "-t",
        action="append",
        default=None,
        help="Target environment name; repeat for several targets",
    )
    p_compare.add_argument(
        "--check",
        action="append",
        choices=[check.value for check in Check],
        default=None,
        help="Comparison to run; repeat for several (default: all)",
    )
    p_compare.add_argument(
        "--columns-to-ignore",
        default=None,
        help="Comma-separated column names excluded from comparison",
    )
    p_compare.add_argument(
        "--sync",
        action="store_true",
        help="Sync the source schema to the targets when differences are found",
    )
    p_compare.add_argument(
        "--silent",
        action="store_true",
        help="Do not ask for confirmation before changing targets",
    )
    p_compare.add_argument(
        "--monitor",
        action="store_true",
        help=f"Exit with code {EXIT_DIFFERENCES} when differences are found",
    )
    p_compare.set_defaults(func=cmd_compare)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
