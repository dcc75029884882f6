"""
capwalk CLI.

Commands:
- collect: Run a traversal from seed identifiers
- check: Show the validated configuration and every dropped entry
"""

from __future__ import annotations

import json
import logging
import platform
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from capwalk._version import get_version
from capwalk.core.collector import InterfaceCollector
from capwalk.core.errors import CapwalkError
from capwalk.core.manifest import MANIFEST_NAME, build_collector, load_manifest

app = typer.Typer(
    help="Capability-driven type discovery.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Output formats for collect and check."""

    TABLE = "table"
    JSON = "json"


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"capwalk {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """capwalk - walk a type universe by capability."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load(manifest: str, auto_reset: bool | None = None) -> InterfaceCollector:
    try:
        return build_collector(load_manifest(Path(manifest)), auto_reset=auto_reset)
    except CapwalkError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


@app.command("collect")
def collect_command(
    seeds: list[str] = typer.Argument(..., help="Seed identifiers"),
    manifest: str = typer.Option(MANIFEST_NAME, "--manifest", "-m"),
    format: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--format",
        "-f",
        help="Output format: table (default) or json",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=0,
        help="Stop after this many results",
    ),
    no_reset: bool = typer.Option(
        False,
        "--no-reset",
        help="Keep state between seeds: each seed runs as its own traversal",
    ),
) -> None:
    """Collect every identifier reachable from SEEDS that satisfies a capability.

    Examples:
        capwalk collect Dog                        # Table output
        capwalk collect Dog Cat --format json      # JSON for scripts
        capwalk collect Dog --limit 1              # First match only
    """
    collector = _load(manifest, auto_reset=False if no_reset else None)

    results: list[str] = []
    traversals = [collector.collect(seed) for seed in seeds] if no_reset else [
        collector.collect(*seeds)
    ]
    try:
        for traversal in traversals:
            remaining = None if limit is None else limit - len(results)
            if remaining is not None and remaining <= 0:
                break
            results.extend(traversal if remaining is None else traversal.take(remaining))
    except Exception as e:
        # Discovery functions are user code and may raise anything
        err_console.print(f"[red]Discovery failed: {e}[/red]")
        raise typer.Exit(code=1)

    if format == OutputFormat.JSON:
        typer.echo(json.dumps({"seeds": seeds, "results": results}, indent=2))
        return

    table = Table(title=f"Collected from {', '.join(seeds)}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Identifier", style="cyan")
    for index, identifier in enumerate(results, start=1):
        table.add_row(str(index), identifier)
    console.print(table)
    if not results:
        console.print("[yellow]No matching identifiers.[/yellow]")


def _validation_data(collector: InterfaceCollector) -> dict[str, Any]:
    validation = collector.validation
    return {
        "capabilities": validation.capabilities,
        "discovery": validation.discovery_map,
        "dropped": [entry.model_dump(mode="json") for entry in validation.dropped],
    }


@app.command("check")
def check_command(
    manifest: str = typer.Option(MANIFEST_NAME, "--manifest", "-m"),
    format: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--format",
        "-f",
        help="Output format: table (default) or json",
    ),
    strict: bool = typer.Option(False, "--strict", help="Exit 1 if any entry was dropped"),
) -> None:
    """Validate a manifest and show what the collector will use."""
    collector = _load(manifest)
    data = _validation_data(collector)

    if format == OutputFormat.JSON:
        typer.echo(json.dumps(data, indent=2))
    else:
        _print_validation(data)

    if strict and data["dropped"]:
        raise typer.Exit(code=1)


def _print_validation(data: dict[str, Any]) -> None:
    """Render human-readable validation summary."""
    console.print("[bold]Capabilities[/bold] (priority order)")
    if data["capabilities"]:
        for index, capability in enumerate(data["capabilities"], start=1):
            console.print(f"  {index}. {capability}")
    else:
        console.print("  [yellow]none[/yellow]")

    table = Table(title="Discovery functions")
    table.add_column("Capability", style="cyan")
    table.add_column("Function", style="green")
    table.add_column("Targets")
    for capability, functions in data["discovery"].items():
        for name, targets in functions.items():
            table.add_row(capability, f"{name}()", ", ".join(targets))
    console.print(table)

    if not data["dropped"]:
        console.print("[green]✓ No entries dropped[/green]")
        return

    dropped = Table(title="Dropped entries", title_style="red")
    dropped.add_column("Kind")
    dropped.add_column("Name", style="red")
    dropped.add_column("Owner")
    dropped.add_column("Reason")
    for entry in data["dropped"]:
        dropped.add_row(entry["kind"], entry["name"], entry["owner"] or "", entry["reason"])
    console.print(dropped)


def main() -> None:
    """Entry point for the capwalk command."""
    app()


if __name__ == "__main__":
    main()
