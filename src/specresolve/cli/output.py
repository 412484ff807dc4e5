"""Rich output formatting helpers for the specresolve CLI.

Provides consistent terminal output for per-target resolution results,
resolution failures, and lockfile changes.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from specresolve.core.dependency import Consumer, Specification
from specresolve.exceptions import ResolutionConflict, ResolutionError

console = Console()


def print_resolution(
    result: Mapping[Consumer, Sequence[Specification]],
    head_names: Sequence[str] = (),
) -> None:
    """Print one table per target listing its resolved specifications."""
    heads = set(head_names)
    for consumer, specs in result.items():
        platform = str(consumer.platform) if consumer.platform else "any platform"
        table = Table(
            title=f"{consumer.name} ({platform})", show_header=True, header_style="bold"
        )
        table.add_column("Package", style="bold")
        table.add_column("Version", justify="right")
        table.add_column("Source", style="dim")
        for spec in specs:
            source = "HEAD" if spec.root_name in heads else "release"
            table.add_row(spec.name, str(spec.version), source)
        console.print(table)

    packages = {s.root_name for specs in result.values() for s in specs}
    console.print(
        f"[bold]{len(packages)}[/bold] packages resolved for "
        f"[bold]{len(result)}[/bold] targets"
    )


def print_failure(error: ResolutionError) -> None:
    """Print a resolution failure in a red panel."""
    body = Text(str(error))
    title = "Resolution failed"
    if isinstance(error, ResolutionConflict):
        title += ": " + ", ".join(error.package_names)
    console.print(Panel(body, title=title, border_style="red"))


def print_lock_changes(diff: Mapping[str, Any]) -> None:
    """Print the difference between the previous and the new lockfile."""
    if not (diff["added"] or diff["removed"] or diff["changed"]):
        console.print("[dim]Lockfile unchanged.[/dim]")
        return
    for name in diff["added"]:
        console.print(f"[green]+ {name}[/green]")
    for name in diff["removed"]:
        console.print(f"[red]- {name}[/red]")
    for change in diff["changed"]:
        console.print(f"[yellow]~ {change['name']} {change['old']} -> {change['new']}[/yellow]")


def result_to_json(result: Mapping[Consumer, Sequence[Specification]]) -> dict[str, Any]:
    """Convert a resolution result to a JSON-serializable dict."""
    return {
        consumer.name: {
            "platform": str(consumer.platform) if consumer.platform else None,
            "specifications": [
                {"name": s.name, "version": str(s.version), "head": s.version.head}
                for s in specs
            ],
        }
        for consumer, specs in result.items()
    }
