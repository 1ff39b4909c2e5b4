"""``jx list`` — tabular view of installed projects."""

from __future__ import annotations

from collections.abc import Iterable

from jx.cli import exit_codes
from jx.cli.console import console
from jx.core.models import ProjectRecord


def _status(record: ProjectRecord) -> str:
    return "[green]OK[/green]" if record.is_valid() else "[red]INVALID[/red]"


def render_projects(records: Iterable[ProjectRecord]) -> int:
    """Print a Rich table with one row per installed project."""
    from rich.table import Table

    rows = list(records)
    if not rows:
        console.print("[dim]No projects installed.[/dim]")
        return exit_codes.SUCCESS

    table = Table(
        title="Installed projects",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Name", style="bold")
    table.add_column("Revision", justify="center")
    table.add_column("URL")
    table.add_column("Repository")
    table.add_column("Status", justify="center")

    for record in sorted(rows, key=lambda r: r.name):
        table.add_row(
            record.name,
            record.short_revision,
            record.source_url,
            str(record.repository_path),
            _status(record),
        )

    console.print(table)
    return exit_codes.SUCCESS
