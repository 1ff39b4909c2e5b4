"""``jx doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising whether
the runtime environment can clone, build, and run JVM projects.
"""

from __future__ import annotations

import platform
import sys

from jx.cli import exit_codes
from jx.cli.console import console
from jx.infra.tool_detector import REQUIRED_TOOLS, ToolStatus, detect_tool
from jx.version import __version__

Check = tuple[str, str, str]

_OK = "[green]OK[/green]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _jx_version_check() -> Check:
    return "jx", __version__, _OK


def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = _OK if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _tool_check(status: ToolStatus) -> Check:
    """Return (label, value, status) for a required executable."""
    if status.found:
        return status.name, str(status.path) if status.path else "found", _OK
    return status.name, "not found", "[red]FAIL[/red]"


def _os_check() -> Check:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, _OK


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a Rich summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when every check passes,
        :data:`exit_codes.GENERAL_ERROR` otherwise.
    """
    from rich.table import Table

    tools = [detect_tool(name) for name in REQUIRED_TOOLS]
    checks = [
        _jx_version_check(),
        _python_version_check(),
        *(_tool_check(status) for status in tools),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    table = Table(
        title="jx doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=10)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()

    for status in tools:
        if status.found or not status.install_commands:
            continue
        console.print(f"[yellow]{status.name} is not installed.[/yellow]")
        console.print("Install using one of the following commands:\n")
        for cmd in status.install_commands:
            console.print(f"  [bold]{cmd}[/bold]")
        console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
