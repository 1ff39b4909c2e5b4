"""CLI application entry point and command routing for jx.

This module is the **sole error boundary** for the entire application.
It catches :class:`~jx.exceptions.JxError`, ``KeyboardInterrupt``, and
any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No lifecycle rules live here; all work is delegated to
  :class:`~jx.core.lifecycle.LifecycleController`.
* The registry is loaded once before a lifecycle command runs and saved
  once after it, even when the command fails part-way through a batch,
  so that projects already upgraded or removed stay that way on disk.
* ``print()`` is forbidden; the Rich console is used exclusively.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable

from jx.cli import exit_codes
from jx.cli.console import console
from jx.config import Settings, load_settings, setup_logging
from jx.core.lifecycle import LifecycleController, project_directory
from jx.core.models import Registry
from jx.exceptions import JxError
from jx.infra.command_runner import SubprocessCommandRunner
from jx.infra.git_gateway import GitGateway
from jx.infra.registry_store import RegistryStore
from jx.infra.tool_detector import require_toolchain
from jx.version import __version__

Handler = Callable[[argparse.Namespace, LifecycleController, Settings], int]

_LIFECYCLE_COMMANDS: frozenset[str] = frozenset({"install", "run", "upgrade", "uninstall"})


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="jx",
        description="JVM application executor.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        metavar="LEVEL",
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Overrides JX_LOG_LEVEL.",
    )
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    install = commands.add_parser("install", help="Install a JVM application")
    install.add_argument("--git", required=True, metavar="URL", help="The URL of the project's git repository")
    install.add_argument(
        "--name",
        default=None,
        help="The NAME of the project (default: the name of the project's git repository)",
    )
    install.add_argument(
        "--build",
        default=None,
        metavar="COMMAND",
        help="The COMMAND to build the project (default: ./gradlew installDist)",
    )
    install.add_argument(
        "--execute",
        default=None,
        metavar="COMMAND",
        help="The COMMAND to execute the project (default: ./build/install/$name/bin/$name)",
    )

    run = commands.add_parser("run", help="Execute an installed JVM application")
    run.add_argument("name", nargs="?", default=None, help="Name of the installed project to execute")
    run.add_argument("args", nargs=argparse.REMAINDER, help="Arguments passed to the project")

    upgrade = commands.add_parser("upgrade", help="Upgrade installed JVM application(s)")
    upgrade.add_argument("names", nargs="*", metavar="NAME", help="Names of projects to upgrade")

    uninstall = commands.add_parser("uninstall", help="Uninstall JVM application(s)")
    uninstall.add_argument("names", nargs="*", metavar="NAME", help="Names of projects to uninstall")

    commands.add_parser("list", help="List installed JVM applications")
    commands.add_parser("doctor", help="Check that git and java are available")
    return parser


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------

def _handle_install(
    args: argparse.Namespace, controller: LifecycleController, settings: Settings,
) -> int:
    from jx.cli.progress import run_with_status

    url: str = args.git
    directory = project_directory(settings.app_dir, url)
    name: str = args.name or directory.name
    run_with_status(
        "Installing...",
        f"🚀 Installed {name}!",
        lambda: controller.install(url, directory, name, args.build, args.execute),
        poll_interval=settings.poll_interval,
    )
    return exit_codes.SUCCESS


def _handle_run(
    args: argparse.Namespace, controller: LifecycleController, settings: Settings,
) -> int:
    controller.run(args.name or "", *args.args)
    return exit_codes.SUCCESS


def _handle_upgrade(
    args: argparse.Namespace, controller: LifecycleController, settings: Settings,
) -> int:
    from jx.cli.progress import run_with_status

    names: list[str] = args.names
    run_with_status(
        "Upgrading...",
        f"🛠 Upgraded {', '.join(names)}!",
        lambda: controller.upgrade(*names),
        poll_interval=settings.poll_interval,
    )
    return exit_codes.SUCCESS


def _handle_uninstall(
    args: argparse.Namespace, controller: LifecycleController, settings: Settings,
) -> int:
    from jx.cli.progress import run_with_status

    names: list[str] = args.names
    run_with_status(
        "Uninstalling...",
        f"✨ Uninstalled {', '.join(names)}!",
        lambda: controller.uninstall(*names),
        poll_interval=settings.poll_interval,
    )
    return exit_codes.SUCCESS


def _handle_list(
    args: argparse.Namespace, controller: LifecycleController, settings: Settings,
) -> int:
    from jx.cli.listing import render_projects

    return render_projects(controller.registry)


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from jx.cli.doctor import run_doctor

    return run_doctor()


_HANDLERS: dict[str, Handler] = {
    "install": _handle_install,
    "run": _handle_run,
    "upgrade": _handle_upgrade,
    "uninstall": _handle_uninstall,
    "list": _handle_list,
}


def _build_controller(registry: Registry) -> LifecycleController:
    """Wire the lifecycle controller to the real git and process backends."""
    return LifecycleController(registry, GitGateway(), SubprocessCommandRunner())


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the jx CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = load_settings()
    setup_logging(args.log_level or settings.log_level)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    if args.command == "doctor":
        return _handle_doctor()

    if args.command in _LIFECYCLE_COMMANDS:
        require_toolchain()

    store = RegistryStore(settings.registry_file)
    registry = store.load()
    try:
        return _HANDLERS[args.command](args, _build_controller(registry), settings)
    finally:
        store.save(registry)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    Wraps :func:`main` and guarantees the process never exits with a raw
    stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except JxError as exc:
        from rich.markup import escape

        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
