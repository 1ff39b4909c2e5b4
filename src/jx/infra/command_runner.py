"""Infrastructure: execute build and run commands.

Implements :class:`~jx.core.protocols.CommandRunner` on top of
:func:`subprocess.run`.

Rules
-----
* The command line is split on whitespace only with no shell and no quoting.
  Arguments containing spaces cannot be expressed.
* Interactive commands inherit the terminal's stdin/stdout/stderr.
* Non-interactive output is captured and attached to the error hint.
* Non-interactive commands run in their own session (process group on
  Windows), so a Ctrl+C at the terminal reaches jx and not the build.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Any

from jx.exceptions import CommandExecutionError, EmptyCommandError

LOGGER = logging.getLogger(__name__)

_OUTPUT_TAIL_LINES = 20


class SubprocessCommandRunner:
    """Concrete :class:`CommandRunner` backed by :mod:`subprocess`."""

    def run(self, directory: Path, command_line: str, *, interactive: bool) -> None:
        """Execute *command_line* in *directory*.

        Raises
        ------
        EmptyCommandError
            When *command_line* contains no program.
        CommandExecutionError
            When the program cannot be started or exits non-zero.
        """
        args = split_command(command_line)
        LOGGER.debug("Executing %s in %s (interactive=%s)", args, directory, interactive)

        try:
            if interactive:
                completed = subprocess.run(args, cwd=directory, check=False)
            else:
                completed = subprocess.run(
                    args,
                    cwd=directory,
                    stdin=subprocess.DEVNULL,
                    capture_output=True,
                    check=False,
                    **detached_process_options(),
                )
        except OSError as exc:
            raise CommandExecutionError(
                f"Failed to start {args[0]}: {exc}",
            ) from exc

        if completed.returncode != 0:
            raise CommandExecutionError(
                f"{args[0]} exited with status {completed.returncode}.",
                hint=_output_tail(completed),
                returncode=completed.returncode,
            )


def split_command(command_line: str) -> list[str]:
    """Split *command_line* into program and arguments.

    Raises
    ------
    EmptyCommandError
        When *command_line* is blank.
    """
    args = command_line.split()
    if not args:
        raise EmptyCommandError("Empty command.")
    return args


def _output_tail(completed: subprocess.CompletedProcess[bytes]) -> str | None:
    """Return the last lines of captured output, or ``None``."""
    chunks = [
        stream.decode("utf-8", errors="replace")
        for stream in (completed.stdout, completed.stderr)
        if stream
    ]
    lines = "\n".join(chunks).strip().splitlines()
    if not lines:
        return None
    return "\n".join(lines[-_OUTPUT_TAIL_LINES:])


def detached_process_options() -> dict[str, Any]:
    """Return ``subprocess`` keyword arguments that detach a child from the terminal.

    The terminal delivers SIGINT to its whole foreground process group.
    A child started with these options is outside that group and keeps
    running while jx handles the interrupt.
    """
    if os.name == "nt":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}
