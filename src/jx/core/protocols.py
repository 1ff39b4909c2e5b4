"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations, so the lifecycle rules can be exercised with
in-memory fakes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from jx.core.models import Repository


class RepositoryGateway(Protocol):
    """Contract for version-control backends.

    Implementations must map all backend-specific failures to
    :class:`~jx.exceptions.ExternalToolError` subclasses.
    """

    def clone(self, url: str, destination: Path) -> Repository:
        """Materialise a full working copy of *url* at *destination*.

        Raises
        ------
        CloneError
            When *destination* is non-empty, *url* is unreachable, or
            authentication fails.
        """
        ...  # pragma: no cover

    def open(self, path: Path) -> Repository:
        """Attach to the existing working copy at *path*.

        Raises
        ------
        NotARepositoryError
            When *path* is not the top level of a working copy.
        """
        ...  # pragma: no cover

    def head_revision(self, repository: Repository) -> bytes:
        """Return the checked-out commit identifier.

        Raises
        ------
        DetachedOrEmptyRepoError
            When HEAD does not resolve to a commit.
        """
        ...  # pragma: no cover

    def fetch(self, repository: Repository) -> None:
        """Synchronise *repository* with its remote.

        Being already up to date is success, not an error.

        Raises
        ------
        FetchError
            When the remote cannot be reached or the update fails.
        """
        ...  # pragma: no cover


class CommandRunner(Protocol):
    """Contract for executing build and run commands."""

    def run(self, directory: Path, command_line: str, *, interactive: bool) -> None:
        """Execute *command_line* with *directory* as working directory.

        Raises
        ------
        EmptyCommandError
            When *command_line* is blank.
        CommandExecutionError
            When the process cannot start or exits non-zero.
        """
        ...  # pragma: no cover
