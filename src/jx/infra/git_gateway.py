"""git CLI backed implementation of :class:`~jx.core.protocols.RepositoryGateway`.

This module is the **only** place in the codebase that invokes ``git``.
Every failure is caught here and re-raised as a typed
:class:`~jx.exceptions.ExternalToolError` subclass, so nothing raw escapes
the infrastructure boundary.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from jx.core.models import REVISION_SIZE, Repository
from jx.exceptions import (
    CloneError,
    DetachedOrEmptyRepoError,
    ExternalToolError,
    FetchError,
    NotARepositoryError,
)
from jx.infra.command_runner import detached_process_options

LOGGER = logging.getLogger(__name__)


class GitGateway:
    """Concrete :class:`RepositoryGateway` driving the ``git`` executable.

    Usage::

        gateway = GitGateway()
        repo = gateway.clone("https://github.com/c-fraser/echo.git", Path("/tmp/echo"))
        revision = gateway.head_revision(repo)
    """

    def __init__(self, executable: str = "git") -> None:
        self._executable: str = executable

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def clone(self, url: str, destination: Path) -> Repository:
        """Clone *url* into *destination*.

        Raises
        ------
        CloneError
            When *destination* is non-empty or git reports a failure.
        """
        if destination.exists() and (not destination.is_dir() or any(destination.iterdir())):
            raise CloneError(
                f"Cannot clone into {destination}: destination is not empty.",
                hint="Remove the directory or install under another name.",
            )
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CloneError(f"Cannot create {destination.parent}: {exc}") from exc

        self._git(
            ["clone", "--quiet", "--", url, str(destination)],
            error=CloneError,
            message=f"Failed to clone {url}",
            hint="Check the URL, your network, and your git credentials.",
        )
        return Repository(path=destination)

    def open(self, path: Path) -> Repository:
        """Attach to the working copy at *path*.

        Raises
        ------
        NotARepositoryError
            When *path* is missing or is not a working-copy top level.
        """
        if not path.is_dir():
            raise NotARepositoryError(f"{path} does not exist.")
        completed = self._git(
            ["rev-parse", "--show-toplevel"],
            cwd=path,
            error=NotARepositoryError,
            message=f"{path} is not a git repository",
        )
        toplevel = Path(completed.stdout.strip())
        if toplevel.resolve() != path.resolve():
            raise NotARepositoryError(
                f"{path} is not a git repository (found {toplevel} instead).",
            )
        return Repository(path=path)

    def head_revision(self, repository: Repository) -> bytes:
        """Return the commit HEAD points at.

        Raises
        ------
        DetachedOrEmptyRepoError
            When HEAD does not resolve to a commit, e.g. before the first
            commit.
        """
        completed = self._git(
            ["rev-parse", "--verify", "--quiet", "HEAD^{commit}"],
            cwd=repository.path,
            error=DetachedOrEmptyRepoError,
            message=f"{repository.path} has no commit checked out",
        )
        digest = completed.stdout.strip()
        try:
            revision = bytes.fromhex(digest)
        except ValueError as exc:
            raise DetachedOrEmptyRepoError(f"Unexpected revision {digest!r}.") from exc
        if len(revision) != REVISION_SIZE:
            raise DetachedOrEmptyRepoError(
                f"Unsupported revision {digest!r}: expected {REVISION_SIZE} bytes.",
            )
        return revision

    def fetch(self, repository: Repository) -> None:
        """Fetch and fast-forward *repository* from its upstream.

        Raises
        ------
        FetchError
            When the remote is unreachable or the branch has diverged.
        """
        completed = self._git(
            ["pull", "--ff-only"],
            cwd=repository.path,
            error=FetchError,
            message=f"Failed to update {repository.path}",
            hint="Local commits or a missing upstream prevent a fast-forward.",
        )
        if _is_up_to_date(completed.stdout):
            LOGGER.debug("%s already up to date", repository.path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _git(
        self,
        args: list[str],
        *,
        error: type[ExternalToolError],
        message: str,
        cwd: Path | None = None,
        hint: str | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run ``git`` and raise *error* on any failure."""
        command = [self._executable, *args]
        LOGGER.debug("Running %s", command)
        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                env=_git_environment(),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                check=False,
                **detached_process_options(),
            )
        except OSError as exc:
            raise error(f"{message}: {exc}", hint="Is git installed and on PATH?") from exc

        if completed.returncode != 0:
            detail = completed.stderr.strip().splitlines()
            suffix = f": {detail[-1]}" if detail else "."
            raise error(f"{message}{suffix}", hint=hint)
        return completed


def _git_environment() -> dict[str, str]:
    """Return the process environment with interactive prompts disabled."""
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


def _is_up_to_date(output: str) -> bool:
    normalized = output.lower().replace("-", " ")
    return "already up to date" in normalized
