"""Project lifecycle controller — install, run, upgrade, uninstall.

The controller is the only component that mutates a
:class:`~jx.core.models.Registry`.  It reaches git and external processes
exclusively through the protocols in :mod:`jx.core.protocols`, which are
injected at construction time.

Guarantees
----------
* A failed install never leaves a registry entry, and removes the clone
  it created.
* ``upgrade`` and ``uninstall`` resolve every name before touching any
  project; a single unknown name aborts the batch with no mutation.
* Batches run strictly in order and stop at the first failure; projects
  already processed keep their new state.
* Nothing is persisted here; saving is the caller's job.
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
from pathlib import Path

from jx.core.models import ProjectRecord, Registry
from jx.core.protocols import CommandRunner, RepositoryGateway
from jx.exceptions import (
    AlreadyInstalledError,
    CommandExecutionError,
    EmptyCommandError,
    ExternalToolError,
    InvalidInstallError,
    NameRequiredError,
    NotInstalledError,
    UninstallError,
)

LOGGER = logging.getLogger(__name__)

BUILD_TARGET: str = "installDist"
"""Gradle task producing ``build/install/<name>/bin/<name>``."""


# ---------------------------------------------------------------------------
# Naming helpers (pure)
# ---------------------------------------------------------------------------

def derive_project_name(url: str) -> str:
    """Return the repository name encoded in *url*.

    ``https://host/org/echo.git`` and ``git@host:org/echo.git`` both
    yield ``echo``.

    Raises
    ------
    NameRequiredError
        When no usable name can be derived.
    """
    base = url.strip().rstrip("/").rsplit("/", 1)[-1]
    base = base.rsplit(":", 1)[-1]
    stem = os.path.splitext(base)[0]
    if not stem or stem in (".", ".."):
        raise NameRequiredError(
            f"Unable to derive a project name from {url!r}.",
            hint="Pass --name explicitly.",
        )
    return stem


def project_directory(app_dir: Path, url: str) -> Path:
    """Return the clone directory for *url* inside *app_dir*."""
    return app_dir / derive_project_name(url)


def default_build_command(directory: Path, *, windows: bool) -> str:
    """Return the Gradle wrapper invocation for *directory*."""
    wrapper = "gradlew.bat" if windows else "gradlew"
    return f"{directory / wrapper} {BUILD_TARGET}"


def default_run_command(directory: Path, name: str, *, windows: bool) -> str:
    """Return the path of the launcher Gradle's ``installDist`` produces."""
    executable = f"{name}.exe" if windows else name
    return str(directory / "build" / "install" / name / "bin" / executable)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class LifecycleController:
    """Drives the ``Absent → Installed → (Upgraded* | Absent)`` state machine.

    Parameters
    ----------
    registry:
        The registry loaded for this invocation.  Mutated in place.
    gateway:
        Any object satisfying :class:`RepositoryGateway`.
    runner:
        Any object satisfying :class:`CommandRunner`.
    system:
        Platform name as reported by :func:`platform.system`.  Defaults to
        the current platform; only used to pick default commands.
    """

    def __init__(
        self,
        registry: Registry,
        gateway: RepositoryGateway,
        runner: CommandRunner,
        *,
        system: str | None = None,
    ) -> None:
        self._registry: Registry = registry
        self._gateway: RepositoryGateway = gateway
        self._runner: CommandRunner = runner
        self._windows: bool = (system or platform.system()) == "Windows"

    @property
    def registry(self) -> Registry:
        return self._registry

    # ------------------------------------------------------------------
    # install
    # ------------------------------------------------------------------

    def install(
        self,
        url: str,
        directory: Path,
        name: str,
        build_command: str | None = None,
        run_command: str | None = None,
    ) -> ProjectRecord:
        """Clone, build, and register a project.

        Raises
        ------
        NameRequiredError
            If *name* is blank.
        AlreadyInstalledError
            If *name* is already registered.  Nothing is cloned.
        CloneError
            If cloning fails.  Nothing is rolled back because nothing was
            created.
        DetachedOrEmptyRepoError, EmptyCommandError, CommandExecutionError
            After the clone is removed again.
        """
        name = name.strip()
        if not name:
            raise NameRequiredError("Project name is required.")
        if name in self._registry:
            raise AlreadyInstalledError(
                f"{name} is already installed.",
                hint=f"Run 'jx upgrade {name}' or pick another --name.",
            )

        LOGGER.info("Cloning %s into %s", url, directory)
        repository = self._gateway.clone(url, directory)

        try:
            revision = self._gateway.head_revision(repository)
            build = build_command or default_build_command(directory, windows=self._windows)
            LOGGER.info("Building %s with %r", name, build)
            self._runner.run(directory, build, interactive=False)
        except Exception:
            self._rollback(directory)
            raise

        record = ProjectRecord(
            name=name,
            repository_path=directory,
            source_url=url,
            revision=revision,
            build_command=build,
            run_command=run_command
            or default_run_command(directory, name, windows=self._windows),
        )
        self._registry.add(record)
        LOGGER.info("Installed %s at %s", name, record.short_revision)
        return record

    def _rollback(self, directory: Path) -> None:
        LOGGER.debug("Rolling back install, removing %s", directory)
        shutil.rmtree(directory, ignore_errors=True)
        if directory.exists():
            LOGGER.warning("Could not fully remove %s after a failed install", directory)

    # ------------------------------------------------------------------
    # run
    # ------------------------------------------------------------------

    def run(self, name: str, *extra_args: str) -> None:
        """Execute an installed project interactively.

        A non-zero exit of the launched program is logged and otherwise
        ignored: interactive programs may exit however they like.

        Raises
        ------
        NameRequiredError
            If *name* is blank.
        NotInstalledError
            If *name* is not registered.
        InvalidInstallError
            If the project's directory no longer exists.  The record is
            left in place.
        EmptyCommandError
            If the stored run command is blank.
        """
        if not name.strip():
            raise NameRequiredError("Project name is required.")
        record = self._registry.get(name)
        if record is None:
            raise NotInstalledError(f"{name} is not installed.")
        if not record.is_valid():
            raise InvalidInstallError(
                f"{name} install is invalid.",
                hint=(
                    f"{record.repository_path} no longer exists. "
                    f"Run 'jx uninstall {name}' and install it again."
                ),
            )

        if not record.run_command.strip():
            raise EmptyCommandError(f"{name} has no run command.")

        command_line = " ".join([record.run_command, *extra_args])
        try:
            self._runner.run(record.repository_path, command_line, interactive=True)
        except CommandExecutionError as exc:
            LOGGER.warning("%s exited unsuccessfully: %s", name, exc)

    # ------------------------------------------------------------------
    # upgrade
    # ------------------------------------------------------------------

    def upgrade(self, *names: str) -> list[ProjectRecord]:
        """Pull, rebuild, and refresh the revision of each named project.

        Returns the records as they stand after the upgrade.

        Raises
        ------
        NameRequiredError
            If *names* is empty.
        NotInstalledError
            If any name is unknown.  No project is touched.
        NotARepositoryError, FetchError, EmptyCommandError, CommandExecutionError
            Aborts the batch; earlier projects keep their upgrade.
        """
        upgraded: list[ProjectRecord] = []
        for record in self._resolve(names):
            repository = self._gateway.open(record.repository_path)
            LOGGER.info("Fetching %s", record.name)
            self._gateway.fetch(repository)
            LOGGER.info("Rebuilding %s with %r", record.name, record.build_command)
            self._runner.run(record.repository_path, record.build_command, interactive=False)

            try:
                revision = self._gateway.head_revision(repository)
            except ExternalToolError as exc:
                LOGGER.warning("Keeping previous revision of %s: %s", record.name, exc)
                upgraded.append(record)
                continue

            updated = record.with_revision(revision)
            self._registry.replace(updated)
            upgraded.append(updated)
            LOGGER.info("Upgraded %s to %s", record.name, updated.short_revision)
        return upgraded

    # ------------------------------------------------------------------
    # uninstall
    # ------------------------------------------------------------------

    def uninstall(self, *names: str) -> list[ProjectRecord]:
        """Delete each named project's directory and registry entry.

        Returns the removed records.

        Raises
        ------
        NameRequiredError
            If *names* is empty.
        NotInstalledError
            If any name is unknown.  No project is touched.
        UninstallError
            If a directory cannot be deleted.  Aborts the batch; earlier
            projects stay removed.
        """
        removed: list[ProjectRecord] = []
        for record in self._resolve(names):
            path = record.repository_path
            if path.exists():
                LOGGER.info("Removing %s", path)
                try:
                    shutil.rmtree(path)
                except OSError as exc:
                    raise UninstallError(f"Failed to remove {path}: {exc}") from exc
            removed.append(self._registry.remove(record.name))
            LOGGER.info("Uninstalled %s", record.name)
        return removed

    # ------------------------------------------------------------------
    # Batch validation
    # ------------------------------------------------------------------

    def _resolve(self, names: tuple[str, ...]) -> list[ProjectRecord]:
        """Map every name to its record before any of them is mutated."""
        if not names:
            raise NameRequiredError("Project name is required.")
        records: list[ProjectRecord] = []
        for name in dict.fromkeys(names):
            record = self._registry.get(name)
            if record is None:
                raise NotInstalledError(f"{name} is not installed.")
            records.append(record)
        return records

