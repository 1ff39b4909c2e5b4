"""Shared pytest fixtures and configuration for the jx test suite.

Guidelines
----------
* No internet access in any test.
* Lifecycle tests use the in-memory gateway/runner fakes below.
* Every test gets its own ``JX_HOME`` so the real ``~/.jx`` is never touched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from jx.core.lifecycle import LifecycleController
from jx.core.models import ProjectRecord, Registry, Repository
from jx.exceptions import (
    CloneError,
    CommandExecutionError,
    EmptyCommandError,
    JxError,
    NotARepositoryError,
)

REVISION_A = bytes(range(20))
REVISION_B = bytes(range(20, 40))


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

@dataclass
class FakeGateway:
    """In-memory :class:`RepositoryGateway` that creates real directories."""

    revision: bytes = REVISION_A
    clone_error: JxError | None = None
    head_errors: list[JxError | None] = field(default_factory=list)
    fetch_errors: dict[Path, JxError] = field(default_factory=dict)
    calls: list[tuple[str, object]] = field(default_factory=list)

    def clone(self, url: str, destination: Path) -> Repository:
        self.calls.append(("clone", url))
        if self.clone_error is not None:
            raise self.clone_error
        if destination.exists() and any(destination.iterdir()):
            raise CloneError(f"{destination} is not empty")
        destination.mkdir(parents=True, exist_ok=True)
        (destination / "build.gradle.kts").write_text("// fixture\n", encoding="utf-8")
        return Repository(path=destination)

    def open(self, path: Path) -> Repository:
        self.calls.append(("open", path))
        if not path.is_dir():
            raise NotARepositoryError(f"{path} is not a git repository")
        return Repository(path=path)

    def head_revision(self, repository: Repository) -> bytes:
        self.calls.append(("head", repository.path))
        if self.head_errors:
            error = self.head_errors.pop(0)
            if error is not None:
                raise error
        return self.revision

    def fetch(self, repository: Repository) -> None:
        self.calls.append(("fetch", repository.path))
        error = self.fetch_errors.get(repository.path)
        if error is not None:
            raise error


@dataclass
class RecordingRunner:
    """:class:`CommandRunner` that records invocations instead of running them."""

    failures: dict[str, JxError] = field(default_factory=dict)
    calls: list[tuple[Path, str, bool]] = field(default_factory=list)

    def run(self, directory: Path, command_line: str, *, interactive: bool) -> None:
        self.calls.append((directory, command_line, interactive))
        if not command_line.split():
            raise EmptyCommandError("Empty command.")
        for prefix, error in self.failures.items():
            if command_line.startswith(prefix):
                raise error

    def fail(self, prefix: str, returncode: int = 1) -> None:
        self.failures[prefix] = CommandExecutionError(
            f"{prefix} exited with status {returncode}.", returncode=returncode,
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def jx_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``JX_HOME`` at a per-test directory."""
    home = tmp_path / "jx-home"
    monkeypatch.setenv("JX_HOME", str(home))
    monkeypatch.delenv("JX_LOG_LEVEL", raising=False)
    monkeypatch.delenv("JX_POLL_INTERVAL", raising=False)
    return home


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture()
def registry() -> Registry:
    return Registry()


@pytest.fixture()
def controller(registry: Registry, gateway: FakeGateway, runner: RecordingRunner) -> LifecycleController:
    return LifecycleController(registry, gateway, runner, system="Linux")


def make_record(tmp_path: Path, name: str = "echo", **overrides: object) -> ProjectRecord:
    """Factory with sensible defaults; creates the repository directory."""
    directory = tmp_path / "projects" / name
    directory.mkdir(parents=True, exist_ok=True)
    defaults: dict[str, object] = {
        "name": name,
        "repository_path": directory,
        "source_url": f"https://github.com/c-fraser/{name}.git",
        "revision": REVISION_A,
        "build_command": f"{directory}/gradlew installDist",
        "run_command": f"{directory}/build/install/{name}/bin/{name}",
    }
    defaults.update(overrides)
    return ProjectRecord(**defaults)  # type: ignore[arg-type]
