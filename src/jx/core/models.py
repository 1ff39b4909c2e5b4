"""Domain models for jx.

:class:`ProjectRecord` and :class:`Repository` are **frozen** dataclasses:
immutable value objects.  :class:`Registry` is the one mutable structure:
an in-memory mapping of project name to record that the lifecycle
controller owns for the duration of a CLI invocation.  Persistence lives
in :mod:`jx.infra.registry_store`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace
from pathlib import Path

REVISION_SIZE: int = 20
"""Length in bytes of a commit identifier."""


# ---------------------------------------------------------------------------
# Repository handle
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Repository:
    """A local git working copy returned by the repository gateway."""

    path: Path
    """Top-level directory of the working copy."""


# ---------------------------------------------------------------------------
# Installed project
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ProjectRecord:
    """Persisted metadata of one installed project."""

    name: str
    """Unique registry key."""

    repository_path: Path
    """Absolute path of the cloned working copy."""

    source_url: str
    """URL the project was cloned from."""

    revision: bytes
    """Last-synced commit identifier (:data:`REVISION_SIZE` bytes)."""

    build_command: str
    """Command used to (re)build the project."""

    run_command: str
    """Command prefix used to execute the project."""

    @property
    def short_revision(self) -> str:
        """First seven hex digits of :attr:`revision`."""
        return self.revision.hex()[:7]

    def is_valid(self) -> bool:
        """Return ``True`` when the working copy still exists on disk."""
        return self.repository_path.is_dir()

    def with_revision(self, revision: bytes) -> ProjectRecord:
        """Return a copy of this record pointing at *revision*."""
        return replace(self, revision=revision)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class Registry:
    """Mutable mapping of project name to :class:`ProjectRecord`.

    Iteration yields records in insertion order, which is also the order
    they are written to disk.
    """

    def __init__(self, records: Iterable[ProjectRecord] = ()) -> None:
        self._records: dict[str, ProjectRecord] = {}
        for record in records:
            self.add(record)

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return len(self._records) > 0

    def __iter__(self) -> Iterator[ProjectRecord]:
        return iter(list(self._records.values()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Registry):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"Registry({list(self._records)!r})"

    def names(self) -> list[str]:
        """Return registered names in insertion order."""
        return list(self._records)

    def get(self, name: str) -> ProjectRecord | None:
        """Return the record for *name*, or ``None``."""
        return self._records.get(name)

    def add(self, record: ProjectRecord) -> None:
        """Insert a new record.

        Raises
        ------
        KeyError
            When a record with the same name already exists.
        """
        if record.name in self._records:
            raise KeyError(record.name)
        self._records[record.name] = record

    def replace(self, record: ProjectRecord) -> None:
        """Overwrite the existing record with the same name."""
        if record.name not in self._records:
            raise KeyError(record.name)
        self._records[record.name] = record

    def remove(self, name: str) -> ProjectRecord:
        """Remove and return the record for *name*."""
        return self._records.pop(name)
