"""Infrastructure: load and save the project registry file.

The registry is a single UTF-8 JSON document::

    {"projects": {"echo": {"repository": "/home/me/.jx/echo",
                           "url": "https://github.com/c-fraser/echo.git",
                           "reference": [12, 34, ...],
                           "build": "/home/me/.jx/echo/gradlew installDist",
                           "execute": "/home/me/.jx/echo/build/install/echo/bin/echo"}}}

``reference`` is written as an array of 20 integers; a 40-character hex
string is accepted on load as well.  Every save replaces the whole file
atomically.  An empty registry is never persisted: saving it removes the
file together with its directory.

There is no locking.  Two jx processes racing on the same file is
undefined behaviour.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jx.core.models import REVISION_SIZE, ProjectRecord, Registry
from jx.exceptions import RegistryCorruptError, StateConsistencyError

LOGGER = logging.getLogger(__name__)

_FIELDS: tuple[str, ...] = ("repository", "url", "reference", "build", "execute")


class RegistryStore:
    """Reads and writes a :class:`~jx.core.models.Registry` at *path*."""

    def __init__(self, path: Path) -> None:
        self.path: Path = path

    @property
    def directory(self) -> Path:
        return self.path.parent

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self) -> Registry:
        """Return the persisted registry, or an empty one if there is none.

        Creates the containing directory when it does not exist yet.

        Raises
        ------
        StateConsistencyError
            When the directory cannot be created.
        RegistryCorruptError
            When the file exists but cannot be read or parsed.
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StateConsistencyError(
                f"Failed to create application directory {self.directory}: {exc}",
            ) from exc

        if not self.path.exists():
            LOGGER.debug("No registry at %s, starting empty", self.path)
            return Registry()

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise RegistryCorruptError(f"Failed to read {self.path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise RegistryCorruptError(
                f"Failed to parse {self.path}: {exc}",
                hint="Fix or delete the file; jx will not overwrite it.",
            ) from exc

        registry = decode_registry(raw, source=self.path)
        LOGGER.debug("Loaded %d project(s) from %s", len(registry), self.path)
        return registry

    def save(self, registry: Registry) -> None:
        """Persist *registry*, or remove all persisted state if it is empty.

        Raises
        ------
        StateConsistencyError
            When the file cannot be written or the directory removed.
        """
        if not registry:
            self._remove_directory()
            return

        payload = encode_registry(registry)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_fd, tmp_name = tempfile.mkstemp(dir=str(self.directory), prefix=f".{self.path.name}.")
        except OSError as exc:
            raise StateConsistencyError(f"Failed to write {self.path}: {exc}") from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
                handle.write("\n")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StateConsistencyError(f"Failed to write {self.path}: {exc}") from exc
        finally:
            tmp_path.unlink(missing_ok=True)
        LOGGER.debug("Saved %d project(s) to %s", len(registry), self.path)

    def _remove_directory(self) -> None:
        if not self.directory.exists():
            return
        LOGGER.debug("Registry empty, removing %s", self.directory)
        try:
            shutil.rmtree(self.directory)
        except OSError as exc:
            raise StateConsistencyError(
                f"Failed to remove application directory {self.directory}: {exc}",
            ) from exc


# ---------------------------------------------------------------------------
# Serialisation (pure)
# ---------------------------------------------------------------------------

def encode_registry(registry: Registry) -> dict[str, Any]:
    """Return the JSON-ready document for *registry*."""
    return {
        "projects": {
            record.name: {
                "repository": str(record.repository_path),
                "url": record.source_url,
                "reference": list(record.revision),
                "build": record.build_command,
                "execute": record.run_command,
            }
            for record in registry
        }
    }


def decode_registry(raw: object, *, source: Path | str = "registry") -> Registry:
    """Build a :class:`Registry` from a parsed JSON document.

    Raises
    ------
    RegistryCorruptError
        When the document does not have the expected shape.
    """
    if not isinstance(raw, Mapping):
        raise RegistryCorruptError(f"{source}: expected a JSON object at the top level.")
    projects = raw.get("projects")
    if projects is None:
        projects = {}
    if not isinstance(projects, Mapping):
        raise RegistryCorruptError(f"{source}: 'projects' must be an object.")

    records: list[ProjectRecord] = []
    for name, entry in projects.items():
        if not isinstance(entry, Mapping):
            raise RegistryCorruptError(f"{source}: project {name!r} must be an object.")
        missing = [field for field in _FIELDS if field not in entry]
        if missing:
            raise RegistryCorruptError(
                f"{source}: project {name!r} is missing {', '.join(missing)}.",
            )
        for field in ("repository", "url", "build", "execute"):
            if not isinstance(entry[field], str):
                raise RegistryCorruptError(f"{source}: project {name!r} field {field!r} must be a string.")
        records.append(
            ProjectRecord(
                name=str(name),
                repository_path=Path(entry["repository"]),
                source_url=entry["url"],
                revision=_decode_revision(entry["reference"], name=str(name), source=source),
                build_command=entry["build"],
                run_command=entry["execute"],
            )
        )
    return Registry(records)


def _decode_revision(value: object, *, name: str, source: Path | str) -> bytes:
    """Accept either an array of byte values or a hex string."""
    try:
        if isinstance(value, str):
            revision = bytes.fromhex(value)
        elif isinstance(value, list) and all(
            isinstance(item, int) and not isinstance(item, bool) for item in value
        ):
            revision = bytes(value)
        else:
            raise ValueError(f"unsupported type {type(value).__name__}")
    except ValueError as exc:
        raise RegistryCorruptError(f"{source}: project {name!r} has an invalid reference: {exc}") from exc

    if len(revision) != REVISION_SIZE:
        raise RegistryCorruptError(
            f"{source}: project {name!r} reference must be {REVISION_SIZE} bytes, got {len(revision)}.",
        )
    return revision
