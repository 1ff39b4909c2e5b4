"""Tests for registry persistence (infra/registry_store.py)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import REVISION_A, REVISION_B, make_record

from jx.core.models import Registry
from jx.exceptions import RegistryCorruptError
from jx.infra.registry_store import RegistryStore, decode_registry, encode_registry


@pytest.fixture()
def store(tmp_path: Path) -> RegistryStore:
    return RegistryStore(tmp_path / "app" / "config.json")


def _write(store: RegistryStore, payload: object) -> None:
    store.path.parent.mkdir(parents=True, exist_ok=True)
    store.path.write_text(json.dumps(payload), encoding="utf-8")


def _entry(**overrides: object) -> dict[str, object]:
    entry: dict[str, object] = {
        "repository": "/home/me/.jx/echo",
        "url": "https://github.com/c-fraser/echo.git",
        "reference": list(REVISION_A),
        "build": "/home/me/.jx/echo/gradlew installDist",
        "execute": "/home/me/.jx/echo/build/install/echo/bin/echo",
    }
    entry.update(overrides)
    return entry


# ---------------------------------------------------------------------------
# load
# ---------------------------------------------------------------------------

class TestLoad:
    def test_missing_file_yields_empty_registry_and_creates_directory(
        self, store: RegistryStore,
    ) -> None:
        registry = store.load()

        assert len(registry) == 0
        assert store.directory.is_dir()
        assert not store.path.exists()

    def test_reads_projects(self, store: RegistryStore) -> None:
        _write(store, {"projects": {"echo": _entry()}})

        record = store.load().get("echo")

        assert record is not None
        assert record.repository_path == Path("/home/me/.jx/echo")
        assert record.source_url == "https://github.com/c-fraser/echo.git"
        assert record.revision == REVISION_A
        assert record.build_command.endswith("gradlew installDist")
        assert record.run_command.endswith("bin/echo")

    def test_accepts_hex_reference(self, store: RegistryStore) -> None:
        _write(store, {"projects": {"echo": _entry(reference=REVISION_B.hex())}})
        assert store.load().get("echo").revision == REVISION_B  # type: ignore[union-attr]

    def test_null_projects_is_empty(self, store: RegistryStore) -> None:
        _write(store, {"projects": None})
        assert len(store.load()) == 0

    def test_invalid_json_is_fatal(self, store: RegistryStore) -> None:
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json", encoding="utf-8")

        with pytest.raises(RegistryCorruptError, match="Failed to parse"):
            store.load()

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"projects": []},
            {"projects": {"echo": "nope"}},
            {"projects": {"echo": {"url": "x"}}},
            {"projects": {"echo": _entry(reference=[1, 2, 3])}},
            {"projects": {"echo": _entry(reference=[300] * 20)}},
            {"projects": {"echo": _entry(reference="zz")}},
            {"projects": {"echo": _entry(reference=True)}},
            {"projects": {"echo": _entry(build=7)}},
        ],
    )
    def test_malformed_documents_are_fatal(self, store: RegistryStore, payload: object) -> None:
        _write(store, payload)
        with pytest.raises(RegistryCorruptError):
            store.load()


# ---------------------------------------------------------------------------
# save
# ---------------------------------------------------------------------------

class TestSave:
    def test_round_trip(self, store: RegistryStore, tmp_path: Path) -> None:
        registry = Registry(
            [make_record(tmp_path, "alpha"), make_record(tmp_path, "beta", revision=REVISION_B)]
        )

        store.save(registry)

        assert store.load() == registry

    def test_document_shape(self, store: RegistryStore, tmp_path: Path) -> None:
        record = make_record(tmp_path)
        store.save(Registry([record]))

        document = json.loads(store.path.read_text(encoding="utf-8"))
        assert document == {
            "projects": {
                "echo": {
                    "repository": str(record.repository_path),
                    "url": record.source_url,
                    "reference": list(REVISION_A),
                    "build": record.build_command,
                    "execute": record.run_command,
                }
            }
        }

    def test_save_replaces_previous_contents(self, store: RegistryStore, tmp_path: Path) -> None:
        store.save(Registry([make_record(tmp_path, "alpha")]))
        store.save(Registry([make_record(tmp_path, "beta")]))

        assert store.load().names() == ["beta"]

    def test_no_temporary_files_left_behind(self, store: RegistryStore, tmp_path: Path) -> None:
        store.save(Registry([make_record(tmp_path)]))
        assert [p.name for p in store.directory.iterdir()] == ["config.json"]

    def test_empty_registry_removes_file_and_directory(
        self, store: RegistryStore, tmp_path: Path,
    ) -> None:
        store.save(Registry([make_record(tmp_path)]))
        assert store.path.exists()

        store.save(Registry())

        assert not store.directory.exists()
        assert len(store.load()) == 0

    def test_empty_registry_without_directory_is_noop(self, store: RegistryStore) -> None:
        store.save(Registry())
        assert not store.directory.exists()


# ---------------------------------------------------------------------------
# Pure codec
# ---------------------------------------------------------------------------

class TestCodec:
    def test_encode_preserves_insertion_order(self, tmp_path: Path) -> None:
        registry = Registry([make_record(tmp_path, "zeta"), make_record(tmp_path, "alpha")])
        assert list(encode_registry(registry)["projects"]) == ["zeta", "alpha"]

    def test_decode_error_mentions_source(self) -> None:
        with pytest.raises(RegistryCorruptError, match="custom.json"):
            decode_registry([], source="custom.json")
