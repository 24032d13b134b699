"""Tests for the key-value stores and the JSON helpers in lureiq/storage/kv_store.py."""

from __future__ import annotations

import logging

import pytest

from lureiq.db.connection import get_connection
from lureiq.storage.kv_store import (
    InMemoryKeyValueStore,
    SqliteKeyValueStore,
    read_json,
    write_json,
)


class TestInMemoryStore:
    def test_get_set_delete(self, memory_store):
        assert memory_store.get("k") is None
        memory_store.set("k", "v")
        assert memory_store.get("k") == "v"
        memory_store.delete("k")
        assert memory_store.get("k") is None

    def test_delete_missing_key_is_noop(self, memory_store):
        memory_store.delete("never-set")
        assert memory_store.keys() == []

    def test_initial_contents_copied(self):
        seed = {"a": "1"}
        store = InMemoryKeyValueStore(seed)
        store.set("b", "2")
        assert seed == {"a": "1"}
        assert sorted(store.keys()) == ["a", "b"]


class TestSqliteStore:
    def test_roundtrip_and_overwrite(self, sqlite_store):
        sqlite_store.set("k", "first")
        sqlite_store.set("k", "second")
        assert sqlite_store.get("k") == "second"

    def test_values_survive_a_new_instance(self, tmp_path):
        path = str(tmp_path / "persist.db")
        SqliteKeyValueStore(path).set("slot", "kept")
        assert SqliteKeyValueStore(path).get("slot") == "kept"

    def test_delete(self, sqlite_store):
        sqlite_store.set("k", "v")
        sqlite_store.delete("k")
        sqlite_store.delete("k")
        assert sqlite_store.get("k") is None

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "store.db"
        SqliteKeyValueStore(str(path))
        assert path.exists()

    def test_schema_has_single_row_per_key(self, sqlite_store):
        sqlite_store.set("k", "1")
        sqlite_store.set("k", "2")
        with get_connection(sqlite_store.db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM kv_store").fetchone()[0]
        assert count == 1

    def test_memory_path_rejected(self):
        with pytest.raises(ValueError, match="InMemoryKeyValueStore"):
            SqliteKeyValueStore(":memory:")


class TestJsonHelpers:
    def test_write_then_read(self, memory_store):
        write_json(memory_store, "q", [{"id": "a"}])
        assert read_json(memory_store, "q") == [{"id": "a"}]

    def test_absent_key_returns_fallback(self, memory_store):
        assert read_json(memory_store, "missing", fallback=[]) == []

    def test_corrupt_value_returns_fallback_and_warns(self, memory_store, caplog):
        memory_store.set("q", "{not json")
        with caplog.at_level(logging.WARNING, logger="lureiq.storage.kv_store"):
            assert read_json(memory_store, "q", fallback=[]) == []
        assert "Discarding unreadable value" in caplog.text

    def test_empty_string_returns_fallback(self, memory_store):
        memory_store.set("q", "")
        assert read_json(memory_store, "q", fallback="x") == "x"
