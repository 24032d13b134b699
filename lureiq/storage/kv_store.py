"""
Durable string-keyed store for the scheduled prompt slot and feedback queue.

``KeyValueStore`` is the narrow interface the scheduler and queue depend on:
``get`` / ``set`` / ``delete`` of string values. Two implementations:

  - ``SqliteKeyValueStore``  — durable, one row per key in ``kv_store``.
  - ``InMemoryKeyValueStore`` — for tests and throwaway sessions.

``read_json`` / ``write_json`` layer JSON on top. Unreadable or unparseable
stored values are treated as absent: the fallback is returned and a warning
logged, so corruption never takes the app down.

All methods are synchronous. Inside the asyncio app that makes every
read-modify-write atomic with respect to other coroutines, since nothing
can interleave between the read and the write.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from lureiq.db.connection import get_connection
from lureiq.db.schema import apply_schema

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Opaque durable map of string keys to string values."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or ``None`` if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; no-op if absent."""


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Survives scheduler restarts within one process."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class SqliteKeyValueStore(KeyValueStore):
    """SQLite-backed store; opens a short-lived connection per operation.

    Args:
        db_path: Database file path (created on first use).
        wal_mode: Enable WAL journal mode.
        busy_timeout_ms: Lock wait before ``OperationalError``.
    """

    def __init__(
        self,
        db_path: str,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
    ) -> None:
        if db_path == ":memory:":
            raise ValueError(
                "SqliteKeyValueStore needs a file path; use InMemoryKeyValueStore instead."
            )
        self.db_path = db_path
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms
        with self._connect() as conn:
            apply_schema(conn)

    def _connect(self):
        return get_connection(
            self.db_path, wal_mode=self.wal_mode, busy_timeout_ms=self.busy_timeout_ms
        )

    def get(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = strftime('%Y-%m-%dT%H:%M:%SZ', 'now')
                """,
                (key, value),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))


# ── JSON helpers ──────────────────────────────────────────────────────────────


def read_json(store: KeyValueStore, key: str, fallback: Any = None) -> Any:
    """Decode the JSON stored under ``key``; ``fallback`` if absent or corrupt."""
    raw = store.get(key)
    if not raw:
        return fallback
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("Discarding unreadable value under '%s': %s", key, exc)
        return fallback


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value, default=str))
