"""
SQLite schema DDL.

The app only needs one table: a string-keyed blob store backing
``SqliteKeyValueStore``. ``apply_schema()`` is idempotent.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

_DDL_KV_STORE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key         TEXT    PRIMARY KEY,
    value       TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

ALL_TABLE_NAMES: tuple[str, ...] = ("kv_store",)


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create the key-value table if it does not exist."""
    conn.execute(_DDL_KV_STORE)
    conn.commit()
    logger.debug("Schema applied: %d table(s) verified.", len(ALL_TABLE_NAMES))
