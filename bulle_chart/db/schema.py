"""
SQLite schema DDL for the key-value backend.

The taxonomy is persisted as independently keyed JSON collections, so the
database holds a single ``kv_store`` table: one row per logical collection
or counter. The statement uses ``IF NOT EXISTS`` so ``apply_schema()`` is
idempotent.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

_DDL_KV_STORE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key         TEXT    NOT NULL PRIMARY KEY,
    value       TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

ALL_TABLE_NAMES: tuple[str, ...] = ("kv_store",)


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create every table if missing.

    Args:
        conn: Open SQLite connection.
    """
    conn.executescript(_DDL_KV_STORE)
    conn.commit()
    logger.debug("Schema applied: %s", ", ".join(ALL_TABLE_NAMES))
