"""
Repository for the ``kv_store`` table.

Each logical collection (professions, categories, criteria, weights,
counters, the version marker) is one row whose ``value`` is a JSON string.
The repository only moves strings; encoding lives in
``storage/collections.py``.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

logger = logging.getLogger(__name__)

_UPSERT_SQL = """
INSERT INTO kv_store (key, value) VALUES (?, ?)
ON CONFLICT(key) DO UPDATE SET
    value      = excluded.value,
    updated_at = strftime('%Y-%m-%dT%H:%M:%SZ', 'now');
"""


class KeyValueRepository:
    """Read/write access to the ``kv_store`` table.

    Attributes:
        conn: Open connection, managed by the caller (see ``open_database()``).
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        logger.debug("kv_store SQL: %s | %s", " ".join(sql.split()), params[:1])
        return self.conn.execute(sql, params)

    def get(self, key: str) -> Optional[str]:
        """Return the raw stored string for ``key``, or ``None``."""
        row = self._execute("SELECT value FROM kv_store WHERE key = ?;", (key,)).fetchone()
        return row["value"] if row else None

    def upsert(self, key: str, value: str) -> None:
        """Insert or replace the value stored under ``key``."""
        self._execute(_UPSERT_SQL, (key, value))

    def delete(self, key: str) -> None:
        self._execute("DELETE FROM kv_store WHERE key = ?;", (key,))

    def keys(self) -> list[str]:
        """Every stored key, sorted."""
        rows = self._execute("SELECT key FROM kv_store ORDER BY key;").fetchall()
        return [r["key"] for r in rows]

    def count(self) -> int:
        row = self._execute("SELECT COUNT(*) AS n FROM kv_store;").fetchone()
        return int(row["n"]) if row else 0
