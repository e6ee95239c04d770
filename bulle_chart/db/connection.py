"""
Opening the SQLite dataset.

``open_database()`` is the single entry point: it resolves the file from
``StorageConfig``, applies the ``kv_store`` schema and yields the connection.
Pending changes are committed on a clean exit and rolled back when an
exception escapes. ``SqliteBackend`` also commits after each write, so a
failed command keeps the collections it already saved.

Usage::

    from bulle_chart.db.connection import open_database

    with open_database(config.storage) as conn:
        store = TaxonomyStore(CollectionStore(SqliteBackend(conn)))
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional

from bulle_chart.db.schema import apply_schema

if TYPE_CHECKING:
    from bulle_chart.config import StorageConfig

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


@contextmanager
def open_database(
    storage: "StorageConfig",
    db_path: Optional[str] = None,
) -> Iterator[sqlite3.Connection]:
    """Yield a connection to the dataset with the schema in place.

    Args:
        storage: Storage section of ``AppConfig`` (path and busy timeout).
        db_path: Overrides ``storage.db_path`` (the CLI ``--db-path`` flag).

    Yields:
        ``sqlite3.Connection`` with ``sqlite3.Row`` rows.
    """
    path = db_path or storage.db_path
    if path != MEMORY_PATH:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path, timeout=storage.busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row
    try:
        # another CLI process may hold the write lock
        conn.execute(f"PRAGMA busy_timeout = {int(storage.busy_timeout_ms)};")
        apply_schema(conn)
        logger.debug("Dataset open: %s", path)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        logger.debug("Changes to %s rolled back", path)
        raise
    finally:
        conn.close()
