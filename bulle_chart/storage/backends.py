"""
Key-value persistence backends.

The taxonomy lives in a handful of independently keyed string values (JSON
collections and integer counters). Every backend implements the same four
calls, so the collection store never knows where the strings end up:

    get_item(key)           -> str | None
    set_item(key, value)    -> None   (raises StorageWriteError on failure)
    remove_item(key)        -> None
    keys()                  -> list[str]

Backends
--------
MemoryBackend : plain dict; used by tests and by ``--backend memory``.
SqliteBackend : one ``kv_store`` table on a caller-managed connection.
                Each write is committed immediately so a crash never loses
                a completed mutation.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from typing import Optional

from bulle_chart.db.repositories.kv_repo import KeyValueRepository
from bulle_chart.errors import StorageWriteError

logger = logging.getLogger(__name__)


class KeyValueBackend(ABC):
    """String-to-string persistent map."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string or ``None`` when absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``.

        Raises:
            StorageWriteError: If the value could not be persisted.
        """

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key``; a missing key is not an error."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return all stored keys."""


class MemoryBackend(KeyValueBackend):
    """In-process dict backend."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqliteBackend(KeyValueBackend):
    """Backend storing every key as one row of ``kv_store``.

    The connection must already have the schema applied
    (``bulle_chart.db.schema.apply_schema``).
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._repo = KeyValueRepository(conn)

    def get_item(self, key: str) -> Optional[str]:
        return self._repo.get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            self._repo.upsert(key, value)
            self.conn.commit()
        except sqlite3.Error as exc:
            self.conn.rollback()
            raise StorageWriteError(f"Could not write key '{key}': {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            self._repo.delete(key)
            self.conn.commit()
        except sqlite3.Error as exc:
            self.conn.rollback()
            raise StorageWriteError(f"Could not remove key '{key}': {exc}") from exc

    def keys(self) -> list[str]:
        return self._repo.keys()
