"""Key-value stores used by the store sink.

Both stores map a feed identifier to the serialized bytes of its latest
round. Writes are upserts (last write wins).
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Protocol

from .errors import StoreError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Abstract interface for an ordered byte store."""

    def put(self, key: str, value: bytes) -> None: ...

    def get(self, key: str) -> bytes | None: ...

    def close(self) -> None: ...


class MemoryStore:
    """Dict-backed store, mostly useful for tests and short-lived runs."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    def put(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def keys(self) -> list[str]:
        return sorted(self._data)

    def close(self) -> None:
        pass


class SqliteStore:
    """SQLite-backed store with one ``rounds`` table.

    The connection may be used from worker threads; a lock serializes access.

    :ivar path: Database file path (``":memory:"`` for a private in-memory db).
    """

    TABLE_DDL = (
        "CREATE TABLE IF NOT EXISTS rounds ("
        "key TEXT PRIMARY KEY, "
        "value BLOB NOT NULL)"
    )

    def __init__(self, path: str | Path = "poller.db") -> None:
        """Open (or create) the database.

        :param path: Database file path.
        :raises StoreError: If the database cannot be opened.
        """
        self.path = str(path)
        self._lock = threading.Lock()
        try:
            self._db = sqlite3.connect(self.path, check_same_thread=False)
            self._db.execute(self.TABLE_DDL)
            self._db.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open store at {self.path}: {e}") from e
        logger.debug("Opened sqlite store at %s", self.path)

    def put(self, key: str, value: bytes) -> None:
        """Insert or replace the value for a key.

        :raises StoreError: On database errors.
        """
        try:
            with self._lock:
                self._db.execute(
                    "INSERT INTO rounds (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, sqlite3.Binary(value)),
                )
                self._db.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to write '{key}': {e}") from e

    def get(self, key: str) -> bytes | None:
        """Get the value for a key, or None if absent.

        :raises StoreError: On database errors.
        """
        try:
            with self._lock:
                row = self._db.execute(
                    "SELECT value FROM rounds WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read '{key}': {e}") from e
        return bytes(row[0]) if row else None

    def keys(self) -> list[str]:
        """Get all stored keys in order."""
        try:
            with self._lock:
                rows = self._db.execute("SELECT key FROM rounds ORDER BY key").fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to list keys: {e}") from e
        return [row[0] for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._db.close()
