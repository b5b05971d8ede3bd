"""SQLite storage backend.

Stores payloads in a single SQLite database file using the Python standard
library ``sqlite3`` module.

Classes
-------
- SQLiteBackend  — SQLite-backed key/value storage
"""
from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from spec_registry.storage.base import StorageBackend, StorageError

_DEFAULT_DB_PATH: Path = Path.home() / ".spec-registry" / "cache.db"

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key      TEXT PRIMARY KEY,
    payload  TEXT NOT NULL,
    saved_at TEXT NOT NULL DEFAULT (datetime('now'))
)
"""

_UPSERT_SQL = """
INSERT INTO cache_entries (key, payload, saved_at)
VALUES (?, ?, datetime('now'))
ON CONFLICT(key) DO UPDATE SET
    payload  = excluded.payload,
    saved_at = excluded.saved_at
"""


class SQLiteBackend(StorageBackend):
    """Persists payloads in a local SQLite database.

    Each key occupies one row and the raw payload is stored as TEXT.  Any
    ``sqlite3.Error``, such as a file that is not a database, surfaces as
    ``StorageError``.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  The parent directory and table are
        created automatically on first use.
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        self._db_path: Path = (
            Path(db_path) if db_path is not None else _DEFAULT_DB_PATH
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _connect(self, key: str) -> Iterator[sqlite3.Connection]:
        """Yield a connection with the table in place; always closes it."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self._db_path))
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(key, str(exc)) from exc
        try:
            conn.row_factory = sqlite3.Row
            with conn:
                conn.execute(_CREATE_TABLE_SQL)
                yield conn
        except sqlite3.Error as exc:
            raise StorageError(key, str(exc)) from exc
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # StorageBackend interface
    # ------------------------------------------------------------------

    def set(self, key: str, payload: str) -> None:
        """Upsert ``payload`` for ``key``."""
        with self._connect(key) as conn:
            conn.execute(_UPSERT_SQL, (key, payload))

    def get(self, key: str) -> str:
        """Return the payload row for ``key``.

        Raises
        ------
        KeyError
            If no row exists for ``key``.
        StorageError
            If the database cannot be opened or queried.
        """
        with self._connect(key) as conn:
            row = conn.execute(
                "SELECT payload FROM cache_entries WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            raise KeyError(f"Key {key!r} not found in SQLiteBackend.")
        return str(row["payload"])

    def keys(self) -> list[str]:
        """Return all stored keys, most recently saved first."""
        with self._connect("*") as conn:
            rows = conn.execute(
                "SELECT key FROM cache_entries ORDER BY saved_at DESC"
            ).fetchall()
        return [str(row["key"]) for row in rows]

    def delete(self, key: str) -> None:
        """Remove the row for ``key``.

        Raises
        ------
        KeyError
            If no row exists for ``key``.
        """
        with self._connect(key) as conn:
            cursor = conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
        if cursor.rowcount == 0:
            raise KeyError(f"Key {key!r} not found in SQLiteBackend.")

    def exists(self, key: str) -> bool:
        """Return True if a row for ``key`` exists."""
        with self._connect(key) as conn:
            row = conn.execute(
                "SELECT 1 FROM cache_entries WHERE key = ?", (key,)
            ).fetchone()
        return row is not None

    def __repr__(self) -> str:
        return f"SQLiteBackend(db_path={str(self._db_path)!r})"
