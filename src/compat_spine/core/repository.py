"""Base repository with small SQL helpers.

Provides :class:`BaseRepository`: a thin base class over a
:class:`~compat_spine.core.connection.SqliteConnection` so that store
implementations share query / insert / transaction plumbing.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                       BaseRepository                               │
    │                                                                    │
    │   conn: SqliteConnection                                           │
    │                                                                    │
    │   execute(sql, params)     → cursor                                │
    │   query(sql, params)       → list[dict]                            │
    │   query_one(sql, params)   → dict | None                           │
    │   insert(table, data)      → cursor                                │
    │   transaction()            → commit / rollback scope               │
    └────────────────────────────────────────────────────────────────────┘

Tags:
    repository, database, sqlite
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from compat_spine.core.connection import SqliteConnection


class BaseRepository:
    """Base class for data-access repositories.

    Parameters:
        conn: Connection exposing ``execute`` / ``commit`` / ``rollback``.
    """

    def __init__(self, conn: SqliteConnection) -> None:
        self.conn = conn

    @staticmethod
    def ph(count: int) -> str:
        """Comma-separated ``?`` placeholders for *count* values."""
        return ", ".join("?" for _ in range(count))

    # -- Query helpers -----------------------------------------------------

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute a statement and return the raw cursor."""
        return self.conn.execute(sql, params)

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a SELECT and return rows as dicts."""
        cursor = self.conn.execute(sql, params)
        rows = cursor.fetchall()
        if not rows:
            return []

        try:
            return [dict(row) for row in rows]
        except (TypeError, ValueError):
            pass

        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row, strict=False)) for row in rows]

    def query_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        """Execute a SELECT and return the first row as a dict (or None)."""
        results = self.query(sql, params)
        return results[0] if results else None

    # -- Insert helpers ----------------------------------------------------

    def insert(self, table: str, data: dict[str, Any]) -> Any:
        """Insert a single row from a dict."""
        columns = list(data.keys())
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({self.ph(len(columns))})"
        return self.conn.execute(sql, tuple(data.values()))

    # -- Transactions ------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Commit on success, roll back on any exception and re-raise."""
        try:
            yield
        except BaseException:
            self.conn.rollback()
            raise
        else:
            self.conn.commit()

    def commit(self) -> None:
        """Commit the current transaction."""
        self.conn.commit()


__all__ = [
    "BaseRepository",
]
