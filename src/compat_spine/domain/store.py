"""SQLite-backed history store.

Persists snapshots in ``compat_features`` (see :mod:`compat_spine.core.schema`).
Every public method runs under one lock inside one transaction, which is
what makes each store operation atomic with respect to the other loop.
"""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime
from typing import Any

from compat_spine.core.connection import SqliteConnection, create_connection
from compat_spine.core.errors import StorageError
from compat_spine.core.logging import get_logger
from compat_spine.core.repository import BaseRepository
from compat_spine.core.schema import TABLES, create_tables
from compat_spine.core.timestamps import from_storage, to_storage
from compat_spine.domain.history import DiffResult, evaluate_difference
from compat_spine.domain.snapshot import (
    VENDORS,
    CompilerRecord,
    DeliveryState,
    PaperReference,
    Snapshot,
)

logger = get_logger(__name__)

_TABLE = TABLES["features"]

_COLUMNS = [
    "name",
    "observed_at",
    "spec_version",
    "paper_name",
    "paper_link",
    *[
        f"{vendor.id}_{suffix}"
        for vendor in VENDORS
        for suffix in ("support", "display_text", "extra_text")
    ],
    "delivered",
    "delivery_failed_reported",
]
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM {_TABLE}"


def snapshot_to_row(snapshot: Snapshot) -> dict[str, Any]:
    row: dict[str, Any] = {
        "name": snapshot.name,
        "observed_at": to_storage(snapshot.observed_at),
        "spec_version": snapshot.spec_version,
        "paper_name": snapshot.paper.name if snapshot.paper else None,
        "paper_link": snapshot.paper.link if snapshot.paper else None,
    }
    for vendor, record in snapshot.vendor_records():
        row[f"{vendor.id}_support"] = int(record.support)
        row[f"{vendor.id}_display_text"] = record.display_text
        row[f"{vendor.id}_extra_text"] = record.extra_text
    row["delivered"] = int(snapshot.delivery_state is DeliveryState.DELIVERED)
    row["delivery_failed_reported"] = int(snapshot.delivery_state is DeliveryState.FAILED_REPORTED)
    return row


def snapshot_from_row(row: dict[str, Any]) -> Snapshot:
    if row["delivered"]:
        state = DeliveryState.DELIVERED
    elif row["delivery_failed_reported"]:
        state = DeliveryState.FAILED_REPORTED
    else:
        state = DeliveryState.NOT_ATTEMPTED

    return Snapshot(
        name=row["name"],
        observed_at=from_storage(row["observed_at"]),
        spec_version=row["spec_version"],
        records=tuple(
            CompilerRecord(
                support=row[f"{vendor.id}_support"],
                display_text=row[f"{vendor.id}_display_text"],
                extra_text=row[f"{vendor.id}_extra_text"],
            )
            for vendor in VENDORS
        ),
        paper=PaperReference.of(row["paper_name"], row["paper_link"]),
        delivery_state=state,
    )


class SqliteHistoryStore(BaseRepository):
    """History store over a shared SQLite connection."""

    def __init__(self, conn: SqliteConnection, *, init_schema: bool = True) -> None:
        super().__init__(conn)
        self._lock = threading.RLock()
        if init_schema:
            create_tables(conn)

    @classmethod
    def open(cls, database: str | None) -> SqliteHistoryStore:
        """Open (and create if needed) the store at a path or URL."""
        conn, info = create_connection(database)
        logger.info("history_store_opened", backend=info.backend, persistent=info.persistent, url=info.url)
        return cls(conn)

    def append(self, snapshot: Snapshot) -> None:
        row = snapshot_to_row(snapshot.with_delivery_state(DeliveryState.NOT_ATTEMPTED))
        try:
            with self._lock, self.transaction():
                self.insert(_TABLE, row)
        except sqlite3.IntegrityError as e:
            raise StorageError("snapshot already exists", cause=e).with_context(
                feature=snapshot.name, observed_at=row["observed_at"]
            ) from e
        except sqlite3.Error as e:
            raise StorageError(f"failed to insert snapshot: {e}", cause=e).with_context(
                feature=snapshot.name
            ) from e

    def most_recent_differs(self, name: str, candidate: Snapshot) -> DiffResult:
        row = self._query_one(
            f"{_SELECT} WHERE name = ? ORDER BY observed_at DESC LIMIT 1",
            (name,),
        )
        latest = snapshot_from_row(row) if row else None
        return evaluate_difference(latest, candidate)

    def immediately_preceding(self, name: str, before: datetime) -> Snapshot | None:
        row = self._query_one(
            f"{_SELECT} WHERE name = ? AND observed_at < ? ORDER BY observed_at DESC LIMIT 1",
            (name, to_storage(before)),
        )
        return snapshot_from_row(row) if row else None

    def list_undelivered(self) -> list[Snapshot]:
        rows = self._query(
            f"{_SELECT} WHERE delivered = 0 AND delivery_failed_reported = 0 "
            "ORDER BY observed_at, name"
        )
        return [snapshot_from_row(row) for row in rows]

    def mark_delivered(self, name: str, observed_at: datetime) -> None:
        self._mark(name, observed_at, "delivered")

    def mark_delivery_failed_and_reported(self, name: str, observed_at: datetime) -> None:
        self._mark(name, observed_at, "delivery_failed_reported")

    def history(self, name: str) -> list[Snapshot]:
        rows = self._query(f"{_SELECT} WHERE name = ? ORDER BY observed_at", (name,))
        return [snapshot_from_row(row) for row in rows]

    def close(self) -> None:
        with self._lock:
            self.conn.close()

    # -- internals ---------------------------------------------------------

    def _query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        try:
            with self._lock, self.transaction():
                return self.query(sql, params)
        except sqlite3.Error as e:
            raise StorageError(f"query failed: {e}", cause=e) from e

    def _query_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        rows = self._query(sql, params)
        return rows[0] if rows else None

    def _mark(self, name: str, observed_at: datetime, column: str) -> None:
        key = (name, to_storage(observed_at))
        try:
            with self._lock, self.transaction():
                cursor = self.execute(
                    f"UPDATE {_TABLE} SET {column} = 1 "
                    "WHERE name = ? AND observed_at = ? "
                    "AND delivered = 0 AND delivery_failed_reported = 0",
                    key,
                )
                if cursor.rowcount == 0:
                    exists = self.query_one(
                        f"SELECT 1 AS present FROM {_TABLE} WHERE name = ? AND observed_at = ?",
                        key,
                    )
                    if exists is None:
                        raise StorageError("no such snapshot").with_context(
                            feature=name, observed_at=key[1]
                        )
        except sqlite3.Error as e:
            raise StorageError(f"failed to update delivery state: {e}", cause=e).with_context(
                feature=name
            ) from e


__all__ = [
    "SqliteHistoryStore",
    "snapshot_from_row",
    "snapshot_to_row",
]
