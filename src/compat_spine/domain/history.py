"""
History store contract and the in-memory implementation.

Manifesto:
    Both loops coordinate only through the store. Each operation is atomic
    on its own; the loops never hold a lock across operations.

    Two lookups look alike but must stay separate:

    - ``most_recent_differs`` is asked by ingestion, *before* appending, to
      decide whether a fetched feature is worth persisting.
    - ``immediately_preceding`` is asked by notification, *after* the fact,
      to find the snapshot a persisted one should be compared against.

Architecture:
    ::

        HistoryStore (Protocol)
        ├── append(snapshot)
        ├── most_recent_differs(name, candidate)   → DiffResult
        ├── immediately_preceding(name, before)    → Snapshot | None
        ├── list_undelivered()                     → [Snapshot]
        ├── mark_delivered(name, observed_at)
        ├── mark_delivery_failed_and_reported(name, observed_at)
        ├── history(name)                          → [Snapshot]
        └── close()

        Implementations: InMemoryHistoryStore (here), SqliteHistoryStore (store.py)

Tags:
    history, storage, protocol, append-only, compat-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import NamedTuple, Protocol, runtime_checkable

from compat_spine.core.errors import StorageError
from compat_spine.core.timestamps import ensure_utc, to_iso8601
from compat_spine.domain.snapshot import DeliveryState, Snapshot, differs_meaningfully


class DiffResult(NamedTuple):
    """Answer of ``most_recent_differs``.

    ``previous`` is only set when a prior snapshot exists and differs.
    """

    differs: bool
    previous: Snapshot | None = None


def evaluate_difference(latest: Snapshot | None, candidate: Snapshot) -> DiffResult:
    """Compare *candidate* with the latest stored snapshot of the same name."""
    if latest is None:
        return DiffResult(True, None)
    if differs_meaningfully(latest, candidate):
        return DiffResult(True, latest)
    return DiffResult(False, None)


@runtime_checkable
class HistoryStore(Protocol):
    """Append-only snapshot persistence keyed by ``(name, observed_at)``."""

    def append(self, snapshot: Snapshot) -> None:
        """Persist a new snapshot. Duplicate keys raise StorageError."""
        ...

    def most_recent_differs(self, name: str, candidate: Snapshot) -> DiffResult:
        ...

    def immediately_preceding(self, name: str, before: datetime) -> Snapshot | None:
        """Latest snapshot for *name* strictly before *before*."""
        ...

    def list_undelivered(self) -> list[Snapshot]:
        """Snapshots never attempted, oldest first."""
        ...

    def mark_delivered(self, name: str, observed_at: datetime) -> None:
        ...

    def mark_delivery_failed_and_reported(self, name: str, observed_at: datetime) -> None:
        ...

    def history(self, name: str) -> list[Snapshot]:
        """All snapshots for *name*, oldest first."""
        ...

    def close(self) -> None:
        ...


class InMemoryHistoryStore:
    """Process-local history store.

    Used by tests and by ``storage_mode = "memory"``. All operations take
    one lock, so the two loop threads can share an instance.
    """

    def __init__(self) -> None:
        self._snapshots: dict[str, list[Snapshot]] = {}
        self._lock = threading.RLock()

    def append(self, snapshot: Snapshot) -> None:
        with self._lock:
            rows = self._snapshots.setdefault(snapshot.name, [])
            if any(row.observed_at == snapshot.observed_at for row in rows):
                raise StorageError("snapshot already exists").with_context(
                    feature=snapshot.name, observed_at=to_iso8601(snapshot.observed_at)
                )
            rows.append(snapshot.with_delivery_state(DeliveryState.NOT_ATTEMPTED))
            rows.sort(key=lambda row: row.observed_at)

    def most_recent_differs(self, name: str, candidate: Snapshot) -> DiffResult:
        with self._lock:
            rows = self._snapshots.get(name)
            return evaluate_difference(rows[-1] if rows else None, candidate)

    def immediately_preceding(self, name: str, before: datetime) -> Snapshot | None:
        before = ensure_utc(before)
        with self._lock:
            earlier = [row for row in self._snapshots.get(name, []) if row.observed_at < before]
            return earlier[-1] if earlier else None

    def list_undelivered(self) -> list[Snapshot]:
        with self._lock:
            pending = [
                row
                for rows in self._snapshots.values()
                for row in rows
                if row.delivery_state is DeliveryState.NOT_ATTEMPTED
            ]
        return sorted(pending, key=lambda row: (row.observed_at, row.name))

    def mark_delivered(self, name: str, observed_at: datetime) -> None:
        self._advance(name, observed_at, DeliveryState.DELIVERED)

    def mark_delivery_failed_and_reported(self, name: str, observed_at: datetime) -> None:
        self._advance(name, observed_at, DeliveryState.FAILED_REPORTED)

    def history(self, name: str) -> list[Snapshot]:
        with self._lock:
            return list(self._snapshots.get(name, []))

    def close(self) -> None:
        pass

    def _advance(self, name: str, observed_at: datetime, target: DeliveryState) -> None:
        observed_at = ensure_utc(observed_at)
        with self._lock:
            rows = self._snapshots.get(name, [])
            for index, row in enumerate(rows):
                if row.observed_at == observed_at:
                    rows[index] = row.with_delivery_state(row.delivery_state.advance_to(target))
                    return
        raise StorageError("no such snapshot").with_context(
            feature=name, observed_at=to_iso8601(observed_at)
        )


__all__ = [
    "DiffResult",
    "HistoryStore",
    "InMemoryHistoryStore",
    "evaluate_difference",
]
