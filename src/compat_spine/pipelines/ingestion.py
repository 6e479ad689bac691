"""
Ingestion loop: fetch the matrix and persist what changed.

Manifesto:
    Persistence is gated by the coarse "anything differs" rule, not by the
    change categories. Whatever gets persisted here is described later by
    the notification loop.

    - **One clock read per tick:** every record of a fetch shares its
      observation time, so a fetch is one consistent picture of the matrix
    - **Sequential:** features are handled one after another, which keeps
      compare-then-append for the same name from racing with itself
    - **Per-feature isolation:** a malformed record or store failure skips
      that feature only; a name listed twice in one fetch keeps its first entry

Architecture:
    ::

        tick()
          │
          ├── source.fetch()                        SourceError → failed=1, stop
          ├── observed_at = clock()
          └── for record in records:                  repeated name → duplicates += 1
                snapshot = record.to_snapshot(observed_at)
                store.most_recent_differs(name, snapshot)
                   ├── differs  → store.append(snapshot)   persisted += 1
                   └── same     →                          unchanged += 1

Tags:
    ingestion, polling, persistence, compat-spine
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from compat_spine.core.errors import CompatError
from compat_spine.core.logging import LogContext, get_logger
from compat_spine.core.timestamps import utc_now
from compat_spine.domain.history import HistoryStore
from compat_spine.framework.sources.protocol import FeatureRecord, FeatureSource

logger = get_logger(__name__)


@dataclass
class IngestionSummary:
    """Counts for one ingestion tick."""

    fetched: int = 0
    persisted: int = 0
    unchanged: int = 0
    failed: int = 0
    duplicates: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class IngestionLoop:
    """Fetches features from a source and appends changed ones to the store."""

    def __init__(
        self,
        source: FeatureSource,
        store: HistoryStore,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.source = source
        self.store = store
        self._clock = clock
        self._ticks = 0

    @property
    def tick_count(self) -> int:
        return self._ticks

    def tick(self) -> IngestionSummary:
        """Run one fetch-compare-persist cycle."""
        self._ticks += 1
        with LogContext(loop="ingestion", tick=self._ticks):
            summary = IngestionSummary()

            try:
                records = self.source.fetch()
            except CompatError as e:
                logger.error("fetch_failed", **e.to_dict())
                summary.failed = 1
                return summary
            except Exception:
                logger.exception("fetch_failed", source=self.source.name)
                summary.failed = 1
                return summary

            summary.fetched = len(records)
            observed_at = self._clock()

            seen: set[str] = set()
            for record in records:
                # One observation time per tick, so a repeated name would collide
                if record.name in seen:
                    summary.duplicates += 1
                    logger.warning("duplicate_feature_skipped", feature=record.name)
                    continue
                seen.add(record.name)
                self._ingest(record, observed_at, summary)

            logger.info("ingestion_tick_completed", **summary.to_dict())
            return summary

    def _ingest(self, record: FeatureRecord, observed_at: datetime, summary: IngestionSummary) -> None:
        try:
            snapshot = record.to_snapshot(observed_at)
            result = self.store.most_recent_differs(snapshot.name, snapshot)
            if not result.differs:
                summary.unchanged += 1
                return

            self.store.append(snapshot)
            summary.persisted += 1
            logger.info(
                "snapshot_persisted",
                feature=snapshot.name,
                reason="changed" if result.previous is not None else "new",
            )
        except CompatError as e:
            summary.failed += 1
            logger.warning("feature_ingest_failed", feature=record.name, **e.to_dict())
        except Exception:
            summary.failed += 1
            logger.exception("feature_ingest_failed", feature=record.name)


__all__ = [
    "IngestionLoop",
    "IngestionSummary",
]
