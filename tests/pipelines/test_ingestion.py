"""Tests for the ingestion loop."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from compat_spine.core.errors import NetworkError, StorageError
from compat_spine.domain.snapshot import CompilerRecord, SupportLevel
from compat_spine.framework.sources import FeatureRecord
from compat_spine.pipelines.ingestion import IngestionLoop

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class StaticSource:
    """Source returning whatever ``records`` currently holds."""

    def __init__(self, records=None, error: Exception | None = None) -> None:
        self.records = list(records or [])
        self.error = error
        self.calls = 0

    @property
    def name(self) -> str:
        return "static"

    def fetch(self) -> list[FeatureRecord]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.records)


def _record(name: str, gcc: SupportLevel = SupportLevel.NONE) -> FeatureRecord:
    return FeatureRecord(spec_version=20, name=name, records=(CompilerRecord(gcc),))


class TestIngestionLoop:
    def test_first_fetch_persists_everything(self, memory_store, clock):
        loop = IngestionLoop(StaticSource([_record("A"), _record("B")]), memory_store, clock=clock)

        summary = loop.tick()

        assert summary.to_dict() == {
            "fetched": 2,
            "persisted": 2,
            "unchanged": 0,
            "failed": 0,
            "duplicates": 0,
        }
        assert [s.name for s in memory_store.list_undelivered()] == ["A", "B"]

    def test_records_share_one_observation_time(self, memory_store, clock):
        loop = IngestionLoop(StaticSource([_record("A"), _record("B")]), memory_store, clock=clock)
        loop.tick()

        times = {s.observed_at for s in memory_store.list_undelivered()}
        assert times == {T0}

    def test_unchanged_features_are_not_persisted(self, memory_store, clock):
        source = StaticSource([_record("A")])
        loop = IngestionLoop(source, memory_store, clock=clock)
        loop.tick()

        summary = loop.tick()

        assert summary.persisted == 0
        assert summary.unchanged == 1
        assert len(memory_store.history("A")) == 1

    def test_changed_feature_is_appended(self, memory_store, clock):
        source = StaticSource([_record("A")])
        loop = IngestionLoop(source, memory_store, clock=clock)
        loop.tick()

        source.records = [_record("A", SupportLevel.FULL)]
        summary = loop.tick()

        assert summary.persisted == 1
        history = memory_store.history("A")
        assert [s.observed_at for s in history] == [T0, T0 + timedelta(minutes=1)]
        assert history[-1].records[0].support is SupportLevel.FULL

    def test_fetch_failure_skips_tick(self, memory_store, clock):
        loop = IngestionLoop(StaticSource(error=NetworkError("down")), memory_store, clock=clock)

        summary = loop.tick()

        assert summary.failed == 1
        assert summary.fetched == 0
        assert memory_store.list_undelivered() == []

    def test_unexpected_fetch_failure_skips_tick(self, memory_store, clock):
        loop = IngestionLoop(StaticSource(error=RuntimeError("bug")), memory_store, clock=clock)
        assert loop.tick().failed == 1

    def test_store_failure_skips_only_that_feature(self, memory_store, clock, snapshot_factory):
        store = MagicMock(wraps=memory_store)
        real_append = memory_store.append

        def append(snapshot):
            if snapshot.name == "A":
                raise StorageError("disk full")
            real_append(snapshot)

        store.append.side_effect = append
        loop = IngestionLoop(StaticSource([_record("A"), _record("B")]), store, clock=clock)

        summary = loop.tick()

        assert summary.failed == 1
        assert summary.persisted == 1
        assert [s.name for s in memory_store.list_undelivered()] == ["B"]

    def test_malformed_record_skips_only_that_feature(self, memory_store, clock):
        oversized = FeatureRecord(spec_version=20, name="Broken", records=[CompilerRecord()] * 4)
        loop = IngestionLoop(StaticSource([oversized, _record("B")]), memory_store, clock=clock)

        summary = loop.tick()

        assert summary.failed == 1
        assert summary.persisted == 1
        assert [s.name for s in memory_store.list_undelivered()] == ["B"]

    def test_repeated_name_keeps_first_entry(self, memory_store, clock):
        source = StaticSource([_record("A"), _record("A", SupportLevel.FULL), _record("B")])
        loop = IngestionLoop(source, memory_store, clock=clock)

        summary = loop.tick()

        assert summary.duplicates == 1
        assert summary.failed == 0
        assert summary.persisted == 2
        (stored,) = memory_store.history("A")
        assert stored.records[0].support is SupportLevel.NONE

    def test_repeated_name_does_not_flap(self, memory_store, clock):
        source = StaticSource([_record("A"), _record("A", SupportLevel.FULL)])
        loop = IngestionLoop(source, memory_store, clock=clock)
        loop.tick()

        summary = loop.tick()

        assert summary.unchanged == 1
        assert summary.persisted == 0
        assert len(memory_store.history("A")) == 1

    def test_tick_count(self, memory_store, clock):
        loop = IngestionLoop(StaticSource(), memory_store, clock=clock)
        loop.tick()
        loop.tick()
        assert loop.tick_count == 2
