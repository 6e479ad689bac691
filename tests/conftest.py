"""
Shared pytest fixtures for compat-spine tests.

This module provides:
- Deterministic timestamps and a controllable clock
- Snapshot builders for the three-vendor model
- History store fixtures (in-memory and SQLite)
- A recording delivery sink

Usage:
    def test_something(snapshot_factory, memory_store):
        memory_store.append(snapshot_factory("Modules"))
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import structlog

from compat_spine.core.connection import create_connection
from compat_spine.core.logging import clear_context
from compat_spine.domain.history import InMemoryHistoryStore
from compat_spine.domain.snapshot import CompilerRecord, PaperReference, Snapshot, SupportLevel
from compat_spine.domain.store import SqliteHistoryStore
from compat_spine.framework.delivery.protocol import DeliveryResult

FIXTURES = Path(__file__).parent / "fixtures"

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


# =============================================================================
# Logging isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo configure_logging() calls made by CLI tests."""
    yield
    structlog.reset_defaults()
    clear_context()


# =============================================================================
# Time
# =============================================================================


class FakeClock:
    """Clock returning T0, then advancing one minute per call."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(minutes=1)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Snapshots
# =============================================================================


def make_snapshot(
    name: str = "X",
    *,
    observed_at: datetime = T0,
    spec_version: int = 17,
    gcc: CompilerRecord | None = None,
    clang: CompilerRecord | None = None,
    msvc: CompilerRecord | None = None,
    paper: PaperReference | None = None,
) -> Snapshot:
    return Snapshot(
        name=name,
        observed_at=observed_at,
        spec_version=spec_version,
        records=(gcc, clang, msvc),
        paper=paper,
    )


@pytest.fixture
def snapshot_factory() -> Callable[..., Snapshot]:
    return make_snapshot


@pytest.fixture
def base_pair() -> tuple[Snapshot, Snapshot]:
    """The GCC-gains-support pair: previous and next differ in GCC only."""
    previous = make_snapshot(clang=CompilerRecord(SupportLevel.FULL, "6"))
    current = make_snapshot(
        observed_at=T0 + timedelta(hours=1),
        gcc=CompilerRecord(SupportLevel.FULL, "9", "still buggy"),
        clang=CompilerRecord(SupportLevel.FULL, "6"),
    )
    return previous, current


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def memory_store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


@pytest.fixture
def sqlite_store() -> Iterator[SqliteHistoryStore]:
    conn, _info = create_connection(None)
    store = SqliteHistoryStore(conn)
    yield store
    store.close()


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request: pytest.FixtureRequest):
    """Run a test against both store implementations."""
    return request.getfixturevalue(f"{request.param}_store")


# =============================================================================
# Delivery
# =============================================================================


class RecordingSink:
    """Sink that records calls and returns scripted outcomes."""

    def __init__(self, *, deliver_ok: bool = True, escalate_ok: bool = True) -> None:
        self.delivered: list[str] = []
        self.escalations: list[str] = []
        self.deliver_ok = deliver_ok
        self.escalate_ok = escalate_ok

    @property
    def name(self) -> str:
        return "recording"

    def deliver(self, text: str) -> DeliveryResult:
        self.delivered.append(text)
        if self.deliver_ok:
            return DeliveryResult.ok(self.name)
        return DeliveryResult.fail(self.name, RuntimeError("sink down"))

    def escalate(self, message: str) -> DeliveryResult:
        self.escalations.append(message)
        if self.escalate_ok:
            return DeliveryResult.ok(self.name)
        return DeliveryResult.fail(self.name, RuntimeError("sink down"))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_sink() -> Callable[..., RecordingSink]:
    """Build a RecordingSink with scripted outcomes."""
    return RecordingSink
