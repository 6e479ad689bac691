"""Scheduler backend protocol.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULER BACKEND PROTOCOL                                                   │
│                                                                               │
│  Backends control WHEN ticks happen; the loops control WHAT happens on each  │
│  tick.  compat-spine runs one backend per loop so the fetch cadence and the  │
│  report cadence are independent.                                             │
│                                                                               │
│   ┌─────────────────┐    tick()    ┌──────────────────┐                      │
│   │ Thread Backend  │ ───────────► │ IngestionLoop    │                      │
│   │ ("ingestion")   │              └──────────────────┘                      │
│   └─────────────────┘                                                         │
│   ┌─────────────────┐    tick()    ┌──────────────────┐                      │
│   │ Thread Backend  │ ───────────► │ NotificationLoop │                      │
│   │ ("notification")│              └──────────────────┘                      │
│   └─────────────────┘                                                         │
│                                                                               │
│  A backend never runs two ticks of the same callback at once.                │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

TickCallback = Callable[[], Any]


@runtime_checkable
class SchedulerBackend(Protocol):
    """Protocol for pluggable scheduler timing backends.

    A backend is responsible ONLY for timing: calling the tick callback
    at the specified interval.
    """

    name: str

    def start(
        self,
        tick_callback: TickCallback,
        interval_seconds: float = 300.0,
    ) -> None:
        """Start the scheduler loop."""
        ...

    def stop(self) -> bool:
        """Stop the scheduler loop gracefully.

        Should wait for current tick to complete before returning, and
        return False if that tick is still running when it gives up.
        """
        ...

    def health(self) -> dict[str, Any]:
        """Return backend health status."""
        ...


@dataclass
class BackendHealth:
    """Structured backend health response."""

    healthy: bool
    backend: str
    tick_count: int = 0
    last_tick: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "healthy": self.healthy,
            "backend": self.backend,
            "tick_count": self.tick_count,
            "last_tick": self.last_tick.isoformat() if self.last_tick else None,
            **self.extra,
        }
