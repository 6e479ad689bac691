"""Zero-dependency threading-based scheduler backend.

┌──────────────────────────────────────────────────────────────────────────────┐
│  THREAD BACKEND ARCHITECTURE                                                  │
│                                                                               │
│   start()                                                                     │
│      │                                                                        │
│      ▼                                                                        │
│   ┌─────────────────────────────────────────────────────────┐                │
│   │              Daemon Thread (loop)                       │                │
│   │                                                         │                │
│   │   while not stop_event.wait(interval):                  │                │
│   │       tick_count += 1                                   │                │
│   │       last_tick = now()                                 │                │
│   │       tick_callback()          ◄─────── Invoke          │                │
│   │                                                         │                │
│   └─────────────────────────────────────────────────────────┘                │
│                                                                               │
│   stop()                                                                      │
│      │                                                                        │
│      ▼                                                                        │
│   stop_event.set()                                                            │
│   thread.join(timeout=join_timeout)                                           │
│                                                                               │
│  The callback runs on the loop thread itself, so a slow tick delays the      │
│  next one instead of overlapping it.  Stop intake is prompt (the wait is     │
│  interrupted), an in-progress tick is allowed to finish.                     │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any

from compat_spine.core.logging import get_logger
from compat_spine.core.timestamps import utc_now

from .protocol import BackendHealth, TickCallback

logger = get_logger(__name__)


class ThreadSchedulerBackend:
    """Threading-based scheduler backend.

    Example:
        >>> backend = ThreadSchedulerBackend(label="ingestion")
        >>> backend.start(loop.tick, interval_seconds=300)
        >>> # ... later ...
        >>> backend.stop()
    """

    name = "thread"

    def __init__(self, label: str = "scheduler", *, join_timeout: float = 30.0) -> None:
        self.label = label
        self._join_timeout = join_timeout
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._tick_count = 0
        self._last_tick: datetime | None = None
        self._interval: float = 300.0
        self._started = False
        self._lock = threading.Lock()

    def start(
        self,
        tick_callback: TickCallback,
        interval_seconds: float = 300.0,
    ) -> None:
        """Start the scheduler loop in a daemon thread.

        Args:
            tick_callback: Function to call on each tick.
            interval_seconds: How often to tick.
        """
        if self._started:
            logger.warning("scheduler_already_started", label=self.label)
            return

        self._interval = interval_seconds
        self._stop_event.clear()

        def _loop() -> None:
            logger.info("scheduler_started", label=self.label, interval_seconds=interval_seconds)
            while not self._stop_event.wait(interval_seconds):
                with self._lock:
                    self._tick_count += 1
                    self._last_tick = utc_now()

                try:
                    tick_callback()
                except Exception:
                    logger.exception("tick_failed", label=self.label)

            logger.info("scheduler_stopped", label=self.label)

        self._thread = threading.Thread(
            target=_loop, daemon=True, name=f"compat-{self.label}"
        )
        self._thread.start()
        self._started = True

    def stop(self) -> bool:
        """Stop the scheduler loop, waiting for the current tick to complete.

        Returns:
            False when the tick thread is still running after ``join_timeout``.
        """
        if not self._started:
            return True

        self._stop_event.set()
        finished = True
        if self._thread:
            self._thread.join(timeout=self._join_timeout)
            if self._thread.is_alive():
                finished = False
                logger.warning("scheduler_thread_still_running", label=self.label)

        self._started = False
        return finished

    def health(self) -> dict[str, Any]:
        """Return backend health status."""
        return self.get_health().to_dict()

    def get_health(self) -> BackendHealth:
        """Return structured health status."""
        return BackendHealth(
            healthy=self.is_running,
            backend=self.name,
            tick_count=self._tick_count,
            last_tick=self._last_tick,
            extra={"label": self.label, "interval_seconds": self._interval},
        )

    @property
    def is_running(self) -> bool:
        """Check if backend is currently running."""
        return self._started and self._thread is not None and self._thread.is_alive()

    @property
    def tick_count(self) -> int:
        """Get number of ticks executed."""
        return self._tick_count

    @property
    def last_tick(self) -> datetime | None:
        """Get timestamp of last tick."""
        return self._last_tick
