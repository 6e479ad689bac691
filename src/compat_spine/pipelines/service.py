"""Long-running service wiring both loops to their schedulers.

Each loop gets its own :class:`ThreadSchedulerBackend`, so fetching and
reporting run on independent intervals and only share the history store.

Example:
    >>> settings = load_settings()
    >>> service = CompatService.from_settings(settings)
    >>> service.run_forever()   # until SIGINT / SIGTERM
"""

from __future__ import annotations

import signal
import threading
from typing import Any

from compat_spine.core.logging import get_logger
from compat_spine.core.scheduling import SchedulerBackend, ThreadSchedulerBackend
from compat_spine.core.settings import CompatSettings
from compat_spine.domain.history import HistoryStore, InMemoryHistoryStore
from compat_spine.domain.store import SqliteHistoryStore
from compat_spine.framework.delivery import DeliverySink, create_sink
from compat_spine.framework.sources import FeatureSource, create_source
from compat_spine.pipelines.ingestion import IngestionLoop
from compat_spine.pipelines.notification import NotificationLoop, NotificationPolicy

logger = get_logger(__name__)


def create_store(settings: CompatSettings) -> HistoryStore:
    """Open the history store selected by ``settings.storage_mode``."""
    if settings.storage_mode == "memory":
        return InMemoryHistoryStore()
    return SqliteHistoryStore.open(settings.database)


class CompatService:
    """Runs the ingestion and notification loops until stopped."""

    def __init__(
        self,
        store: HistoryStore,
        source: FeatureSource,
        sink: DeliverySink,
        *,
        policy: NotificationPolicy | None = None,
        fetch_interval_seconds: float = 300.0,
        report_interval_seconds: float = 300.0,
        ingestion_backend: SchedulerBackend | None = None,
        notification_backend: SchedulerBackend | None = None,
    ) -> None:
        self.store = store
        self.ingestion = IngestionLoop(source, store)
        self.notification = NotificationLoop(store, sink, policy)
        self.fetch_interval_seconds = fetch_interval_seconds
        self.report_interval_seconds = report_interval_seconds
        self.ingestion_backend = ingestion_backend or ThreadSchedulerBackend("ingestion")
        self.notification_backend = notification_backend or ThreadSchedulerBackend("notification")

        self._stop_event = threading.Event()
        self._running = False

    @classmethod
    def from_settings(cls, settings: CompatSettings) -> CompatService:
        """Build store, source, sink and both loops from settings.

        Raises:
            InvalidConfigError: if the selected source or sink is incomplete.
        """
        source = create_source(settings)
        sink = create_sink(settings)
        store = create_store(settings)
        return cls(
            store,
            source,
            sink,
            policy=NotificationPolicy.from_settings(settings),
            fetch_interval_seconds=settings.fetch_interval_seconds,
            report_interval_seconds=settings.report_interval_seconds,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    # === Lifecycle ===

    def start(self) -> None:
        """Start both scheduler backends."""
        if self._running:
            logger.warning("service_already_running")
            return

        logger.info(
            "service_starting",
            fetch_interval_seconds=self.fetch_interval_seconds,
            report_interval_seconds=self.report_interval_seconds,
        )
        self._stop_event.clear()
        self.ingestion_backend.start(self.ingestion.tick, self.fetch_interval_seconds)
        self.notification_backend.start(self.notification.tick, self.report_interval_seconds)
        self._running = True

    def stop(self) -> None:
        """Stop intake of new ticks, let in-flight ticks finish, close the store.

        A backend whose tick outlives its join timeout still holds the
        store, so the store is left open for that tick to finish with.
        """
        if not self._running:
            return

        logger.info("service_stopping")
        stopped = [self.ingestion_backend.stop(), self.notification_backend.stop()]
        if all(stopped):
            self.store.close()
        else:
            logger.warning("store_close_skipped", reason="tick still running")
        self._running = False
        self._stop_event.set()
        logger.info("service_stopped")

    def request_stop(self) -> None:
        """Ask ``run_forever`` to return."""
        self._stop_event.set()

    def run_forever(self) -> None:
        """Start, block until SIGINT / SIGTERM or ``request_stop()``, then stop."""
        previous: dict[int, Any] = {}

        def _handle_signal(signum: int, frame: Any) -> None:
            logger.info("shutdown_signal_received", signal=signal.Signals(signum).name)
            self._stop_event.set()

        # Signal handlers can only be installed from the main thread
        try:
            for signum in (signal.SIGINT, signal.SIGTERM):
                previous[signum] = signal.signal(signum, _handle_signal)
        except ValueError:
            logger.debug("signal_handlers_skipped")

        self.start()
        try:
            while not self._stop_event.wait(1.0):
                pass
        finally:
            self.stop()
            for signum, handler in previous.items():
                signal.signal(signum, handler)

    def health(self) -> dict[str, Any]:
        """Health of both backends plus the notification halt flag."""
        ingestion = self.ingestion_backend.health()
        notification = self.notification_backend.health()
        return {
            "healthy": self._running and bool(ingestion.get("healthy")) and bool(notification.get("healthy")),
            "ingestion": ingestion,
            "notification": notification,
            "notification_halted": self.notification.halted,
        }


__all__ = [
    "CompatService",
    "create_store",
]
