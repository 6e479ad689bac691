"""Interval scheduling for the ingestion and notification loops."""

from compat_spine.core.scheduling.protocol import BackendHealth, SchedulerBackend, TickCallback
from compat_spine.core.scheduling.thread_backend import ThreadSchedulerBackend

__all__ = [
    "BackendHealth",
    "SchedulerBackend",
    "ThreadSchedulerBackend",
    "TickCallback",
]
