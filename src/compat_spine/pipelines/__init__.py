"""The two polling loops and the service that schedules them."""

from compat_spine.pipelines.ingestion import IngestionLoop, IngestionSummary
from compat_spine.pipelines.notification import (
    NotificationLoop,
    NotificationPolicy,
    NotificationSummary,
)
from compat_spine.pipelines.service import CompatService, create_store

__all__ = [
    "CompatService",
    "IngestionLoop",
    "IngestionSummary",
    "NotificationLoop",
    "NotificationPolicy",
    "NotificationSummary",
    "create_store",
]
