"""
Notification loop: describe persisted changes and deliver them.

Manifesto:
    Every undelivered snapshot is paired with the snapshot right before it,
    classified, rendered and handed to the sink. A record only leaves the
    pending set when it is marked, and it is only marked once the outcome
    is settled.

Per-record outcomes:
    ::

        classify(previous, snapshot)
          │
          ├── UNCLASSIFIED ── escalate(both expansions)
          │                     ├── ok     → mark failed-and-reported
          │                     └── failed → retried next tick
          │
          └── render_report(...)
                ├── suppress_reporting → mark delivered, sink untouched
                ├── ""                 → mark delivered, sink untouched
                ├── dry_reporting      → log only, stays pending
                └── sink.deliver(text)
                      ├── ok     → mark delivered
                      └── failed → stays pending

Safe mode:
    When more records are pending than ``safe_mode_max_reports``, nothing is
    delivered. The operator is told once and the loop halts until
    ``resume()``, since a flood of changes usually means the page parser
    broke rather than that every feature changed at once.

Tags:
    notification, delivery, safe-mode, escalation, compat-spine
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from compat_spine.core.errors import CompatError
from compat_spine.core.logging import LogContext, get_logger
from compat_spine.core.timestamps import to_iso8601
from compat_spine.domain.classifier import classify
from compat_spine.domain.history import HistoryStore
from compat_spine.domain.report import DEFAULT_OPTIONS, ReportOptions, render_report
from compat_spine.domain.snapshot import Snapshot
from compat_spine.framework.delivery.protocol import DeliverySink

logger = get_logger(__name__)


@dataclass(frozen=True)
class NotificationPolicy:
    """Reporting modes of the notification loop."""

    safe_mode: bool = True
    safe_mode_max_reports: int = 5
    suppress_reporting: bool = False
    dry_reporting: bool = True
    report_options: ReportOptions = field(default=DEFAULT_OPTIONS)

    @classmethod
    def from_settings(cls, settings: Any) -> NotificationPolicy:
        return cls(
            safe_mode=settings.safe_mode,
            safe_mode_max_reports=settings.safe_mode_max_reports,
            suppress_reporting=settings.suppress_reporting,
            dry_reporting=settings.dry_reporting,
            report_options=ReportOptions(narrate_text_changes=settings.narrate_text_changes),
        )


@dataclass
class NotificationSummary:
    """Counts for one notification tick.

    ``suppressed`` covers records marked delivered without the sink;
    ``skipped`` covers dry-run records left pending.
    """

    pending: int = 0
    delivered: int = 0
    suppressed: int = 0
    escalated: int = 0
    failed: int = 0
    skipped: int = 0
    halted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def safe_mode_message(limit: int, amount: int) -> str:
    return (
        f"Hello! There were too many reports for safe mode (limit is {limit}). "
        f"I won't report anything until you look into this. Amount of reports was {amount}"
    )


def unclassified_message(previous: Snapshot | None, snapshot: Snapshot) -> str:
    previous_ref = (
        f"'{previous.name}' '{to_iso8601(previous.observed_at)}'" if previous is not None else "(none)"
    )
    previous_text = previous.describe() if previous is not None else "(none)"
    return (
        "Hello! There was an issue with a change in the compiler support listing "
        "that I don't know how to turn into a report.\n"
        f"The involved entries are {previous_ref} and "
        f"'{snapshot.name}' '{to_iso8601(snapshot.observed_at)}'.\n"
        "Full expansion of those:\n\n"
        f"{previous_text}\n\n{snapshot.describe()}"
    )


class NotificationLoop:
    """Turns undelivered snapshots into reports and delivers them."""

    def __init__(
        self,
        store: HistoryStore,
        sink: DeliverySink,
        policy: NotificationPolicy | None = None,
    ) -> None:
        self.store = store
        self.sink = sink
        self.policy = policy or NotificationPolicy()
        self._halted = False
        self._ticks = 0

    @property
    def halted(self) -> bool:
        return self._halted

    @property
    def tick_count(self) -> int:
        return self._ticks

    def resume(self) -> None:
        """Clear a safe-mode halt."""
        if self._halted:
            logger.info("notification_resumed")
        self._halted = False

    def tick(self) -> NotificationSummary:
        """Process every undelivered snapshot once."""
        self._ticks += 1
        with LogContext(loop="notification", tick=self._ticks):
            summary = NotificationSummary(halted=self._halted)
            if self._halted:
                logger.warning("notification_halted_tick_ignored")
                return summary

            try:
                pending = self.store.list_undelivered()
            except CompatError as e:
                logger.error("list_undelivered_failed", **e.to_dict())
                summary.failed = 1
                return summary

            summary.pending = len(pending)
            if self._exceeds_safe_mode(len(pending)):
                self._halt(len(pending), summary)
                return summary

            for snapshot in pending:
                self._process(snapshot, summary)

            logger.info("notification_tick_completed", **summary.to_dict())
            return summary

    def _exceeds_safe_mode(self, amount: int) -> bool:
        return self.policy.safe_mode and amount > self.policy.safe_mode_max_reports

    def _halt(self, amount: int, summary: NotificationSummary) -> None:
        limit = self.policy.safe_mode_max_reports
        logger.error("safe_mode_limit_exceeded", pending=amount, limit=limit)

        result = self.sink.escalate(safe_mode_message(limit, amount))
        if result.success:
            summary.escalated += 1
        else:
            summary.failed += 1
            logger.error("safe_mode_escalation_failed", sink=result.sink_name, error=result.message)

        self._halted = True
        summary.halted = True
        logger.warning("notification_halted", limit=limit, pending=amount)

    def _process(self, snapshot: Snapshot, summary: NotificationSummary) -> None:
        try:
            with LogContext(feature=snapshot.name, observed_at=to_iso8601(snapshot.observed_at)):
                self._report(snapshot, summary)
        except CompatError as e:
            summary.failed += 1
            logger.warning("record_failed", feature=snapshot.name, **e.to_dict())
        except Exception:
            summary.failed += 1
            logger.exception("record_failed", feature=snapshot.name)

    def _report(self, snapshot: Snapshot, summary: NotificationSummary) -> None:
        previous = self.store.immediately_preceding(snapshot.name, snapshot.observed_at)
        classification = classify(previous, snapshot)

        if not classification.is_reportable:
            self._escalate_unclassified(previous, snapshot, summary)
            return

        text = render_report(classification, previous, snapshot, self.policy.report_options)

        if self.policy.suppress_reporting:
            logger.info("report_suppressed", category=classification.category.value, text=text)
            self.store.mark_delivered(snapshot.name, snapshot.observed_at)
            summary.suppressed += 1
            return

        if not text:
            logger.info("change_not_narrated", category=classification.category.value)
            self.store.mark_delivered(snapshot.name, snapshot.observed_at)
            summary.suppressed += 1
            return

        if self.policy.dry_reporting:
            logger.info("dry_run_report", category=classification.category.value, text=text)
            summary.skipped += 1
            return

        result = self.sink.deliver(text)
        if not result.success:
            summary.failed += 1
            logger.warning("delivery_failed", sink=result.sink_name, error=result.message)
            return

        self.store.mark_delivered(snapshot.name, snapshot.observed_at)
        summary.delivered += 1
        logger.info("report_delivered", category=classification.category.value, sink=result.sink_name)

    def _escalate_unclassified(
        self, previous: Snapshot | None, snapshot: Snapshot, summary: NotificationSummary
    ) -> None:
        logger.warning("unclassified_change", feature=snapshot.name)

        result = self.sink.escalate(unclassified_message(previous, snapshot))
        if not result.success:
            summary.failed += 1
            logger.error("escalation_failed", sink=result.sink_name, error=result.message)
            return

        self.store.mark_delivery_failed_and_reported(snapshot.name, snapshot.observed_at)
        summary.escalated += 1
        logger.info("escalation_sent", sink=result.sink_name)


__all__ = [
    "NotificationLoop",
    "NotificationPolicy",
    "NotificationSummary",
    "safe_mode_message",
    "unclassified_message",
]
