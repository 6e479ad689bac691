"""
compat-spine domain - snapshots, change classification, reports, history.

Module Map
----------
  snapshot     Snapshot / CompilerRecord model and the persistence gate
  classifier   First-match change categories
  report       Category renderers and the length limit
  history      HistoryStore protocol and in-memory store
  store        SQLite history store
  samples      Built-in preview scenarios
"""

from compat_spine.domain.classifier import ChangeCategory, Classification, classify
from compat_spine.domain.history import DiffResult, HistoryStore, InMemoryHistoryStore
from compat_spine.domain.report import Report, ReportOptions, render_report, synthesize, truncate
from compat_spine.domain.snapshot import (
    CLANG,
    GCC,
    MSVC,
    VENDORS,
    CompilerRecord,
    DeliveryState,
    PaperReference,
    Snapshot,
    SupportLevel,
    Vendor,
    differs_meaningfully,
)

__all__ = [
    # Model
    "CLANG",
    "GCC",
    "MSVC",
    "VENDORS",
    "CompilerRecord",
    "DeliveryState",
    "PaperReference",
    "Snapshot",
    "SupportLevel",
    "Vendor",
    "differs_meaningfully",
    # Classification
    "ChangeCategory",
    "Classification",
    "classify",
    # Reports
    "Report",
    "ReportOptions",
    "render_report",
    "synthesize",
    "truncate",
    # History
    "DiffResult",
    "HistoryStore",
    "InMemoryHistoryStore",
]
