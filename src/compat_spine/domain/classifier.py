"""
Change classifier: decide what kind of change a new snapshot represents.

Manifesto:
    Exactly one category per (previous, next) pair, chosen by the first rule
    that matches. Categories are never combined: a support-level change that
    also drifted some text is reported as a support-level change.

Architecture:
    ::

        RULES (evaluated top-down, first match wins)
        ┌────────────────────────────────────────────────────────────┐
        │ 1. NEW_LISTING            previous is None                 │
        │ 2. SUPPORT_LEVEL_CHANGED  any vendor's support differs     │
        │ 3. TEXT_CHANGED           any display / extra text differs │
        └────────────────────────────────────────────────────────────┘
        fallthrough → UNCLASSIFIED  (nothing the reports can describe)

    Categories 2 and 3 carry the changed vendors, in ``VENDORS`` order.

Tags:
    classifier, change-detection, precedence, compat-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from compat_spine.domain.snapshot import VENDORS, Snapshot, Vendor


class ChangeCategory(str, Enum):
    """The four mutually exclusive change categories."""

    NEW_LISTING = "new_listing"
    SUPPORT_LEVEL_CHANGED = "support_level_changed"
    TEXT_CHANGED = "text_changed"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class Classification:
    """A category plus the vendors that changed (empty when not applicable)."""

    category: ChangeCategory
    changed: tuple[Vendor, ...] = ()

    @property
    def is_reportable(self) -> bool:
        return self.category is not ChangeCategory.UNCLASSIFIED


def support_changed_vendors(previous: Snapshot, next_: Snapshot) -> tuple[Vendor, ...]:
    return tuple(
        vendor
        for vendor in VENDORS
        if previous.record(vendor).support != next_.record(vendor).support
    )


def text_changed_vendors(previous: Snapshot, next_: Snapshot) -> tuple[Vendor, ...]:
    return tuple(
        vendor
        for vendor in VENDORS
        if previous.record(vendor).text_differs(next_.record(vendor))
    )


Rule = Callable[[Snapshot | None, Snapshot], Classification | None]


def _new_listing(previous: Snapshot | None, next_: Snapshot) -> Classification | None:
    if previous is None:
        return Classification(ChangeCategory.NEW_LISTING)
    return None


def _support_level_changed(previous: Snapshot | None, next_: Snapshot) -> Classification | None:
    changed = support_changed_vendors(previous, next_)
    if changed:
        return Classification(ChangeCategory.SUPPORT_LEVEL_CHANGED, changed)
    return None


def _text_changed(previous: Snapshot | None, next_: Snapshot) -> Classification | None:
    changed = text_changed_vendors(previous, next_)
    if changed:
        return Classification(ChangeCategory.TEXT_CHANGED, changed)
    return None


# _new_listing must stay first: the later rules assume previous is not None
RULES: tuple[Rule, ...] = (_new_listing, _support_level_changed, _text_changed)

UNCLASSIFIED = Classification(ChangeCategory.UNCLASSIFIED)


def classify(previous: Snapshot | None, next_: Snapshot) -> Classification:
    """Return the single applicable change category for the pair."""
    for rule in RULES:
        result = rule(previous, next_)
        if result is not None:
            return result
    return UNCLASSIFIED


__all__ = [
    "ChangeCategory",
    "Classification",
    "RULES",
    "UNCLASSIFIED",
    "classify",
    "support_changed_vendors",
    "text_changed_vendors",
]
