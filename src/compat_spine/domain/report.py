"""
Report synthesizer: render a classified change as short notification text.

Manifesto:
    Reports are built per category and then bounded once, as the last step,
    so no branch ever has to think about length.

    - **Deterministic:** Same (classification, previous, next) in, same text out
    - **Only what changed:** Comparison blocks list the changed vendors only
    - **Bounded:** ``truncate`` is applied to every category's output

Architecture:
    ::

        render_report(classification, previous, next, options)
            │
            ├── NEW_LISTING            → every vendor, current state
            ├── SUPPORT_LEVEL_CHANGED  → from / to block, changed vendors
            ├── TEXT_CHANGED           → from / to text, changed vendors
            │                            ("" when text changes are not narrated)
            └── UNCLASSIFIED           → ReportError
            │
            ▼
        truncate(text, options.limit)

Length limit:
    The platform counts any link as a fixed-width short link, so the limit is
    ``PLATFORM_LIMIT + (len(SOURCE_LINK) - SHORT_LINK_SIZE)``. Longer text is
    cut to ``limit - 3`` characters followed by ``...``.

Examples:
    >>> report = synthesize(previous, current)
    >>> print(report.text)
    Compiler support changed for C++17 feature "X"
    from:
    GCC - [no]
    to:
    GCC - [yes] 9(still buggy)
    https://en.cppreference.com/w/cpp/compiler_support

Tags:
    report, rendering, length-limit, pluralization, compat-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from compat_spine.core.errors import ReportError
from compat_spine.domain.classifier import ChangeCategory, Classification, classify
from compat_spine.domain.snapshot import CompilerRecord, Snapshot, Vendor

PLATFORM_LIMIT = 280
SOURCE_LINK = "https://en.cppreference.com/w/cpp/compiler_support"
SHORT_LINK_SIZE = len("https://t.co/iqNEBAK9qG")
TRIM_LIMIT = PLATFORM_LIMIT + (len(SOURCE_LINK) - SHORT_LINK_SIZE)
ELLIPSIS = "..."


@dataclass(frozen=True)
class ReportOptions:
    """Rendering knobs shared by all categories."""

    narrate_text_changes: bool = True
    link: str = SOURCE_LINK
    limit: int = TRIM_LIMIT


DEFAULT_OPTIONS = ReportOptions()


@dataclass(frozen=True)
class Report:
    """A classification together with its rendered text."""

    classification: Classification
    text: str

    @property
    def is_empty(self) -> bool:
        return self.text == ""


def truncate(text: str, limit: int = TRIM_LIMIT) -> str:
    """Cut *text* to *limit* characters, ending in an ellipsis when cut."""
    if len(text) > limit:
        return text[: limit - len(ELLIPSIS)] + ELLIPSIS
    return text


def standard_name(spec_version: int) -> str:
    return f"C++{spec_version}"


def vendor_line(vendor: Vendor, record: CompilerRecord) -> str:
    """``<vendor> - [<level>] <versionText>``; no trailing space when text is empty."""
    line = f"{vendor.display_name} - [{record.support.label}]"
    if record.version_text:
        line += f" {record.version_text}"
    return line


def _render_new_listing(
    classification: Classification,
    previous: Snapshot | None,
    next_: Snapshot,
    options: ReportOptions,
) -> list[str]:
    lines = [f'New {standard_name(next_.spec_version)} feature listed: "{next_.name}"']
    lines.extend(vendor_line(vendor, record) for vendor, record in next_.vendor_records())
    return lines


def _render_support_level_changed(
    classification: Classification,
    previous: Snapshot | None,
    next_: Snapshot,
    options: ReportOptions,
) -> list[str]:
    if previous is None:
        raise ReportError("support level change without a previous snapshot").with_context(
            feature=next_.name
        )
    lines = [f'Compiler support changed for {standard_name(next_.spec_version)} feature "{next_.name}"']
    lines.append("from:")
    lines.extend(vendor_line(vendor, previous.record(vendor)) for vendor in classification.changed)
    lines.append("to:")
    lines.extend(vendor_line(vendor, next_.record(vendor)) for vendor in classification.changed)
    return lines


def _render_text_changed(
    classification: Classification,
    previous: Snapshot | None,
    next_: Snapshot,
    options: ReportOptions,
) -> list[str]:
    if not options.narrate_text_changes:
        return []
    if previous is None:
        raise ReportError("text change without a previous snapshot").with_context(
            feature=next_.name
        )

    # An empty-to-empty pair is not a visible change
    shown = [
        vendor
        for vendor in classification.changed
        if previous.record(vendor).version_text or next_.record(vendor).version_text
    ]
    plural = "s" if len(classification.changed) > 1 else ""

    lines = [
        f'Support text{plural} changed for {standard_name(next_.spec_version)} feature "{next_.name}"'
    ]
    lines.append("from:")
    lines.extend(f'{vendor.display_name}: "{previous.record(vendor).version_text}"' for vendor in shown)
    lines.append("to:")
    lines.extend(f'{vendor.display_name}: "{next_.record(vendor).version_text}"' for vendor in shown)
    return lines


_Renderer = Callable[[Classification, Snapshot | None, Snapshot, ReportOptions], list[str]]

_RENDERERS: dict[ChangeCategory, _Renderer] = {
    ChangeCategory.NEW_LISTING: _render_new_listing,
    ChangeCategory.SUPPORT_LEVEL_CHANGED: _render_support_level_changed,
    ChangeCategory.TEXT_CHANGED: _render_text_changed,
}


def render_report(
    classification: Classification,
    previous: Snapshot | None,
    next_: Snapshot,
    options: ReportOptions = DEFAULT_OPTIONS,
) -> str:
    """Render the change as bounded text.

    Returns ``""`` when the category is not narrated under *options*.

    Raises:
        ReportError: for UNCLASSIFIED, or a comparison category without a
            previous snapshot.
    """
    renderer = _RENDERERS.get(classification.category)
    if renderer is None:
        raise ReportError(
            f"cannot render a change of category {classification.category.value}"
        ).with_context(feature=next_.name)

    lines = renderer(classification, previous, next_, options)
    if not lines:
        return ""
    lines.append(options.link)
    return truncate("\n".join(lines), options.limit)


def synthesize(
    previous: Snapshot | None,
    next_: Snapshot,
    options: ReportOptions = DEFAULT_OPTIONS,
) -> Report:
    """Classify the pair and render it."""
    classification = classify(previous, next_)
    return Report(classification, render_report(classification, previous, next_, options))


__all__ = [
    "DEFAULT_OPTIONS",
    "ELLIPSIS",
    "PLATFORM_LIMIT",
    "Report",
    "ReportOptions",
    "SHORT_LINK_SIZE",
    "SOURCE_LINK",
    "TRIM_LIMIT",
    "render_report",
    "standard_name",
    "synthesize",
    "truncate",
    "vendor_line",
]
