"""
Snapshot model: one observation of one feature's compiler support.

Manifesto:
    The published matrix is tracked as an append-only history. A snapshot is
    never edited: when a feature changes, a new snapshot is appended and the
    old one stays as the "previous" side of the next comparison.

    - **Immutable:** Frozen dataclasses throughout
    - **Vendor-generic:** Records are a tuple aligned with ``VENDORS``; code
      iterates the descriptors instead of naming each compiler
    - **One text normalization:** ``None`` and ``""`` are the same value for
      every optional text field, folded once at construction

Architecture:
    ::

        Snapshot
        ├── name, observed_at          natural key
        ├── spec_version               e.g. 20 for C++20
        ├── paper: PaperReference | None
        ├── records: (CompilerRecord, CompilerRecord, CompilerRecord)
        │            aligned with VENDORS = (GCC, Clang, MSVC)
        └── delivery_state             excluded from equality

Examples:
    >>> a = Snapshot("Modules", observed_at, 20, [CompilerRecord(SupportLevel.FULL, "11")])
    >>> a.record(CLANG)
    CompilerRecord(support=<SupportLevel.NONE: 0>, display_text='', extra_text='')
    >>> differs_meaningfully(a, a)
    False

Tags:
    snapshot, data-model, immutable, compat-spine

Doc-Types:
    - API Reference
    - Data Model
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum, IntEnum

from compat_spine.core.timestamps import ensure_utc, to_iso8601


class SupportLevel(IntEnum):
    """Per-vendor support indicator. Integer values are the stored values."""

    NONE = 0
    FULL = 1
    PARTIAL = 2

    @property
    def label(self) -> str:
        return _SUPPORT_LABELS[self]


_SUPPORT_LABELS = {
    SupportLevel.NONE: "no",
    SupportLevel.FULL: "yes",
    SupportLevel.PARTIAL: "partial",
}


@dataclass(frozen=True)
class Vendor:
    """A tracked compiler. ``id`` is used for storage column names."""

    id: str
    display_name: str


GCC = Vendor("gcc", "GCC")
CLANG = Vendor("clang", "Clang")
MSVC = Vendor("msvc", "MSVC")

# Output order of every report
VENDORS: tuple[Vendor, ...] = (GCC, CLANG, MSVC)


def vendor_by_id(vendor_id: str) -> Vendor:
    for vendor in VENDORS:
        if vendor.id == vendor_id:
            return vendor
    raise KeyError(vendor_id)


@dataclass(frozen=True)
class CompilerRecord:
    """Support state of one vendor for one feature."""

    support: SupportLevel = SupportLevel.NONE
    display_text: str = ""
    extra_text: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "support", SupportLevel(self.support))
        object.__setattr__(self, "display_text", self.display_text or "")
        object.__setattr__(self, "extra_text", self.extra_text or "")

    @property
    def version_text(self) -> str:
        """Display text, followed by ``(extra)`` when extra text is present."""
        if self.extra_text:
            return f"{self.display_text}({self.extra_text})"
        return self.display_text

    def text_differs(self, other: CompilerRecord) -> bool:
        return self.display_text != other.display_text or self.extra_text != other.extra_text


@dataclass(frozen=True)
class PaperReference:
    """The proposal paper a feature comes from."""

    name: str = ""
    link: str = ""

    @classmethod
    def of(cls, name: str | None, link: str | None) -> PaperReference | None:
        """Build a reference, or ``None`` when both parts are empty."""
        if not name and not link:
            return None
        return cls(name or "", link or "")


class DeliveryState(str, Enum):
    """Notification progress of a snapshot. Moves forward only."""

    NOT_ATTEMPTED = "not_attempted"
    DELIVERED = "delivered"
    FAILED_REPORTED = "failed_reported"

    @property
    def is_final(self) -> bool:
        return self is not DeliveryState.NOT_ATTEMPTED

    def advance_to(self, target: DeliveryState) -> DeliveryState:
        """Return the state after a mark operation; final states never change."""
        if self.is_final:
            return self
        return target


def _normalize_records(
    records: Iterable[CompilerRecord | None],
) -> tuple[CompilerRecord, ...]:
    normalized = [record if record is not None else CompilerRecord() for record in records]
    if len(normalized) > len(VENDORS):
        raise ValueError(f"expected at most {len(VENDORS)} compiler records, got {len(normalized)}")
    normalized.extend(CompilerRecord() for _ in range(len(VENDORS) - len(normalized)))
    return tuple(normalized)


@dataclass(frozen=True)
class Snapshot:
    """One immutable observation of a feature's compiler-support state."""

    name: str
    observed_at: datetime
    spec_version: int
    records: tuple[CompilerRecord, ...] = ()
    paper: PaperReference | None = None
    delivery_state: DeliveryState = field(default=DeliveryState.NOT_ATTEMPTED, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "observed_at", ensure_utc(self.observed_at))
        object.__setattr__(self, "records", _normalize_records(self.records))
        if self.paper is not None and not self.paper.name and not self.paper.link:
            object.__setattr__(self, "paper", None)

    @property
    def key(self) -> tuple[str, datetime]:
        return self.name, self.observed_at

    def record(self, vendor: Vendor) -> CompilerRecord:
        return self.records[VENDORS.index(vendor)]

    def vendor_records(self) -> Iterator[tuple[Vendor, CompilerRecord]]:
        return zip(VENDORS, self.records, strict=True)

    def with_delivery_state(self, state: DeliveryState) -> Snapshot:
        return replace(self, delivery_state=state)

    def describe(self) -> str:
        """Full multi-line expansion, used in operator escalations."""
        lines = [f"{self.name} (C++{self.spec_version}) observed {to_iso8601(self.observed_at)}"]
        if self.paper is not None:
            lines.append(f"paper: {self.paper.name} <{self.paper.link}>")
        for vendor, record in self.vendor_records():
            lines.append(
                f"{vendor.display_name}: support={record.support.label} "
                f"display={record.display_text!r} extra={record.extra_text!r}"
            )
        lines.append(f"delivery: {self.delivery_state.value}")
        return "\n".join(lines)


def differs_meaningfully(a: Snapshot, b: Snapshot) -> bool:
    """True iff name, spec version, paper or any vendor field differs.

    Observation time and delivery state are not compared.  This is the gate
    for persisting a new observation; it does not say what kind of change
    happened.
    """
    return (
        a.name != b.name
        or a.spec_version != b.spec_version
        or a.paper != b.paper
        or a.records != b.records
    )


__all__ = [
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
    "vendor_by_id",
]
