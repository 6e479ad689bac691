"""
Producer protocol for feature records.

A source yields the current state of the published matrix as a flat list of
feature records. It knows nothing about history: stamping records with an
observation time and deciding whether they are worth keeping is the
ingestion loop's job.

Design Principles:
- Protocol over Inheritance: any object with ``name`` and ``fetch()`` is a source
- Fail loudly at the boundary: native errors are wrapped in ``SourceError``

Usage:
    from compat_spine.framework.sources import JsonFileSource

    source = JsonFileSource("fixtures/features.json")
    for record in source.fetch():
        print(record.spec_version, record.name)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, runtime_checkable

from compat_spine.domain.snapshot import CompilerRecord, PaperReference, Snapshot


@dataclass(frozen=True)
class FeatureRecord:
    """
    One feature as reported by a producer.

    ``records`` follows ``VENDORS`` order. It may be shorter than the vendor
    list or hold ``None`` entries; both mean "no support, no text".
    """

    spec_version: int
    name: str
    records: Sequence[CompilerRecord | None] = field(default_factory=tuple)
    paper: PaperReference | None = None

    def to_snapshot(self, observed_at: datetime) -> Snapshot:
        """Stamp the record with an observation time."""
        return Snapshot(
            name=self.name,
            observed_at=observed_at,
            spec_version=self.spec_version,
            records=tuple(self.records),
            paper=self.paper,
        )


@runtime_checkable
class FeatureSource(Protocol):
    """
    Protocol for feature producers.

    ``fetch()`` returns every feature currently listed, or raises a
    :class:`~compat_spine.core.errors.SourceError` (``ParseError`` for an
    unreadable document, ``NetworkError`` for transport failures).
    """

    @property
    def name(self) -> str:
        """Source name used in logs and error context."""
        ...

    def fetch(self) -> list[FeatureRecord]:
        """Fetch the current feature list."""
        ...


__all__ = [
    "FeatureRecord",
    "FeatureSource",
]
