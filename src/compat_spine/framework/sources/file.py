"""
JSON file source for offline runs and fixtures.

The file holds a JSON array of features:

    [
      {
        "name": "Modules",
        "spec_version": 20,
        "paper": {"name": "P1103R3", "link": "https://wg21.link/P1103R3"},
        "compilers": {
          "gcc":   {"support": "partial", "display_text": "11"},
          "clang": {"support": "partial", "display_text": "8", "extra_text": "no header units"},
          "msvc":  {"support": "full", "display_text": "19.28"}
        }
      }
    ]

``support`` accepts ``none``/``full``/``partial`` (or ``no``/``yes``) and the
stored integers 0/1/2. Any other value, like a vendor missing from
``compilers``, means no support.

Usage:
    source = JsonFileSource("fixtures/features.json")
    records = source.fetch()
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from compat_spine.core.errors import ParseError, SourceError
from compat_spine.core.logging import get_logger
from compat_spine.domain.snapshot import VENDORS, CompilerRecord, PaperReference, SupportLevel
from compat_spine.framework.sources.protocol import FeatureRecord

logger = get_logger(__name__)

_SUPPORT_NAMES = {
    "none": SupportLevel.NONE,
    "no": SupportLevel.NONE,
    "full": SupportLevel.FULL,
    "yes": SupportLevel.FULL,
    "partial": SupportLevel.PARTIAL,
}


class CompilerEntry(BaseModel):
    """One vendor's entry in a feature document."""

    model_config = ConfigDict(extra="ignore")

    support: SupportLevel = SupportLevel.NONE
    display_text: str | None = None
    extra_text: str | None = None

    @field_validator("support", mode="before")
    @classmethod
    def _parse_support(cls, value: Any) -> SupportLevel:
        level: SupportLevel | None = None
        if isinstance(value, SupportLevel):
            level = value
        elif isinstance(value, str):
            level = _SUPPORT_NAMES.get(value.strip().lower())
        elif isinstance(value, int) and not isinstance(value, bool):
            try:
                level = SupportLevel(value)
            except ValueError:
                level = None

        if level is None:
            logger.warning("unknown_support_level", value=repr(value))
            return SupportLevel.NONE
        return level


class PaperEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    link: str | None = None


class FeatureEntry(BaseModel):
    """One feature in a feature document."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    spec_version: int
    paper: PaperEntry | None = None
    compilers: dict[str, CompilerEntry] = Field(default_factory=dict)

    def to_record(self) -> FeatureRecord:
        records = []
        for vendor in VENDORS:
            entry = self.compilers.get(vendor.id)
            records.append(
                CompilerRecord(entry.support, entry.display_text, entry.extra_text)
                if entry is not None
                else None
            )
        paper = PaperReference.of(self.paper.name, self.paper.link) if self.paper else None
        return FeatureRecord(
            spec_version=self.spec_version,
            name=self.name,
            records=tuple(records),
            paper=paper,
        )


_DOCUMENT = TypeAdapter(list[FeatureEntry])


def parse_feature_document(text: str | bytes) -> list[FeatureRecord]:
    """Parse a JSON feature document into records.

    Raises:
        ParseError: if the document is not valid JSON or has the wrong shape.
    """
    try:
        entries = _DOCUMENT.validate_json(text)
    except ValidationError as e:
        raise ParseError(
            f"invalid feature document: {e.error_count()} error(s)", cause=e
        ) from e
    return [entry.to_record() for entry in entries]


class JsonFileSource:
    """Source reading features from a local JSON file."""

    def __init__(self, path: str | Path, *, name: str = "file", encoding: str = "utf-8") -> None:
        self._path = Path(path)
        self._name = name
        self._encoding = encoding

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    def fetch(self) -> list[FeatureRecord]:
        try:
            text = self._path.read_text(encoding=self._encoding)
        except OSError as e:
            raise SourceError(f"cannot read feature file: {e}", cause=e).with_context(
                source_name=self._name, path=str(self._path)
            ) from e

        try:
            records = parse_feature_document(text)
        except ParseError as e:
            raise e.with_context(source_name=self._name, path=str(self._path))

        logger.debug("features_loaded", source=self._name, path=str(self._path), count=len(records))
        return records


__all__ = [
    "CompilerEntry",
    "FeatureEntry",
    "JsonFileSource",
    "PaperEntry",
    "parse_feature_document",
]
