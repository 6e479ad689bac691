"""
cppreference compiler-support page source.

Fetches https://en.cppreference.com/w/cpp/compiler_support with httpx and
reads the per-standard feature tables with BeautifulSoup.

Page layout relied on:
    - Each standard starts with a ``.mw-headline`` whose text contains
      "features" and names the standard (``C++20``, ``C++2b``, ...).
    - The first following sibling containing ``tr`` elements is its table.
    - Rows with a ``th`` are headings. In feature rows, cell 0 is the name,
      cell 1 the paper link, and cells 3, 5 and 7 the GCC, Clang and MSVC
      support cells.
    - A support cell is full with class ``table-yes``, partial with
      ``table-partial``, none otherwise. Its text is the display text and
      the ``title`` of its first child element the extra text.

Usage:
    source = CppReferenceSource(timeout=30)
    records = source.fetch()

    # or parse a saved page
    records = parse_compiler_support(Path("compiler_support.html").read_text())
"""

from __future__ import annotations

import re

import httpx
from bs4 import BeautifulSoup, Tag

from compat_spine.core.errors import NetworkError, ParseError
from compat_spine.core.logging import get_logger
from compat_spine.core.settings import DEFAULT_SOURCE_URL
from compat_spine.domain.snapshot import VENDORS, CompilerRecord, PaperReference, SupportLevel
from compat_spine.framework.sources.protocol import FeatureRecord

logger = get_logger(__name__)

# Column of each vendor's support cell, in VENDORS order
VENDOR_COLUMNS = (3, 5, 7)

_STANDARD_PATTERN = re.compile(r"C\+\+\s*(\d[0-9a-z])")
_STANDARD_ALIASES = {
    "11": 11,
    "14": 14,
    "17": 17,
    "20": 20,
    "2a": 20,
    "23": 23,
    "2b": 23,
    "26": 26,
    "2c": 26,
}


def parse_standard(text: str) -> int | None:
    """Return the standard a headline names (``"C++2a features"`` is 20)."""
    match = _STANDARD_PATTERN.search(text)
    if match is None:
        return None
    return _STANDARD_ALIASES.get(match.group(1))


def _support_level(cell: Tag) -> SupportLevel:
    classes = cell.get("class") or []
    if "table-yes" in classes:
        return SupportLevel.FULL
    if "table-partial" in classes:
        return SupportLevel.PARTIAL
    return SupportLevel.NONE


def _compiler_record(cell: Tag | None) -> CompilerRecord | None:
    if cell is None:
        return None
    first_child = cell.find(True, recursive=False)
    extra = first_child.get("title", "") if first_child is not None else ""
    return CompilerRecord(
        support=_support_level(cell),
        display_text=cell.get_text().strip(),
        extra_text=str(extra).strip(),
    )


def _paper(cell: Tag | None) -> PaperReference | None:
    if cell is None:
        return None
    anchor = cell.find(True, recursive=False)
    if anchor is None:
        return PaperReference.of(cell.get_text().strip(), None)
    return PaperReference.of(anchor.get_text().strip(), str(anchor.get("href", "")).strip())


def _following_table(headline: Tag) -> Tag | None:
    node = headline.parent
    while node is not None and node.find("tr") is None:
        node = node.find_next_sibling()
    return node


def _parse_row(row: Tag, spec_version: int) -> FeatureRecord | None:
    cells = row.find_all(["td", "th"], recursive=False)
    if not cells:
        return None

    name = cells[0].get_text().strip()
    if not name:
        return None

    def cell(index: int) -> Tag | None:
        return cells[index] if index < len(cells) else None

    return FeatureRecord(
        spec_version=spec_version,
        name=name,
        records=tuple(_compiler_record(cell(column)) for column in VENDOR_COLUMNS),
        paper=_paper(cell(1)),
    )


def parse_compiler_support(html: str | bytes) -> list[FeatureRecord]:
    """Parse the compiler-support page into feature records.

    Raises:
        ParseError: if no feature table could be found at all.
    """
    soup = BeautifulSoup(html, "html.parser")
    records: list[FeatureRecord] = []
    tables_found = 0

    for headline in soup.select(".mw-headline"):
        title = headline.get_text()
        if "features" not in title:
            continue

        spec_version = parse_standard(title)
        if spec_version is None:
            logger.warning("unknown_standard_headline", headline=title.strip())
            continue

        table = _following_table(headline)
        if table is None:
            logger.warning("feature_table_missing", headline=title.strip())
            continue
        tables_found += 1

        for row in table.find_all("tr"):
            if row.find("th") is not None:
                continue
            record = _parse_row(row, spec_version)
            if record is not None:
                records.append(record)

    if tables_found == 0:
        raise ParseError("no feature tables found on compiler support page")

    logger.debug("compiler_support_parsed", tables=tables_found, features=len(records))
    return records


class CppReferenceSource:
    """Live source scraping the cppreference compiler-support page."""

    def __init__(
        self,
        url: str = DEFAULT_SOURCE_URL,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
        name: str = "cppreference",
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._client = client
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def url(self) -> str:
        return self._url

    def _get(self) -> httpx.Response:
        if self._client is not None:
            return self._client.get(self._url, timeout=self._timeout)
        with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
            return client.get(self._url)

    def fetch(self) -> list[FeatureRecord]:
        try:
            response = self._get()
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"compiler support page returned {e.response.status_code}", cause=e
            ).with_context(
                source_name=self._name, url=self._url, http_status=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"failed to fetch compiler support page: {e}", cause=e).with_context(
                source_name=self._name, url=self._url
            ) from e

        try:
            records = parse_compiler_support(response.text)
        except ParseError as e:
            raise e.with_context(source_name=self._name, url=self._url)

        logger.info("features_fetched", source=self._name, count=len(records))
        return records


__all__ = [
    "CppReferenceSource",
    "VENDOR_COLUMNS",
    "parse_compiler_support",
    "parse_standard",
]
