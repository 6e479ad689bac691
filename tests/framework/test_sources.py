"""
Tests for feature sources.

Tests cover:
- cppreference page parsing (standards, support classes, papers)
- CppReferenceSource over a mocked HTTP transport
- JSON file documents and JsonFileSource
- Source selection from settings
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import httpx
import pytest

from compat_spine.core.errors import InvalidConfigError, NetworkError, ParseError, SourceError
from compat_spine.core.settings import CompatSettings
from compat_spine.domain.snapshot import GCC, CLANG, MSVC, CompilerRecord, PaperReference, SupportLevel
from compat_spine.framework.sources import (
    CppReferenceSource,
    FeatureRecord,
    FeatureSource,
    JsonFileSource,
    create_source,
    parse_compiler_support,
    parse_feature_document,
)
from compat_spine.framework.sources.cppreference import parse_standard

FIXTURES = Path(__file__).parent.parent / "fixtures"
PAGE = (FIXTURES / "compiler_support.html").read_text(encoding="utf-8")


def _by_name(records: list[FeatureRecord]) -> dict[str, FeatureRecord]:
    return {record.name: record for record in records}


class TestParseStandard:
    @pytest.mark.parametrize(
        ("headline", "expected"),
        [
            ("C++20 features", 20),
            ("C++2a features", 20),
            ("C++2b features", 23),
            ("C++23 core language features", 23),
            ("C++2c features", 26),
            ("C++17 library features", 17),
        ],
    )
    def test_known(self, headline, expected):
        assert parse_standard(headline) == expected

    def test_unknown(self):
        assert parse_standard("Notes") is None
        assert parse_standard("C++99 features") is None


class TestParseCompilerSupport:
    def test_reads_every_feature_row(self):
        records = parse_compiler_support(PAGE)
        assert [r.name for r in records] == [
            "Modules",
            "Initializer list constructors in class template argument deduction",
            "Literal suffix for size_t",
        ]

    def test_spec_versions_from_headlines(self):
        records = _by_name(parse_compiler_support(PAGE))
        assert records["Modules"].spec_version == 20
        assert records["Literal suffix for size_t"].spec_version == 23

    def test_support_cells(self):
        modules = _by_name(parse_compiler_support(PAGE))["Modules"]
        snapshot = modules.to_snapshot(datetime(2024, 1, 1, tzinfo=UTC))

        assert snapshot.record(GCC) == CompilerRecord(SupportLevel.PARTIAL, "11", "no header units")
        assert snapshot.record(CLANG) == CompilerRecord(SupportLevel.PARTIAL, "8")
        assert snapshot.record(MSVC) == CompilerRecord(SupportLevel.FULL, "19.28")

    def test_extra_text_from_child_title(self):
        ctad = _by_name(parse_compiler_support(PAGE))[
            "Initializer list constructors in class template argument deduction"
        ]
        clang = ctad.records[1]
        assert clang.support is SupportLevel.FULL
        assert clang.display_text == "6 (partial)*"
        assert clang.extra_text == "only supported if flag supplied"
        assert ctad.records[2] == CompilerRecord()

    def test_paper_link(self):
        modules = _by_name(parse_compiler_support(PAGE))["Modules"]
        assert modules.paper == PaperReference("P1103R3", "https://wg21.link/P1103R3")

    def test_page_without_tables(self):
        with pytest.raises(ParseError):
            parse_compiler_support("<html><body><p>maintenance</p></body></html>")


class TestCppReferenceSource:
    def _client(self, handler) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    def test_is_feature_source(self):
        assert isinstance(CppReferenceSource(), FeatureSource)

    def test_fetch(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, text=PAGE)

        source = CppReferenceSource("https://example.test/support", client=self._client(handler))
        records = source.fetch()

        assert requested == ["https://example.test/support"]
        assert len(records) == 3

    def test_http_error_status(self):
        source = CppReferenceSource(
            "https://example.test/support",
            client=self._client(lambda request: httpx.Response(503)),
        )
        with pytest.raises(NetworkError) as exc_info:
            source.fetch()

        assert exc_info.value.context.http_status == 503
        assert exc_info.value.context.source_name == "cppreference"
        assert exc_info.value.retryable

    def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        source = CppReferenceSource(client=self._client(handler))
        with pytest.raises(NetworkError):
            source.fetch()

    def test_unparseable_page(self):
        source = CppReferenceSource(
            "https://example.test/support",
            client=self._client(lambda request: httpx.Response(200, text="<html></html>")),
        )
        with pytest.raises(ParseError) as exc_info:
            source.fetch()
        assert exc_info.value.context.url == "https://example.test/support"


class TestFeatureDocument:
    def test_parse(self):
        records = _by_name(parse_feature_document((FIXTURES / "features.json").read_text()))

        modules = records["Modules"]
        assert modules.spec_version == 20
        assert modules.records[0] == CompilerRecord(SupportLevel.PARTIAL, "11", "no header units")
        assert modules.paper == PaperReference("P1103R3", "https://wg21.link/P1103R3")

        literal = records["Literal suffix for size_t"]
        assert literal.records[0].support is SupportLevel.FULL
        assert literal.records[1].support is SupportLevel.FULL
        assert literal.records[2] is None
        assert literal.paper is None

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            parse_feature_document("{not json")

    def test_unknown_support_reads_as_none(self):
        document = json.dumps(
            [
                {"name": "Good", "spec_version": 20, "compilers": {"gcc": {"support": "full"}}},
                {
                    "name": "Bad",
                    "spec_version": 20,
                    "compilers": {
                        "gcc": {"support": "maybe", "display_text": "12"},
                        "clang": {"support": 7},
                        "msvc": {"support": "partial"},
                    },
                },
            ]
        )

        records = _by_name(parse_feature_document(document))

        assert records["Good"].records[0].support is SupportLevel.FULL
        bad = records["Bad"]
        assert bad.records[0] == CompilerRecord(SupportLevel.NONE, "12")
        assert bad.records[1].support is SupportLevel.NONE
        assert bad.records[2].support is SupportLevel.PARTIAL

    def test_missing_name(self):
        with pytest.raises(ParseError):
            parse_feature_document('[{"spec_version": 20}]')


class TestJsonFileSource:
    def test_fetch(self):
        source = JsonFileSource(FIXTURES / "features.json")
        assert isinstance(source, FeatureSource)
        assert len(source.fetch()) == 2

    def test_missing_file(self, tmp_path: Path):
        source = JsonFileSource(tmp_path / "missing.json")
        with pytest.raises(SourceError) as exc_info:
            source.fetch()

        assert not isinstance(exc_info.value, ParseError)
        assert exc_info.value.context.source_name == "file"
        assert exc_info.value.context.metadata["path"].endswith("missing.json")

    def test_bad_document(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text('{"not": "a list"}')
        with pytest.raises(ParseError):
            JsonFileSource(path).fetch()


class TestCreateSource:
    def test_default_is_cppreference(self):
        source = create_source(CompatSettings(source_url="https://example.test/page"))
        assert isinstance(source, CppReferenceSource)
        assert source.url == "https://example.test/page"

    def test_file(self):
        source = create_source(CompatSettings(source="file", source_file=FIXTURES / "features.json"))
        assert isinstance(source, JsonFileSource)

    def test_file_without_path(self):
        with pytest.raises(InvalidConfigError):
            create_source(CompatSettings(source="file"))
