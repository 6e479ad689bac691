"""Built-in sample changes for previewing report rendering.

The scenarios start from one realistic feature row and vary it the ways the
live page changes: a feature appearing, gaining or losing support in one or
more compilers, and support text being edited.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime

from compat_spine.domain.snapshot import CompilerRecord, PaperReference, Snapshot, SupportLevel

_BEFORE = datetime(2019, 3, 1, tzinfo=UTC)
_AFTER = datetime(2019, 3, 2, tzinfo=UTC)


@dataclass(frozen=True)
class SampleScenario:
    title: str
    previous: Snapshot | None
    next: Snapshot


def _variant(snapshot: Snapshot, **vendors: CompilerRecord) -> Snapshot:
    gcc, clang, msvc = snapshot.records
    return replace(
        snapshot,
        observed_at=_AFTER,
        records=(vendors.get("gcc", gcc), vendors.get("clang", clang), vendors.get("msvc", msvc)),
    )


def sample_scenarios() -> list[SampleScenario]:
    base = Snapshot(
        name="Initializer list constructors in class template argument deduction",
        observed_at=_BEFORE,
        spec_version=20,
        records=(
            CompilerRecord(SupportLevel.NONE),
            CompilerRecord(SupportLevel.FULL, "6 (partial)*", "only supported if flag supplied"),
            CompilerRecord(SupportLevel.NONE),
        ),
        paper=PaperReference("P0702R1", "https://wg21.link/P0702R1"),
    )
    msvc_partial = replace(
        base, records=(*base.records[:2], CompilerRecord(SupportLevel.PARTIAL, "19.20", "not bug free"))
    )
    gcc_gained = _variant(base, gcc=CompilerRecord(SupportLevel.FULL, "9*", "still some bugs"))
    gcc_and_msvc_gained = _variant(gcc_gained, msvc=CompilerRecord(SupportLevel.FULL, "19.20"))
    clang_text = _variant(msvc_partial, clang=CompilerRecord(SupportLevel.FULL, "6"))
    clang_and_msvc_text = _variant(
        clang_text, msvc=CompilerRecord(SupportLevel.PARTIAL, "19.20", "one bug")
    )

    def earlier(snapshot: Snapshot) -> Snapshot:
        return replace(snapshot, observed_at=_BEFORE)

    return [
        SampleScenario("New feature listed", None, base),
        SampleScenario("New feature listed with full support", None, gcc_and_msvc_gained),
        SampleScenario("Feature gained compiler support", base, gcc_gained),
        SampleScenario("Feature gained support in several compilers", base, gcc_and_msvc_gained),
        SampleScenario("Feature lost compiler support", earlier(gcc_gained), _variant(base)),
        SampleScenario(
            "Feature lost support in several compilers", earlier(gcc_and_msvc_gained), _variant(base)
        ),
        SampleScenario("Support text changed", msvc_partial, clang_text),
        SampleScenario("Several support texts changed", msvc_partial, clang_and_msvc_text),
    ]


__all__ = ["SampleScenario", "sample_scenarios"]
