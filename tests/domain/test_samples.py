"""Tests for the built-in sample scenarios."""

from compat_spine.domain.classifier import ChangeCategory
from compat_spine.domain.report import synthesize
from compat_spine.domain.samples import sample_scenarios


def test_every_sample_renders():
    for scenario in sample_scenarios():
        report = synthesize(scenario.previous, scenario.next)
        assert report.text, scenario.title


def test_sample_categories():
    categories = [
        synthesize(scenario.previous, scenario.next).classification.category
        for scenario in sample_scenarios()
    ]
    assert categories == [
        ChangeCategory.NEW_LISTING,
        ChangeCategory.NEW_LISTING,
        ChangeCategory.SUPPORT_LEVEL_CHANGED,
        ChangeCategory.SUPPORT_LEVEL_CHANGED,
        ChangeCategory.SUPPORT_LEVEL_CHANGED,
        ChangeCategory.SUPPORT_LEVEL_CHANGED,
        ChangeCategory.TEXT_CHANGED,
        ChangeCategory.TEXT_CHANGED,
    ]


def test_several_texts_sample_uses_plural():
    scenario = sample_scenarios()[-1]
    assert synthesize(scenario.previous, scenario.next).text.startswith("Support texts changed")
