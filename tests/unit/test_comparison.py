"""
Unit Tests for the Comparison Engine
"""
from datetime import datetime, timedelta

import pytest

from icope_risk.core.catalog import AnswerOption, Domain, DomainCatalog, Question
from icope_risk.core.comparison import Trend, build_timeline, classify_trend, compare_assessments
from icope_risk.core.inference import RiskLevel
from icope_risk.core.lifecycle import AssessmentLifecycle
from icope_risk.errors import ValidationError
from tests.helpers import FIXED_NOW, completed_assessment

LATER = FIXED_NOW + timedelta(days=90)


def _domain(domain_id: str) -> Domain:
    options = (AnswerOption(0, "none"), AnswerOption(1, "some"), AnswerOption(2, "severe"))
    return Domain(id=domain_id, name=domain_id.title(), questions=(Question(f"{domain_id}_1", "?", options),))


class TestClassifyTrend:
    """Tests for single-domain trend classification."""

    @pytest.mark.parametrize("previous,current,expected", [
        (4, 2, Trend.IMPROVED),
        (1, 2, Trend.DECLINED),
        (2, 2, Trend.SAME),
        (None, 2, Trend.NEW),
        (2, None, Trend.REMOVED),
    ])
    def test_trends(self, previous, current, expected):
        """Test lower scores are improvements."""
        assert classify_trend(previous, current) == expected

    def test_inverted_scale(self):
        """Test inverted domains treat a higher score as improvement."""
        assert classify_trend(1, 2, higher_is_worse=False) == Trend.IMPROVED

    def test_reversed(self):
        """Test trend reversal pairs."""
        assert Trend.IMPROVED.reversed() == Trend.DECLINED
        assert Trend.NEW.reversed() == Trend.REMOVED
        assert Trend.SAME.reversed() == Trend.SAME


class TestCompareAssessments:
    """Tests for comparing two completed assessments."""

    def test_mobility_improved(self, lifecycle, catalog):
        """Test mobility 4 -> 2 is an improvement with change -2."""
        previous = completed_assessment(lifecycle, overrides={"mob_1": 2, "mob_2": 2})
        current = completed_assessment(lifecycle, assessed_at=LATER, overrides={"mob_1": 1, "mob_2": 1})
        comparison = compare_assessments(previous, current, catalog)

        mobility = comparison.by_domain()["mobility"]
        assert mobility.previous_score == 4
        assert mobility.current_score == 2
        assert mobility.change == -2
        assert mobility.trend == Trend.IMPROVED
        assert mobility.previous_risk == RiskLevel.INTERVENTION
        assert mobility.current_risk == RiskLevel.AT_RISK

        assert comparison.count(Trend.IMPROVED) == 1
        assert comparison.count(Trend.SAME) == len(catalog.domains) - 1
        assert comparison.overall_trend == Trend.IMPROVED
        assert comparison.cumulative_change == -2

    def test_catalog_order(self, lifecycle, catalog):
        """Test comparisons are listed in catalog order."""
        previous = completed_assessment(lifecycle)
        current = completed_assessment(lifecycle, assessed_at=LATER)
        comparison = compare_assessments(previous, current, catalog)
        assert [d.domain_id for d in comparison.domains] == catalog.domain_ids

    def test_reverse_order_rejected(self, lifecycle, catalog):
        """Test a later 'previous' assessment is rejected."""
        earlier = completed_assessment(lifecycle)
        later = completed_assessment(lifecycle, assessed_at=LATER)
        with pytest.raises(ValidationError):
            compare_assessments(later, earlier, catalog)

    def test_draft_rejected(self, lifecycle, catalog):
        """Test drafts cannot be compared."""
        completed = completed_assessment(lifecycle)
        draft = lifecycle.start("ELDER-1", assessed_at=LATER)
        with pytest.raises(ValidationError):
            compare_assessments(completed, draft, catalog)

    def test_mixed_timezones_rejected(self, lifecycle, catalog):
        """Test naive and aware timestamps cannot be ordered."""
        aware = completed_assessment(lifecycle)
        naive = completed_assessment(lifecycle, assessed_at=datetime(2024, 6, 1, 9, 0))
        with pytest.raises(ValidationError):
            compare_assessments(aware, naive, catalog)

    def test_different_subjects_allowed(self, lifecycle, catalog):
        """Test assessments of different subjects still compare."""
        previous = completed_assessment(lifecycle, subject_id="ELDER-1")
        current = completed_assessment(lifecycle, subject_id="ELDER-2", assessed_at=LATER)
        assert compare_assessments(previous, current, catalog).overall_trend == Trend.SAME

    def test_to_dict(self, lifecycle, catalog):
        """Test serialization carries the trend summary."""
        previous = completed_assessment(lifecycle)
        current = completed_assessment(lifecycle, assessed_at=LATER, overrides={"vis_1": 2})
        data = compare_assessments(previous, current, catalog).to_dict()
        assert data["overall_trend"] == "declined"
        assert data["summary"]["declined"] == 1
        assert data["domains"][3]["domain"] == "vision"


class TestDomainUnion:
    """Tests for domains present in only one assessment."""

    @pytest.fixture
    def pair(self):
        first = AssessmentLifecycle(DomainCatalog.build([_domain("a"), _domain("b")]))
        second = AssessmentLifecycle(DomainCatalog.build([_domain("a"), _domain("c")]))
        earlier = completed_assessment(first, overrides={"a_1": 1, "b_1": 2})
        later = completed_assessment(second, overrides={"a_1": 1, "c_1": 1})
        return first.catalog, earlier, later

    def test_new_and_removed(self, pair):
        """Test union of domains with new and removed trends."""
        catalog, earlier, later = pair
        comparison = compare_assessments(earlier, later, catalog).by_domain()
        assert set(comparison) == {"a", "b", "c"}
        assert comparison["b"].trend == Trend.REMOVED
        assert comparison["b"].change == -2
        assert comparison["c"].trend == Trend.NEW
        assert comparison["c"].change == 1
        assert comparison["c"].previous_score is None

    def test_antisymmetric_with_equal_timestamps(self, pair):
        """Test swapping equal-time assessments negates every change."""
        catalog, earlier, later = pair
        forward = compare_assessments(earlier, later, catalog).by_domain()
        backward = compare_assessments(later, earlier, catalog).by_domain()
        assert earlier.assessed_at == later.assessed_at
        for domain_id, item in forward.items():
            assert backward[domain_id].change == -item.change
            assert backward[domain_id].trend == item.trend.reversed()


class TestTimeline:
    """Tests for comparing a subject's history."""

    def test_pairwise_sorted(self, lifecycle, catalog):
        """Test timeline sorts by date and skips drafts."""
        first = completed_assessment(lifecycle, overrides={"vis_1": 2})
        second = completed_assessment(lifecycle, assessed_at=LATER, overrides={"vis_1": 1})
        third = completed_assessment(lifecycle, assessed_at=LATER + timedelta(days=90))
        draft = lifecycle.start("ELDER-1", assessed_at=LATER + timedelta(days=1))

        timeline = build_timeline([third, draft, first, second], catalog)
        assert [(c.previous_id, c.current_id) for c in timeline] == [
            (first.id, second.id),
            (second.id, third.id),
        ]
        assert all(c.by_domain()["vision"].trend == Trend.IMPROVED for c in timeline)

    def test_single_assessment(self, lifecycle, catalog):
        """Test one assessment yields an empty timeline."""
        assert build_timeline([completed_assessment(lifecycle)], catalog) == []

    def test_multiple_subjects_rejected(self, lifecycle, catalog):
        """Test a timeline must cover one subject."""
        with pytest.raises(ValidationError):
            build_timeline([
                completed_assessment(lifecycle, subject_id="ELDER-1"),
                completed_assessment(lifecycle, subject_id="ELDER-2", assessed_at=LATER),
            ], catalog)
