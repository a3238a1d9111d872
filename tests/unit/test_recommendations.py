"""
Unit Tests for Recommendations and PHQ-2 Screening
"""
import pytest

from icope_risk.core.inference import (
    Priority,
    RiskLevel,
    generate_recommendations,
    score_domain,
    score_phq2,
)
from icope_risk.errors import ValidationError


class TestGenerateRecommendations:
    """Tests for the recommendation list."""

    def test_healthy(self, catalog):
        """Test a healthy assessment only gets the annual reassessment."""
        results = [score_domain(catalog.get_domain("vision"), {"vis_1": 0})]
        recs = generate_recommendations(RiskLevel.HEALTHY, results)
        assert [r.id for r in recs] == ["overall_healthy"]

    def test_intervention_sorted_by_priority(self, catalog):
        """Test urgent items come first."""
        results = [score_domain(catalog.get_domain("vision"), {"vis_1": 2})]
        recs = generate_recommendations(RiskLevel.INTERVENTION, results)
        ranks = [r.priority.rank for r in recs]
        assert ranks == sorted(ranks)
        assert recs[0].priority == Priority.URGENT
        ids = {r.id for r in recs}
        assert {"overall_urgent", "overall_multidis", "vis_ophth", "vision_flag"} <= ids

    def test_domain_name_attached(self, catalog):
        """Test domain recommendations name their domain."""
        results = [score_domain(catalog.get_domain("hearing"), {"hear_1": 1})]
        recs = generate_recommendations(RiskLevel.AT_RISK, results)
        hearing = next(r for r in recs if r.id == "hear_screen")
        assert hearing.domain == "Hearing"

    def test_flag_without_high_score(self, catalog):
        """Test a flag trigger adds its action even for a healthy domain."""
        results = [score_domain(catalog.get_domain("mobility"), {"mob_1": 0, "mob_2": 1})]
        recs = generate_recommendations(RiskLevel.HEALTHY, results)
        flag = next(r for r in recs if r.id == "mobility_flag")
        assert "Home safety" in flag.description

    def test_no_duplicates(self, catalog):
        """Test repeated results do not duplicate recommendations."""
        result = score_domain(catalog.get_domain("vision"), {"vis_1": 2})
        recs = generate_recommendations(RiskLevel.INTERVENTION, [result, result])
        ids = [r.id for r in recs]
        assert len(ids) == len(set(ids))

    def test_to_dict(self, catalog):
        """Test serialization."""
        rec = generate_recommendations(RiskLevel.HEALTHY, [])[0]
        data = rec.to_dict()
        assert data["priority"] == "low"
        assert data["category"] == "follow-up"


class TestPhq2:
    """Tests for PHQ-2 screening."""

    @pytest.mark.parametrize("interest,down,positive", [
        (0, 0, False),
        (1, 1, False),
        (2, 1, True),
        (3, 3, True),
    ])
    def test_threshold(self, interest, down, positive):
        """Test a total of 3 or more is positive."""
        result = score_phq2(interest, down)
        assert result.score == interest + down
        assert result.positive is positive

    @pytest.mark.parametrize("value", [-1, 4, True, "2"])
    def test_invalid_items(self, value):
        """Test items outside 0-3 are rejected."""
        with pytest.raises(ValidationError):
            score_phq2(value, 0)
