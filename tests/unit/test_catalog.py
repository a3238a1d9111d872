"""
Unit Tests for the Domain Catalog
"""
import pytest

from icope_risk.core.catalog import (
    AnswerOption,
    Domain,
    DomainCatalog,
    DomainGroup,
    Question,
    RiskBands,
    build_icope_catalog,
    default_catalog,
)
from icope_risk.errors import NotFoundError, ValidationError


def _question(qid: str) -> Question:
    return Question(id=qid, prompt=qid, options=(AnswerOption(0, "no"), AnswerOption(1, "some"), AnswerOption(2, "severe")))


class TestIcopeCatalog:
    """Tests for the shipped ICOPE questionnaire."""

    def test_twelve_domains(self, catalog):
        """Test the catalog lists the twelve ICOPE domains in order."""
        assert catalog.domain_ids == [
            "cognition", "mood", "mobility", "vision", "hearing", "vitality",
            "sleep", "continence", "adl", "iadl", "social", "healthcare",
        ]

    def test_questions_and_points(self, catalog):
        """Test every domain has 1-2 questions valued 0-2."""
        for domain in catalog.domains:
            assert 1 <= len(domain.questions) <= 2
            for question in domain.questions:
                assert question.option_values() == [0, 1, 2]
            assert domain.max_score == 2 * len(domain.questions)

    def test_six_wizard_groups(self, catalog):
        """Test six groups of 1-3 domains cover every domain once."""
        assert catalog.group_step_count == 6
        grouped = [d for g in catalog.groups for d in g.domain_ids]
        assert sorted(grouped) == sorted(catalog.domain_ids)
        assert all(1 <= len(g.domain_ids) <= 3 for g in catalog.groups)

    def test_step_numbering(self, catalog):
        """Test group steps are followed by review and summary."""
        assert catalog.review_step == 7
        assert catalog.summary_step == 8
        assert [d.id for d in catalog.domains_for_step(4)] == ["vitality", "sleep"]
        assert catalog.step_label(7) == "Review"
        assert catalog.step_label(8) == "Summary"
        with pytest.raises(NotFoundError):
            catalog.group_for_step(7)

    def test_default_catalog_is_cached(self):
        """Test the process-wide catalog is built once."""
        assert default_catalog() is default_catalog()

    def test_custom_bands(self):
        """Test building the catalog with explicit bands."""
        bands = RiskBands(healthy_max_ratio=0.2, at_risk_max_ratio=0.6)
        catalog = build_icope_catalog(bands)
        assert catalog.bands_for(catalog.get_domain("vision")) == bands


class TestLookups:
    """Tests for catalog lookups."""

    def test_unknown_domain(self, catalog):
        """Test unknown domains raise NotFoundError."""
        with pytest.raises(NotFoundError) as exc:
            catalog.get_domain("dentition")
        assert exc.value.identifier == "dentition"

    def test_question_outside_domain(self, catalog):
        """Test a question id from another domain is rejected."""
        with pytest.raises(ValidationError) as exc:
            catalog.get_question("vision", "hear_1")
        assert exc.value.domain_id == "vision"
        assert exc.value.question_id == "hear_1"

    def test_position_orders_unknown_last(self, catalog):
        """Test unknown ids sort after every catalog domain."""
        assert catalog.position("cognition") == 0
        assert catalog.position("unknown") == len(catalog.domains)


class TestCatalogValidation:
    """Tests for catalog construction checks."""

    def test_build_defaults_one_group_per_domain(self):
        """Test build() without groups gives each domain its own step."""
        catalog = DomainCatalog.build([Domain("a", "A", (_question("a1"),)), Domain("b", "B", (_question("b1"),))])
        assert catalog.group_step_count == 2
        assert catalog.review_step == 3

    def test_duplicate_domain(self):
        """Test duplicate domain ids are rejected."""
        with pytest.raises(ValueError):
            DomainCatalog.build([Domain("a", "A", (_question("a1"),)), Domain("a", "A2", (_question("a2"),))])

    def test_duplicate_question(self):
        """Test duplicate question ids within a domain are rejected."""
        with pytest.raises(ValueError):
            DomainCatalog.build([Domain("a", "A", (_question("q"), _question("q")))])

    def test_ungrouped_domain(self):
        """Test every domain must belong to a wizard group."""
        domains = [Domain("a", "A", (_question("a1"),)), Domain("b", "B", (_question("b1"),))]
        with pytest.raises(ValueError):
            DomainCatalog.build(domains, groups=[DomainGroup("g", "G", ("a",))])

    def test_invalid_bands(self):
        """Test inverted band ratios are rejected."""
        with pytest.raises(ValueError):
            RiskBands(healthy_max_ratio=0.6, at_risk_max_ratio=0.5)
