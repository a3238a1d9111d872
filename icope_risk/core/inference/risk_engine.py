"""
Risk Engine Module

Turns one domain's answers into a score and risk level, and combines
domain results into an overall classification (worst domain wins).
All functions here are pure.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from icope_risk.core.catalog.base import Domain, DomainCatalog, RiskBands
from icope_risk.errors import InvariantViolation, ValidationError
from icope_risk.utils import get_logger

logger = get_logger(__name__)


class RiskLevel(str, Enum):
    """Ordered risk categories: healthy < at_risk < intervention."""
    HEALTHY = "healthy"
    AT_RISK = "at_risk"
    INTERVENTION = "intervention"

    @property
    def severity(self) -> int:
        return _SEVERITY[self.value]

    @property
    def label(self) -> str:
        return _LABELS[self.value]

    # str comparison would be alphabetical; order by severity instead
    def __lt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.severity >= other.severity

    @classmethod
    def worst(cls, levels: Iterable["RiskLevel"]) -> "RiskLevel":
        """Most severe level present; healthy when there is none."""
        return max(levels, key=lambda level: level.severity, default=cls.HEALTHY)


_SEVERITY = {"healthy": 0, "at_risk": 1, "intervention": 2}
_LABELS = {"healthy": "Healthy", "at_risk": "At Risk", "intervention": "Needs Intervention"}


def risk_level_for(
    score: float,
    max_score: float,
    bands: Optional[RiskBands] = None,
    higher_is_worse: bool = True,
) -> RiskLevel:
    """
    Classify a (score, max) pair against percentage bands.

    healthy: score <= healthy ratio of max
    at_risk: healthy ratio < score <= at_risk ratio of max
    intervention: score > at_risk ratio of max

    A zero maximum is always healthy.
    """
    bands = bands or RiskBands()
    if max_score <= 0:
        return RiskLevel.HEALTHY

    effective = score if higher_is_worse else max_score - score
    if effective <= bands.healthy_max_ratio * max_score:
        return RiskLevel.HEALTHY
    if effective <= bands.at_risk_max_ratio * max_score:
        return RiskLevel.AT_RISK
    return RiskLevel.INTERVENTION


@dataclass(frozen=True)
class DomainResult:
    """Derived score and risk level for one domain."""
    domain_id: str
    domain_name: str
    score: int
    max_score: int
    risk_level: RiskLevel
    answers: Dict[str, int] = field(default_factory=dict)
    notes: Optional[str] = None
    is_complete: bool = True
    flag_triggered: bool = False
    trigger_action: Optional[str] = None

    @property
    def ratio(self) -> float:
        return self.score / self.max_score if self.max_score else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "domain": self.domain_id,
            "domain_name": self.domain_name,
            "score": self.score,
            "max_score": self.max_score,
            "risk_level": self.risk_level.value,
            "answers": dict(self.answers),
            "notes": self.notes,
            "is_complete": self.is_complete,
            "flag_triggered": self.flag_triggered,
            "trigger_action": self.trigger_action,
        }


@dataclass(frozen=True)
class OverallRisk:
    """Aggregate of a set of domain results."""
    level: RiskLevel
    cumulative_score: int
    max_cumulative_score: int
    domain_count: int
    level_counts: Dict[str, int] = field(default_factory=dict)
    flagged_domains: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "cumulative_score": self.cumulative_score,
            "max_cumulative_score": self.max_cumulative_score,
            "domain_count": self.domain_count,
            "level_counts": dict(self.level_counts),
            "flagged_domains": list(self.flagged_domains),
        }


def validate_answers(domain: Domain, answers: Mapping[str, Optional[int]]) -> Dict[str, int]:
    """
    Check answer keys and values against the domain definition.

    Returns the answered subset (None values dropped). Unknown question ids
    and values that are not offered options are rejected.
    """
    clean: Dict[str, int] = {}
    for question_id, value in answers.items():
        question = domain.get_question(question_id)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or not question.allows(value):
            raise ValidationError(
                f"Value {value!r} is not an option for question '{question_id}' "
                f"(allowed: {question.option_values()})",
                domain_id=domain.id,
                question_id=question_id,
            )
        clean[question_id] = value
    return clean


def score_domain(
    domain: Domain,
    answers: Mapping[str, Optional[int]],
    notes: Optional[str] = None,
    bands: Optional[RiskBands] = None,
) -> DomainResult:
    """
    Score one domain.

    Unanswered questions contribute 0 and mark the result incomplete.

    Args:
        domain: Domain definition from the catalog
        answers: question id -> selected option value
        notes: Free-text notes carried onto the result
        bands: Risk bands for the domain's family

    Returns:
        DomainResult
    """
    answered = validate_answers(domain, answers)
    score = sum(answered.values())
    max_score = domain.max_score

    if score < 0 or score > max_score:
        raise InvariantViolation(
            "score",
            f"Domain '{domain.id}' score {score} outside [0, {max_score}]",
        )

    is_complete = not domain.unanswered(answered)
    risk_level = risk_level_for(score, max_score, bands, domain.higher_is_worse)

    flag_triggered = bool(domain.flag_trigger and answered and domain.flag_trigger(answered))

    logger.debug(f"Scored {domain.id}: {score}/{max_score} -> {risk_level.value} (complete={is_complete})")

    return DomainResult(
        domain_id=domain.id,
        domain_name=domain.name,
        score=score,
        max_score=max_score,
        risk_level=risk_level,
        answers=answered,
        notes=notes,
        is_complete=is_complete,
        flag_triggered=flag_triggered,
        trigger_action=domain.trigger_action if flag_triggered else None,
    )


def aggregate_overall_risk(results: Iterable[DomainResult]) -> OverallRisk:
    """
    Combine domain results: worst domain wins, scores are summed.

    Works on partial data; domains missing from `results` are simply not
    considered.
    """
    results = list(results)
    counts = {level.value: 0 for level in RiskLevel}
    for result in results:
        counts[result.risk_level.value] += 1

    return OverallRisk(
        level=RiskLevel.worst(r.risk_level for r in results),
        cumulative_score=sum(r.score for r in results),
        max_cumulative_score=sum(r.max_score for r in results),
        domain_count=len(results),
        level_counts=counts,
        flagged_domains=[r.domain_id for r in results if r.flag_triggered],
    )


class DomainScorer:
    """
    Catalog-bound scorer.

    Resolves domains and their risk bands from an injected catalog.
    """

    def __init__(self, catalog: DomainCatalog):
        self.catalog = catalog
        logger.info(f"DomainScorer initialized for catalog '{catalog.name}'")

    def score(
        self,
        domain_id: str,
        answers: Mapping[str, Optional[int]],
        notes: Optional[str] = None,
    ) -> DomainResult:
        domain = self.catalog.get_domain(domain_id)
        return score_domain(domain, answers, notes, self.catalog.bands_for(domain))

    def score_complete(
        self,
        answer_sets: Mapping[str, Mapping[str, Optional[int]]],
        notes: Optional[Mapping[str, Optional[str]]] = None,
    ) -> List[DomainResult]:
        """Score every fully answered domain, in catalog order."""
        notes = notes or {}
        results = []
        for domain in self.catalog.domains:
            answers = answer_sets.get(domain.id) or {}
            result = self.score(domain.id, answers, notes.get(domain.id))
            if result.is_complete:
                results.append(result)
        return results


class OverallRiskAggregator:
    """Aggregates domain results, checking that every domain is known."""

    def __init__(self, catalog: DomainCatalog):
        self.catalog = catalog

    def aggregate(self, results: Iterable[DomainResult]) -> OverallRisk:
        results = list(results)
        for result in results:
            self.catalog.get_domain(result.domain_id)
        overall = aggregate_overall_risk(results)
        logger.debug(
            f"Aggregated {overall.domain_count} domains: {overall.level.value} "
            f"(score {overall.cumulative_score}/{overall.max_cumulative_score})"
        )
        return overall
