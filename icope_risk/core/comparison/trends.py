"""
Comparison Engine

Aligns two completed assessments domain by domain and classifies how each
domain moved. Lower scores are healthier unless the catalog marks a
domain's scale as inverted.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from icope_risk.core.catalog import DomainCatalog, default_catalog
from icope_risk.core.inference.risk_engine import RiskLevel
from icope_risk.core.lifecycle.state import Assessment, AssessmentStatus
from icope_risk.errors import ValidationError
from icope_risk.utils import get_logger

logger = get_logger(__name__)


class Trend(str, Enum):
    IMPROVED = "improved"
    DECLINED = "declined"
    SAME = "same"
    NEW = "new"          # only in the current assessment
    REMOVED = "removed"  # only in the previous assessment

    def reversed(self) -> "Trend":
        return _REVERSED.get(self, self)


_REVERSED = {
    Trend.IMPROVED: Trend.DECLINED,
    Trend.DECLINED: Trend.IMPROVED,
    Trend.NEW: Trend.REMOVED,
    Trend.REMOVED: Trend.NEW,
}


@dataclass(frozen=True)
class DomainComparison:
    """Movement of one domain between two assessments."""
    domain_id: str
    domain_name: str
    previous_score: Optional[int]
    current_score: Optional[int]
    previous_risk: Optional[RiskLevel]
    current_risk: Optional[RiskLevel]
    change: int
    trend: Trend

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain_id,
            "domain_name": self.domain_name,
            "previous_score": self.previous_score,
            "current_score": self.current_score,
            "previous_risk": self.previous_risk.value if self.previous_risk else None,
            "current_risk": self.current_risk.value if self.current_risk else None,
            "change": self.change,
            "trend": self.trend.value,
        }


@dataclass(frozen=True)
class AssessmentComparison:
    """Full comparison of a previous and a current assessment."""
    previous_id: str
    current_id: str
    previous_assessed_at: datetime
    current_assessed_at: datetime
    previous_overall: RiskLevel
    current_overall: RiskLevel
    overall_trend: Trend
    cumulative_change: int
    domains: List[DomainComparison] = field(default_factory=list)

    def count(self, trend: Trend) -> int:
        return sum(1 for d in self.domains if d.trend == trend)

    def by_domain(self) -> Dict[str, DomainComparison]:
        return {d.domain_id: d for d in self.domains}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previous_id": self.previous_id,
            "current_id": self.current_id,
            "previous_assessed_at": self.previous_assessed_at.isoformat(),
            "current_assessed_at": self.current_assessed_at.isoformat(),
            "previous_overall": self.previous_overall.value,
            "current_overall": self.current_overall.value,
            "overall_trend": self.overall_trend.value,
            "cumulative_change": self.cumulative_change,
            "summary": {t.value: self.count(t) for t in Trend},
            "domains": [d.to_dict() for d in self.domains],
        }


def classify_trend(
    previous_score: Optional[int],
    current_score: Optional[int],
    higher_is_worse: bool = True,
) -> Trend:
    """Trend of one domain; absent scores mean the domain was not assessed."""
    if previous_score is None:
        return Trend.NEW
    if current_score is None:
        return Trend.REMOVED
    change = current_score - previous_score
    if change == 0:
        return Trend.SAME
    if (change < 0) == higher_is_worse:
        return Trend.IMPROVED
    return Trend.DECLINED


def _overall_trend(previous: RiskLevel, current: RiskLevel) -> Trend:
    if current < previous:
        return Trend.IMPROVED
    if current > previous:
        return Trend.DECLINED
    return Trend.SAME


def _check_comparable(previous: Assessment, current: Assessment) -> None:
    for role, assessment in (("previous", previous), ("current", current)):
        if assessment.status != AssessmentStatus.COMPLETED:
            raise ValidationError(
                f"The {role} assessment {assessment.id} is not completed (status: {assessment.status.value})"
            )
    try:
        reversed_order = previous.assessed_at > current.assessed_at
    except TypeError as e:
        raise ValidationError("Cannot order assessments with mixed naive/aware timestamps") from e
    if reversed_order:
        raise ValidationError(
            f"Assessments are in reverse order: {previous.id} ({previous.assessed_at.isoformat()}) "
            f"is later than {current.id} ({current.assessed_at.isoformat()})"
        )
    if previous.subject_id != current.subject_id:
        logger.warning(
            f"Comparing assessments of different subjects: {previous.subject_id} vs {current.subject_id}"
        )


def compare_assessments(
    previous: Assessment,
    current: Assessment,
    catalog: Optional[DomainCatalog] = None,
) -> AssessmentComparison:
    """
    Compare two completed assessments ordered previous -> current by assessed_at.

    Covers the union of domains in either assessment, in catalog order
    (domains unknown to the catalog follow, sorted by id). Numeric change
    treats an absent score as 0.

    Raises:
        ValidationError: if either assessment is not completed or the pair
            is in reverse chronological order
    """
    catalog = catalog or default_catalog()
    _check_comparable(previous, current)

    prev_results = {r.domain_id: r for r in previous.domain_results}
    curr_results = {r.domain_id: r for r in current.domain_results}
    domain_ids = sorted(set(prev_results) | set(curr_results), key=lambda d: (catalog.position(d), d))

    comparisons = []
    for domain_id in domain_ids:
        prev = prev_results.get(domain_id)
        curr = curr_results.get(domain_id)
        prev_score = prev.score if prev else None
        curr_score = curr.score if curr else None

        if catalog.has_domain(domain_id):
            domain = catalog.get_domain(domain_id)
            name, higher_is_worse = domain.name, domain.higher_is_worse
        else:
            name = (curr or prev).domain_name or domain_id
            higher_is_worse = True

        comparisons.append(DomainComparison(
            domain_id=domain_id,
            domain_name=name,
            previous_score=prev_score,
            current_score=curr_score,
            previous_risk=prev.risk_level if prev else None,
            current_risk=curr.risk_level if curr else None,
            change=(curr_score or 0) - (prev_score or 0),
            trend=classify_trend(prev_score, curr_score, higher_is_worse),
        ))

    result = AssessmentComparison(
        previous_id=previous.id,
        current_id=current.id,
        previous_assessed_at=previous.assessed_at,
        current_assessed_at=current.assessed_at,
        previous_overall=previous.overall_risk,
        current_overall=current.overall_risk,
        overall_trend=_overall_trend(previous.overall_risk, current.overall_risk),
        cumulative_change=current.cumulative_score - previous.cumulative_score,
        domains=comparisons,
    )
    logger.debug(
        f"Compared {previous.id} -> {current.id}: "
        f"{result.count(Trend.IMPROVED)} improved, {result.count(Trend.DECLINED)} declined"
    )
    return result


def build_timeline(
    assessments: Iterable[Assessment],
    catalog: Optional[DomainCatalog] = None,
) -> List[AssessmentComparison]:
    """
    Compare each consecutive pair of one subject's completed assessments.

    Drafts are skipped. Input order does not matter.
    """
    completed = [a for a in assessments if a.status == AssessmentStatus.COMPLETED]
    subjects = {a.subject_id for a in completed}
    if len(subjects) > 1:
        raise ValidationError(f"A timeline covers one subject, got {sorted(subjects)}")

    completed.sort(key=lambda a: a.assessed_at)
    return [
        compare_assessments(previous, current, catalog)
        for previous, current in zip(completed, completed[1:])
    ]
