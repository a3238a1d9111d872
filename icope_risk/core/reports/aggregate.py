"""
Aggregate Reporting Module

Population statistics over a batch of assessments: risk distribution,
per-domain breakdown and a monthly trend series. The batch is taken as
given; filtering by date, region or risk happens upstream.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from icope_risk.core.catalog import DomainCatalog, default_catalog
from icope_risk.core.inference.risk_engine import RiskLevel
from icope_risk.core.lifecycle.state import Assessment, AssessmentStatus
from icope_risk.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReportSummary:
    total_assessments: int
    unique_subjects: int
    risk_counts: Dict[str, int]
    average_cumulative_score: float

    @property
    def healthy_count(self) -> int:
        return self.risk_counts.get(RiskLevel.HEALTHY.value, 0)

    @property
    def at_risk_count(self) -> int:
        return self.risk_counts.get(RiskLevel.AT_RISK.value, 0)

    @property
    def intervention_count(self) -> int:
        return self.risk_counts.get(RiskLevel.INTERVENTION.value, 0)

    @property
    def completed_count(self) -> int:
        return sum(self.risk_counts.values())

    def percentage(self, level: RiskLevel) -> int:
        """Share of completed assessments at `level`."""
        if not self.completed_count:
            return 0
        return int(round(100 * self.risk_counts.get(level.value, 0) / self.completed_count))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_assessments": self.total_assessments,
            "unique_subjects": self.unique_subjects,
            "completed_count": self.completed_count,
            "healthy_count": self.healthy_count,
            "at_risk_count": self.at_risk_count,
            "intervention_count": self.intervention_count,
            "average_cumulative_score": self.average_cumulative_score,
        }


@dataclass(frozen=True)
class DomainBreakdown:
    domain_id: str
    domain_name: str
    assessed_count: int
    avg_score: float
    at_risk_count: int
    intervention_count: int

    @property
    def flagged_count(self) -> int:
        return self.at_risk_count + self.intervention_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain_id,
            "domain_name": self.domain_name,
            "assessed_count": self.assessed_count,
            "avg_score": self.avg_score,
            "at_risk_count": self.at_risk_count,
            "intervention_count": self.intervention_count,
        }


@dataclass(frozen=True)
class TrendPoint:
    month: str  # YYYY-MM
    healthy: int = 0
    at_risk: int = 0
    intervention: int = 0
    total: int = 0

    @property
    def label(self) -> str:
        year, month = self.month.split("-")
        return f"{month}/{year}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "label": self.label,
            "healthy": self.healthy,
            "at_risk": self.at_risk,
            "intervention": self.intervention,
            "total": self.total,
        }


@dataclass(frozen=True)
class AggregateReport:
    summary: ReportSummary
    domain_breakdown: List[DomainBreakdown] = field(default_factory=list)
    trend: List[TrendPoint] = field(default_factory=list)
    generated_at: Optional[datetime] = None

    @property
    def risk_distribution(self) -> Dict[str, int]:
        return dict(self.summary.risk_counts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "risk_distribution": self.risk_distribution,
            "domain_breakdown": [d.to_dict() for d in self.domain_breakdown],
            "trend": [t.to_dict() for t in self.trend],
            "generated_at": self.generated_at.isoformat() if self.generated_at else None,
        }


def month_key(moment: datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


def _mean(values: List[float], decimals: int) -> float:
    if not values:
        return 0.0
    return float(np.round(np.mean(values), decimals))


def generate_report(
    assessments: Iterable[Assessment],
    catalog: Optional[DomainCatalog] = None,
    trend_window_months: Optional[int] = None,
    score_decimals: Optional[int] = None,
    generated_at: Optional[datetime] = None,
) -> AggregateReport:
    """
    Build population statistics for a batch of assessments.

    Per-domain averages only include assessments in which that domain has a
    score; assessments without it are left out of numerator and denominator.
    Only completed assessments count towards risk levels, the
    cumulative-score average and the domain breakdown. Drafts, including
    ones past the last group step or reopened for editing, count towards
    totals only.

    Args:
        assessments: Pre-filtered batch
        catalog: Supplies domain names and ordering
        trend_window_months: Most recent monthly buckets to keep
        score_decimals: Rounding for averages

    Returns:
        AggregateReport
    """
    from icope_risk.config import settings

    catalog = catalog or default_catalog()
    window = trend_window_months if trend_window_months is not None else settings.trend_window_months
    decimals = score_decimals if score_decimals is not None else settings.report_score_decimals
    assessments = list(assessments)

    risk_counts = {level.value: 0 for level in RiskLevel}
    cumulative_scores = []
    domain_scores: Dict[str, List[int]] = defaultdict(list)
    domain_levels: Dict[str, Dict[str, int]] = defaultdict(lambda: {level.value: 0 for level in RiskLevel})
    domain_names: Dict[str, str] = {}
    monthly: Dict[str, Dict[str, int]] = defaultdict(
        lambda: {"healthy": 0, "at_risk": 0, "intervention": 0, "total": 0}
    )

    for assessment in assessments:
        bucket = monthly[month_key(assessment.assessed_at)]
        bucket["total"] += 1
        if assessment.status != AssessmentStatus.COMPLETED:
            continue

        risk_counts[assessment.overall_risk.value] += 1
        bucket[assessment.overall_risk.value] += 1
        cumulative_scores.append(assessment.cumulative_score)

        for result in assessment.domain_results:
            domain_scores[result.domain_id].append(result.score)
            domain_levels[result.domain_id][result.risk_level.value] += 1
            domain_names.setdefault(result.domain_id, result.domain_name)

    breakdown = []
    for domain_id in sorted(domain_scores, key=lambda d: (catalog.position(d), d)):
        if catalog.has_domain(domain_id):
            name = catalog.get_domain(domain_id).name
        else:
            name = domain_names.get(domain_id) or domain_id
        scores = domain_scores[domain_id]
        breakdown.append(DomainBreakdown(
            domain_id=domain_id,
            domain_name=name,
            assessed_count=len(scores),
            avg_score=_mean(scores, decimals),
            at_risk_count=domain_levels[domain_id][RiskLevel.AT_RISK.value],
            intervention_count=domain_levels[domain_id][RiskLevel.INTERVENTION.value],
        ))

    months = sorted(monthly)[-window:] if window > 0 else []
    trend = [TrendPoint(month=m, **monthly[m]) for m in months]

    summary = ReportSummary(
        total_assessments=len(assessments),
        unique_subjects=len({a.subject_id for a in assessments}),
        risk_counts=risk_counts,
        average_cumulative_score=_mean(cumulative_scores, decimals),
    )
    logger.info(
        f"Report generated: {summary.total_assessments} assessments, "
        f"{summary.unique_subjects} subjects, {len(breakdown)} domains, {len(trend)} months"
    )
    return AggregateReport(summary=summary, domain_breakdown=breakdown, trend=trend, generated_at=generated_at)


def generate_summary_text(report: AggregateReport, top: Optional[int] = None, title: str = "HEALTH ASSESSMENT REPORT") -> str:
    """Plain-text rendering of a report for export or email bodies."""
    from icope_risk.config import settings

    top = top if top is not None else settings.top_concern_limit
    summary = report.summary
    concerns = sorted(report.domain_breakdown, key=lambda d: d.flagged_count, reverse=True)[:top]

    lines = [title]
    if report.generated_at is not None:
        lines.append(f"Generated: {report.generated_at.strftime('%Y-%m-%d')}")
    lines += [
        "",
        "SUMMARY",
        "-------",
        f"Total Assessments: {summary.total_assessments}",
        f"Unique Elders: {summary.unique_subjects}",
        f"Average Cumulative Score: {summary.average_cumulative_score}",
        "",
        "RISK DISTRIBUTION",
        "-----------------",
        f"Healthy: {summary.healthy_count} ({summary.percentage(RiskLevel.HEALTHY)}%)",
        f"At Risk: {summary.at_risk_count} ({summary.percentage(RiskLevel.AT_RISK)}%)",
        f"Needs Intervention: {summary.intervention_count} ({summary.percentage(RiskLevel.INTERVENTION)}%)",
        "",
        "TOP CONCERN DOMAINS",
        "-------------------",
    ]
    lines.extend(
        f"- {d.domain_name}: {d.flagged_count} flagged (Avg Score: {d.avg_score})" for d in concerns
    )
    return "\n".join(lines).strip()
