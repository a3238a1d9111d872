"""
Assessment Service - Entry Points for the Portal
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from icope_risk.config import Settings, settings as default_settings
from icope_risk.core.catalog import DomainCatalog, RiskBands, build_icope_catalog
from icope_risk.core.comparison import AssessmentComparison, build_timeline, compare_assessments
from icope_risk.core.inference import (
    DomainResult,
    OverallRisk,
    Recommendation,
    generate_recommendations,
)
from icope_risk.core.lifecycle import Assessment, AssessmentLifecycle
from icope_risk.core.reports import AggregateReport, generate_report, generate_summary_text
from icope_risk.errors import ValidationError
from icope_risk.models.assessment import AssessmentSnapshot

logger = logging.getLogger(__name__)


class AssessmentService:
    """
    Wires one catalog and one settings object into every engine operation.
    Holds no per-assessment state, so a single instance can serve
    concurrent callers.
    """

    def __init__(self, catalog: Optional[DomainCatalog] = None, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.catalog = catalog or build_icope_catalog(RiskBands(
            healthy_max_ratio=self.settings.healthy_max_ratio,
            at_risk_max_ratio=self.settings.at_risk_max_ratio,
        ))
        self.lifecycle = AssessmentLifecycle(self.catalog)
        logger.info(f"AssessmentService ready ({self.settings.app_name} {self.settings.app_version})")

    # Lifecycle

    def start(self, subject_id: str, assessor_id: Optional[str] = None, **kwargs) -> Assessment:
        return self.lifecycle.start(subject_id, assessor_id, **kwargs)

    def answer(self, assessment: Assessment, domain_id: str, question_id: str, value: int) -> Assessment:
        return self.lifecycle.answer(assessment, domain_id, question_id, value)

    def advance(self, assessment: Assessment) -> Assessment:
        return self.lifecycle.advance(assessment)

    def retreat(self, assessment: Assessment) -> Assessment:
        return self.lifecycle.retreat(assessment)

    def save(self, assessment: Assessment) -> Dict[str, Any]:
        """Draft snapshot in its persisted JSON shape."""
        return self.lifecycle.save(assessment).model_dump(mode="json")

    def complete(self, assessment: Assessment) -> Assessment:
        return self.lifecycle.complete(assessment)

    def reopen(self, assessment: Assessment) -> Assessment:
        return self.lifecycle.reopen(assessment)

    def resume(self, snapshot: Union[AssessmentSnapshot, Mapping[str, Any]]) -> Assessment:
        return self.lifecycle.resume(snapshot)

    def preview(self, assessment: Assessment) -> OverallRisk:
        return self.lifecycle.preview(assessment)

    # Scoring

    def score_domain(
        self,
        domain_id: str,
        answers: Mapping[str, Optional[int]],
        notes: Optional[str] = None,
    ) -> DomainResult:
        return self.lifecycle.scorer.score(domain_id, answers, notes)

    def evaluate(self, domain_answers: Mapping[str, Mapping[str, Any]]) -> Dict[str, Any]:
        """
        One-shot evaluation of answers keyed by domain id.

        Each value is either a plain answer mapping or
        {"answers": {...}, "notes": "..."}. Domains not fully answered are
        left out of the result.
        """
        answer_sets = {}
        notes = {}
        for domain_id, payload in domain_answers.items():
            if "answers" in payload:
                answer_sets[domain_id] = payload.get("answers") or {}
                notes[domain_id] = payload.get("notes")
            else:
                answer_sets[domain_id] = payload
        for domain_id in answer_sets:
            self.catalog.get_domain(domain_id)

        results = self.lifecycle.scorer.score_complete(answer_sets, notes)
        overall = self.lifecycle.aggregator.aggregate(results)
        recommendations = generate_recommendations(overall.level, results)

        logger.info(
            f"Evaluated {overall.domain_count}/{len(self.catalog.domains)} domains: {overall.level.value}"
        )
        return {
            "overall_risk": overall.level.value,
            "cumulative_score": overall.cumulative_score,
            "max_cumulative_score": overall.max_cumulative_score,
            "domain_results": [r.to_dict() for r in results],
            "flagged_domains": overall.flagged_domains,
            "recommendations": [r.to_dict() for r in recommendations],
            "is_complete": overall.domain_count == len(self.catalog.domains),
        }

    def recommendations(self, assessment: Assessment) -> List[Recommendation]:
        if assessment.overall_risk is None:
            raise ValidationError(
                f"Assessment {assessment.id} has no aggregated overall risk yet",
                step=assessment.current_step,
            )
        return generate_recommendations(assessment.overall_risk, assessment.domain_results)

    # Longitudinal and population views

    def compare(self, previous: Assessment, current: Assessment) -> AssessmentComparison:
        return compare_assessments(previous, current, self.catalog)

    def timeline(self, assessments: Iterable[Assessment]) -> List[AssessmentComparison]:
        return build_timeline(assessments, self.catalog)

    def report(self, assessments: Iterable[Assessment], generated_at: Optional[datetime] = None) -> AggregateReport:
        return generate_report(
            assessments,
            catalog=self.catalog,
            trend_window_months=self.settings.trend_window_months,
            score_decimals=self.settings.report_score_decimals,
            generated_at=generated_at,
        )

    def summary_text(self, report: AggregateReport) -> str:
        return generate_summary_text(report, top=self.settings.top_concern_limit)
