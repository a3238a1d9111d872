"""Builders for assessments used across test modules."""
from datetime import datetime, timezone
from typing import Dict, Optional

from icope_risk.core.lifecycle import Assessment, AssessmentLifecycle

FIXED_NOW = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


def fill_answers(
    lifecycle: AssessmentLifecycle,
    assessment: Assessment,
    overrides: Optional[Dict[str, int]] = None,
    default: int = 0,
) -> Assessment:
    """Answer every catalog question with `default` unless overridden by question id."""
    overrides = overrides or {}
    for domain in lifecycle.catalog.domains:
        for question in domain.questions:
            value = overrides.get(question.id, default)
            assessment = lifecycle.answer(assessment, domain.id, question.id, value)
    return assessment


def completed_assessment(
    lifecycle: AssessmentLifecycle,
    subject_id: str = "ELDER-1",
    assessed_at: datetime = FIXED_NOW,
    overrides: Optional[Dict[str, int]] = None,
    default: int = 0,
) -> Assessment:
    assessment = lifecycle.start(subject_id, "ASSESSOR-1", assessed_at=assessed_at)
    assessment = fill_answers(lifecycle, assessment, overrides, default)
    return lifecycle.complete(assessment)
