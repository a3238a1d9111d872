"""
ICOPE Health Risk Assessment Engine

Scores elder-health questionnaires, tracks the assessment wizard lifecycle,
compares repeated assessments and builds population reports.
"""
from icope_risk.core.catalog import DomainCatalog, default_catalog
from icope_risk.core.inference import (
    RiskLevel,
    DomainResult,
    OverallRisk,
    score_domain,
    aggregate_overall_risk,
    risk_level_for,
)
from icope_risk.core.lifecycle import AssessmentLifecycle, Assessment, AssessmentStatus
from icope_risk.core.comparison import compare_assessments, build_timeline
from icope_risk.core.reports import generate_report, generate_summary_text

__version__ = "0.1.0"

__all__ = [
    "DomainCatalog",
    "default_catalog",
    "RiskLevel",
    "DomainResult",
    "OverallRisk",
    "score_domain",
    "aggregate_overall_risk",
    "risk_level_for",
    "AssessmentLifecycle",
    "Assessment",
    "AssessmentStatus",
    "compare_assessments",
    "build_timeline",
    "generate_report",
    "generate_summary_text",
]
