"""
Inference Module

Computes domain scores, risk levels and overall classifications from
questionnaire answers.
"""
from .risk_engine import (
    RiskLevel,
    DomainResult,
    OverallRisk,
    DomainScorer,
    OverallRiskAggregator,
    risk_level_for,
    score_domain,
    aggregate_overall_risk,
    validate_answers,
)
from .recommendations import Recommendation, Priority, Category, generate_recommendations
from .phq2 import Phq2Result, score_phq2

__all__ = [
    "RiskLevel",
    "DomainResult",
    "OverallRisk",
    "DomainScorer",
    "OverallRiskAggregator",
    "risk_level_for",
    "score_domain",
    "aggregate_overall_risk",
    "validate_answers",
    "Recommendation",
    "Priority",
    "Category",
    "generate_recommendations",
    "Phq2Result",
    "score_phq2",
]
