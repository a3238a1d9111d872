"""
Comparison Module

Longitudinal trends across repeated assessments of one elder.
"""
from .trends import (
    Trend,
    DomainComparison,
    AssessmentComparison,
    classify_trend,
    compare_assessments,
    build_timeline,
)

__all__ = [
    "Trend",
    "DomainComparison",
    "AssessmentComparison",
    "classify_trend",
    "compare_assessments",
    "build_timeline",
]
