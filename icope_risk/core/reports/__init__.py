"""
Report Generation Module

Population-level statistics and plain-text summaries over assessment batches.
"""
from .aggregate import (
    AggregateReport,
    ReportSummary,
    DomainBreakdown,
    TrendPoint,
    generate_report,
    generate_summary_text,
    month_key,
)

__all__ = [
    "AggregateReport",
    "ReportSummary",
    "DomainBreakdown",
    "TrendPoint",
    "generate_report",
    "generate_summary_text",
    "month_key",
]
