"""
Assessment Snapshot Models

Serializable shapes exchanged with the persistence collaborator on
save, complete and resume.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

RiskLevelValue = Literal["healthy", "at_risk", "intervention"]


class DomainAnswersSnapshot(BaseModel):
    """Saved answers and notes for one domain."""
    answers: Dict[str, Optional[int]] = Field(default_factory=dict)
    notes: Optional[str] = None


class DomainResultSnapshot(BaseModel):
    """Derived figures for one domain (read-side only; recomputed on resume)."""
    domain: str
    domain_name: str
    score: int = Field(..., ge=0)
    max_score: int = Field(..., ge=0)
    risk_level: RiskLevelValue
    flag_triggered: bool = False
    trigger_action: Optional[str] = None
    notes: Optional[str] = None


class AssessmentSnapshot(BaseModel):
    """Persisted assessment attempt."""
    id: str
    subject_id: str
    assessor_id: Optional[str] = None
    assessed_at: datetime
    status: Literal["draft", "completed"] = "draft"
    current_step: int = Field(default=1, ge=1)
    notes: Optional[str] = None
    domains: Dict[str, DomainAnswersSnapshot] = Field(default_factory=dict)

    domain_results: List[DomainResultSnapshot] = Field(default_factory=list)
    overall_risk: Optional[RiskLevelValue] = None
    cumulative_score: Optional[int] = None
    max_cumulative_score: Optional[int] = None
