"""
Assessment State

The Assessment aggregate and its per-domain answer sets. Instances are
sealed after construction; transitions build new instances. Derived figures
(overall risk, cumulative score) are checked against the domain results on
every construction, so they can only come from the aggregator.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from icope_risk.core.inference.risk_engine import DomainResult, RiskLevel, aggregate_overall_risk
from icope_risk.errors import InvariantViolation


class AssessmentStatus(str, Enum):
    """Lifecycle states: draft <-> completed. An assessment exists from start() on."""
    DRAFT = "draft"
    COMPLETED = "completed"


@dataclass(frozen=True)
class DomainAnswerSet:
    """Answers given for one domain within one assessment attempt."""
    domain_id: str
    answers: Mapping[str, int] = field(default_factory=dict)
    notes: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "answers", MappingProxyType(dict(self.answers)))

    def with_answer(self, question_id: str, value: int) -> "DomainAnswerSet":
        answers = dict(self.answers)
        answers[question_id] = value
        return DomainAnswerSet(self.domain_id, answers, self.notes)

    def with_notes(self, notes: Optional[str]) -> "DomainAnswerSet":
        return DomainAnswerSet(self.domain_id, self.answers, notes)

    @property
    def is_empty(self) -> bool:
        return not self.answers

    def to_dict(self) -> Dict[str, Any]:
        return {"answers": dict(self.answers), "notes": self.notes}


@dataclass
class Assessment:
    """
    Aggregate root of one questionnaire attempt.

    overall_risk and cumulative_score are either both None (not yet
    aggregated) or exactly what the aggregator derives from domain_results.
    """
    id: str
    subject_id: str
    assessor_id: Optional[str]
    assessed_at: datetime
    status: AssessmentStatus
    current_step: int
    answer_sets: Mapping[str, DomainAnswerSet]
    domain_results: Tuple[DomainResult, ...] = ()
    overall_risk: Optional[RiskLevel] = None
    cumulative_score: Optional[int] = None
    notes: Optional[str] = None

    def __post_init__(self):
        self.answer_sets = MappingProxyType(dict(self.answer_sets))
        self.domain_results = tuple(self.domain_results)

        if self.current_step < 1:
            raise InvariantViolation("current_step", f"Step must be >= 1, got {self.current_step}")

        if self.overall_risk is None:
            if self.cumulative_score is not None:
                raise InvariantViolation(
                    "cumulative_score", "cumulative_score cannot be set without an aggregated overall risk"
                )
            if self.status == AssessmentStatus.COMPLETED:
                raise InvariantViolation("overall_risk", "A completed assessment must carry its overall risk")
        else:
            derived = aggregate_overall_risk(self.domain_results)
            if RiskLevel(self.overall_risk) != derived.level:
                raise InvariantViolation(
                    "overall_risk",
                    f"overall_risk {RiskLevel(self.overall_risk).value} does not match "
                    f"domain results ({derived.level.value})",
                )
            if self.cumulative_score != derived.cumulative_score:
                raise InvariantViolation(
                    "cumulative_score",
                    f"cumulative_score {self.cumulative_score} does not match "
                    f"domain results ({derived.cumulative_score})",
                )
        object.__setattr__(self, "_sealed", True)

    def __setattr__(self, name, value):
        if getattr(self, "_sealed", False):
            raise InvariantViolation(
                name, f"Assessment.{name} cannot be assigned directly; use the lifecycle transitions"
            )
        object.__setattr__(self, name, value)

    # Accessors

    @property
    def is_draft(self) -> bool:
        return self.status == AssessmentStatus.DRAFT

    @property
    def is_completed(self) -> bool:
        return self.status == AssessmentStatus.COMPLETED

    def answers_for(self, domain_id: str) -> Mapping[str, int]:
        answer_set = self.answer_sets.get(domain_id)
        return answer_set.answers if answer_set else MappingProxyType({})

    def domain_result(self, domain_id: str) -> Optional[DomainResult]:
        for result in self.domain_results:
            if result.domain_id == domain_id:
                return result
        return None

    def domain_scores(self) -> Dict[str, int]:
        return {r.domain_id: r.score for r in self.domain_results}

    @property
    def max_cumulative_score(self) -> int:
        return sum(r.max_score for r in self.domain_results)

    def flagged_domains(self) -> List[str]:
        return [r.domain_id for r in self.domain_results if r.flag_triggered]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "subject_id": self.subject_id,
            "assessor_id": self.assessor_id,
            "assessed_at": self.assessed_at.isoformat(),
            "status": self.status.value,
            "current_step": self.current_step,
            "notes": self.notes,
            "domains": {d: s.to_dict() for d, s in self.answer_sets.items()},
            "domain_results": [r.to_dict() for r in self.domain_results],
            "overall_risk": self.overall_risk.value if self.overall_risk else None,
            "cumulative_score": self.cumulative_score,
            "max_cumulative_score": self.max_cumulative_score,
        }
