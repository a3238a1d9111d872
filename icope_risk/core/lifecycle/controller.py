"""
Assessment Lifecycle Controller

Finite state machine behind the assessment wizard:

    start() -> draft -> completed
                 ^          |
                 +- reopen -+

Steps 1..N are domain groups, N+1 is review, N+2 is summary. Every
transition is a pure function returning a new Assessment; the input is
never modified, and a rejected transition leaves it untouched.
"""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from icope_risk.core.catalog import DomainCatalog, default_catalog
from icope_risk.core.inference.risk_engine import (
    DomainScorer,
    OverallRisk,
    OverallRiskAggregator,
    validate_answers,
)
from icope_risk.core.lifecycle.state import Assessment, AssessmentStatus, DomainAnswerSet
from icope_risk.errors import ValidationError
from icope_risk.models.assessment import AssessmentSnapshot, DomainAnswersSnapshot, DomainResultSnapshot
from icope_risk.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StepValidation:
    """Completeness of one wizard step."""
    step: int
    missing: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.missing

    @property
    def incomplete_domains(self) -> List[str]:
        return list(self.missing)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_assessment_id() -> str:
    return f"ASM-{uuid.uuid4().hex[:8].upper()}"


class AssessmentLifecycle:
    """
    Drives an assessment through the wizard.

    Args:
        catalog: Questionnaire definition (defaults to the ICOPE catalog)
        clock: Source of assessed_at timestamps
        id_factory: Source of new assessment ids
    """

    def __init__(
        self,
        catalog: Optional[DomainCatalog] = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_assessment_id,
    ):
        self.catalog = catalog or default_catalog()
        self.scorer = DomainScorer(self.catalog)
        self.aggregator = OverallRiskAggregator(self.catalog)
        self._clock = clock
        self._id_factory = id_factory
        logger.info(
            f"AssessmentLifecycle initialized: {self.catalog.group_step_count} group steps, "
            f"{len(self.catalog.domains)} domains"
        )

    # Transitions

    def start(
        self,
        subject_id: str,
        assessor_id: Optional[str] = None,
        assessment_id: Optional[str] = None,
        assessed_at: Optional[datetime] = None,
    ) -> Assessment:
        """Create a draft at step 1 with an empty answer set for every domain."""
        if not subject_id:
            raise ValidationError("An assessment needs a subject")

        assessment = Assessment(
            id=assessment_id or self._id_factory(),
            subject_id=subject_id,
            assessor_id=assessor_id,
            assessed_at=assessed_at or self._clock(),
            status=AssessmentStatus.DRAFT,
            current_step=1,
            answer_sets={d.id: DomainAnswerSet(d.id) for d in self.catalog.domains},
        )
        logger.info(f"Started assessment {assessment.id} for subject {subject_id}")
        return assessment

    def answer(self, assessment: Assessment, domain_id: str, question_id: str, value: int) -> Assessment:
        """Record one answer; allowed at any step while in draft."""
        self._require_draft(assessment, "answer")
        domain = self.catalog.get_domain(domain_id)
        if value is None:
            raise ValidationError(
                f"No value given for question '{question_id}'", domain_id=domain_id, question_id=question_id
            )
        validate_answers(domain, {question_id: value})

        answer_sets = dict(assessment.answer_sets)
        current = answer_sets.get(domain_id) or DomainAnswerSet(domain_id)
        answer_sets[domain_id] = current.with_answer(question_id, value)
        return self._rebuild(assessment, answer_sets)

    def answer_many(self, assessment: Assessment, domain_id: str, answers: Mapping[str, int]) -> Assessment:
        for question_id, value in answers.items():
            assessment = self.answer(assessment, domain_id, question_id, value)
        return assessment

    def set_domain_notes(self, assessment: Assessment, domain_id: str, notes: Optional[str]) -> Assessment:
        self._require_draft(assessment, "edit notes of")
        self.catalog.get_domain(domain_id)
        answer_sets = dict(assessment.answer_sets)
        current = answer_sets.get(domain_id) or DomainAnswerSet(domain_id)
        answer_sets[domain_id] = current.with_notes(notes)
        return self._rebuild(assessment, answer_sets)

    def set_notes(self, assessment: Assessment, notes: Optional[str]) -> Assessment:
        self._require_draft(assessment, "edit notes of")
        return replace(assessment, notes=notes)

    def advance(self, assessment: Assessment) -> Assessment:
        """
        Move to the next step.

        Group steps must be fully answered. Leaving the last group step
        aggregates the overall risk so review and summary show fresh figures.
        """
        self._require_draft(assessment, "advance")
        step = assessment.current_step
        if step >= self.catalog.summary_step:
            raise ValidationError("Already at the final step", step=step)

        validation = self.validate_step(assessment, step)
        if not validation.is_valid:
            logger.warning(
                f"Assessment {assessment.id}: step {step} incomplete, "
                f"missing answers in {validation.incomplete_domains}"
            )
            raise ValidationError(
                f"Step {step} is incomplete: {', '.join(validation.incomplete_domains)}",
                step=step,
                missing=validation.missing,
            )

        force = step >= self.catalog.group_step_count
        advanced = self._rebuild(assessment, assessment.answer_sets, force_overall=force, current_step=step + 1)
        logger.info(f"Assessment {assessment.id}: step {step} -> {step + 1}")
        return advanced

    def retreat(self, assessment: Assessment) -> Assessment:
        """Go back one step without validation; never below step 1."""
        self._require_draft(assessment, "retreat")
        return replace(assessment, current_step=max(1, assessment.current_step - 1))

    def go_to_step(self, assessment: Assessment, step: int) -> Assessment:
        """Jump back to an earlier step (e.g. editing from the review page)."""
        self._require_draft(assessment, "navigate")
        if not 1 <= step <= assessment.current_step:
            raise ValidationError(f"Cannot jump forward to step {step}; use advance()", step=step)
        return replace(assessment, current_step=step)

    def save(self, assessment: Assessment) -> AssessmentSnapshot:
        """Snapshot a draft for the persistence collaborator, complete or not."""
        self._require_draft(assessment, "save")
        logger.info(f"Saving draft {assessment.id} at step {assessment.current_step}")
        return self.to_snapshot(assessment)

    def complete(self, assessment: Assessment) -> Assessment:
        """Recompute every domain and the overall risk, then mark completed."""
        self._require_draft(assessment, "complete")
        missing = self.missing_answers(assessment)
        if missing:
            logger.warning(f"Assessment {assessment.id}: cannot complete, missing {list(missing)}")
            raise ValidationError(
                f"Cannot complete: unanswered questions in {', '.join(missing)}",
                step=assessment.current_step,
                missing=missing,
            )

        completed = self._rebuild(
            assessment,
            assessment.answer_sets,
            force_overall=True,
            status=AssessmentStatus.COMPLETED,
            current_step=self.catalog.summary_step,
        )
        logger.info(
            f"Completed assessment {completed.id}: {completed.overall_risk.value} "
            f"(score {completed.cumulative_score})"
        )
        return completed

    def reopen(self, assessment: Assessment) -> Assessment:
        """Return a completed assessment to draft for editing."""
        if assessment.status != AssessmentStatus.COMPLETED:
            raise ValidationError(f"Only completed assessments can be reopened (status: {assessment.status.value})")
        logger.info(f"Reopened assessment {assessment.id}")
        return replace(assessment, status=AssessmentStatus.DRAFT, current_step=1)

    def resume(self, snapshot: Union[AssessmentSnapshot, Mapping[str, Any]]) -> Assessment:
        """
        Rebuild an assessment from a persisted snapshot.

        Answers are taken exactly as saved; catalog domains missing from the
        snapshot get empty answer sets. Derived figures are recomputed.
        """
        if not isinstance(snapshot, AssessmentSnapshot):
            snapshot = AssessmentSnapshot.model_validate(snapshot)

        if snapshot.current_step > self.catalog.summary_step:
            raise ValidationError(
                f"Saved step {snapshot.current_step} is beyond the last step {self.catalog.summary_step}",
                step=snapshot.current_step,
            )

        answer_sets: Dict[str, DomainAnswerSet] = {d.id: DomainAnswerSet(d.id) for d in self.catalog.domains}
        for domain_id, saved in snapshot.domains.items():
            domain = self.catalog.get_domain(domain_id)
            answers = validate_answers(domain, saved.answers)
            answer_sets[domain_id] = DomainAnswerSet(domain_id, answers, saved.notes)

        draft = Assessment(
            id=snapshot.id,
            subject_id=snapshot.subject_id,
            assessor_id=snapshot.assessor_id,
            assessed_at=snapshot.assessed_at,
            status=AssessmentStatus.DRAFT,
            current_step=snapshot.current_step,
            answer_sets=answer_sets,
            notes=snapshot.notes,
        )

        if snapshot.status == AssessmentStatus.COMPLETED.value:
            return self.complete(draft)

        force = snapshot.current_step > self.catalog.group_step_count
        resumed = self._rebuild(draft, answer_sets, force_overall=force)
        logger.info(f"Resumed draft {resumed.id} at step {resumed.current_step}")
        return resumed

    # Queries

    def validate_step(self, assessment: Assessment, step: Optional[int] = None) -> StepValidation:
        """
        Group steps need all their questions answered; the review step
        needs the whole catalog answered; the summary step has nothing to check.
        """
        step = assessment.current_step if step is None else step
        if self.catalog.is_group_step(step):
            domains = self.catalog.domains_for_step(step)
        elif step == self.catalog.review_step:
            domains = list(self.catalog.domains)
        else:
            domains = []

        missing = {}
        for domain in domains:
            unanswered = domain.unanswered(assessment.answers_for(domain.id))
            if unanswered:
                missing[domain.id] = unanswered
        return StepValidation(step=step, missing=missing)

    def missing_answers(self, assessment: Assessment) -> Dict[str, List[str]]:
        """Unanswered question ids per domain, for the whole catalog."""
        return self.validate_step(assessment, self.catalog.review_step).missing

    def preview(self, assessment: Assessment) -> OverallRisk:
        """Overall risk over the domains answered so far (not authoritative)."""
        return self.aggregator.aggregate(assessment.domain_results)

    def progress(self, assessment: Assessment) -> Dict[str, Any]:
        answered = sum(1 for d in self.catalog.domains if not d.unanswered(assessment.answers_for(d.id)))
        step = assessment.current_step
        return {
            "current_step": step,
            "total_steps": self.catalog.summary_step,
            "step_label": self.catalog.step_label(step),
            "domains_answered": answered,
            "domains_total": len(self.catalog.domains),
            "percent": round(100.0 * (step - 1) / max(1, self.catalog.summary_step - 1), 1),
        }

    def to_snapshot(self, assessment: Assessment) -> AssessmentSnapshot:
        return AssessmentSnapshot(
            id=assessment.id,
            subject_id=assessment.subject_id,
            assessor_id=assessment.assessor_id,
            assessed_at=assessment.assessed_at,
            status=assessment.status.value,
            current_step=assessment.current_step,
            notes=assessment.notes,
            domains={
                domain_id: DomainAnswersSnapshot(answers=dict(s.answers), notes=s.notes)
                for domain_id, s in assessment.answer_sets.items()
            },
            domain_results=[
                DomainResultSnapshot(
                    domain=r.domain_id,
                    domain_name=r.domain_name,
                    score=r.score,
                    max_score=r.max_score,
                    risk_level=r.risk_level.value,
                    flag_triggered=r.flag_triggered,
                    trigger_action=r.trigger_action,
                    notes=r.notes,
                )
                for r in assessment.domain_results
            ],
            overall_risk=assessment.overall_risk.value if assessment.overall_risk else None,
            cumulative_score=assessment.cumulative_score,
            max_cumulative_score=assessment.max_cumulative_score if assessment.overall_risk else None,
        )

    # Internals

    def _require_draft(self, assessment: Assessment, action: str) -> None:
        if assessment.status != AssessmentStatus.DRAFT:
            raise ValidationError(
                f"Cannot {action} assessment {assessment.id} in status '{assessment.status.value}'; reopen it first"
            )

    def _rebuild(
        self,
        assessment: Assessment,
        answer_sets: Mapping[str, DomainAnswerSet],
        force_overall: bool = False,
        **changes,
    ) -> Assessment:
        """
        Recompute domain results from answer_sets. The overall figures are
        refreshed when forced or when they were already aggregated.
        """
        results = self.scorer.score_complete(
            {d: s.answers for d, s in answer_sets.items()},
            {d: s.notes for d, s in answer_sets.items()},
        )
        overall_risk = None
        cumulative_score = None
        if force_overall or assessment.overall_risk is not None:
            overall = self.aggregator.aggregate(results)
            overall_risk = overall.level
            cumulative_score = overall.cumulative_score

        return replace(
            assessment,
            answer_sets=answer_sets,
            domain_results=tuple(results),
            overall_risk=overall_risk,
            cumulative_score=cumulative_score,
            **changes,
        )
