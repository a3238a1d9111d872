"""
Lifecycle Module

Draft/completed state machine for multi-step assessments.
"""
from .state import Assessment, AssessmentStatus, DomainAnswerSet
from .controller import AssessmentLifecycle, StepValidation

__all__ = [
    "Assessment",
    "AssessmentStatus",
    "DomainAnswerSet",
    "AssessmentLifecycle",
    "StepValidation",
]
