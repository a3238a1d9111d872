from .assessment import AssessmentSnapshot, DomainAnswersSnapshot, DomainResultSnapshot

__all__ = ["AssessmentSnapshot", "DomainAnswersSnapshot", "DomainResultSnapshot"]
