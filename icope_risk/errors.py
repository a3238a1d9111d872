"""
Engine Errors

Every failure carries enough structure (domain, question, step) for the
caller to render actionable feedback. Nothing here is retried internally.
"""
from typing import Any, Dict, List, Mapping, Optional


class EngineError(Exception):
    """Base class for intended, meaningful engine failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(EngineError):
    """Incomplete step/assessment, bad answer or illegal transition."""

    def __init__(
        self,
        message: str,
        *,
        step: Optional[int] = None,
        missing: Optional[Mapping[str, List[str]]] = None,
        domain_id: Optional[str] = None,
        question_id: Optional[str] = None,
    ):
        self.step = step
        self.missing = {k: list(v) for k, v in (missing or {}).items()}
        self.domain_id = domain_id
        self.question_id = question_id
        details: Dict[str, Any] = {}
        if step is not None:
            details["step"] = step
        if self.missing:
            details["missing"] = self.missing
        if domain_id is not None:
            details["domain_id"] = domain_id
        if question_id is not None:
            details["question_id"] = question_id
        super().__init__(message, details)

    @property
    def missing_domains(self) -> List[str]:
        return list(self.missing)


class NotFoundError(EngineError):
    """Domain or question id absent from the catalog."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(
            f"Unknown {kind}: {identifier}",
            {"kind": kind, "identifier": identifier},
        )


class InvariantViolation(EngineError):
    """A derived figure was set without going through the aggregator."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message, {"field": field})
