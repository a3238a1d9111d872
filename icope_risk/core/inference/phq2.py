"""PHQ-2 depression screening, offered when the mood domain is flagged."""
from dataclasses import dataclass
from typing import Any, Dict

from icope_risk.errors import ValidationError

PHQ2_POSITIVE_THRESHOLD = 3


@dataclass(frozen=True)
class Phq2Result:
    score: int
    positive: bool
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "positive": self.positive, "recommendation": self.recommendation}


def score_phq2(little_interest: int, feeling_down: int) -> Phq2Result:
    """Score the two PHQ-2 items (each 0-3)."""
    for name, value in (("little_interest", little_interest), ("feeling_down", feeling_down)):
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 3:
            raise ValidationError(f"PHQ-2 item '{name}' must be an integer 0-3, got {value!r}", question_id=name)

    score = little_interest + feeling_down
    positive = score >= PHQ2_POSITIVE_THRESHOLD
    return Phq2Result(
        score=score,
        positive=positive,
        recommendation=(
            "PHQ-2 positive. Consider PHQ-9 or professional mental health evaluation."
            if positive
            else "PHQ-2 negative. Continue monitoring."
        ),
    )
