"""
Domain Catalog Types

Immutable definitions of health domains, their questions and answer options,
the wizard grouping of domains, and the risk bands used to classify scores.
A catalog is built once and passed explicitly into every engine entry point.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from icope_risk.errors import NotFoundError, ValidationError
from icope_risk.utils import get_logger

logger = get_logger(__name__)

DEFAULT_FAMILY = "standard"

FlagTrigger = Callable[[Mapping[str, int]], bool]


@dataclass(frozen=True)
class AnswerOption:
    """A selectable choice for a question."""
    value: int
    label: str
    emoji: str = ""


@dataclass(frozen=True)
class Question:
    """Single questionnaire item; higher option values mean more impairment."""
    id: str
    prompt: str
    options: Tuple[AnswerOption, ...]
    short_label: str = ""

    @property
    def max_points(self) -> int:
        return max((o.value for o in self.options), default=0)

    def allows(self, value: int) -> bool:
        return any(o.value == value for o in self.options)

    def option_values(self) -> List[int]:
        return [o.value for o in self.options]


@dataclass(frozen=True)
class RiskBands:
    """Score-ratio upper bounds for the healthy and at_risk bands."""
    healthy_max_ratio: float = 0.25
    at_risk_max_ratio: float = 0.50

    def __post_init__(self):
        if not 0.0 <= self.healthy_max_ratio < self.at_risk_max_ratio <= 1.0:
            raise ValueError(
                f"Invalid risk bands: healthy<={self.healthy_max_ratio}, at_risk<={self.at_risk_max_ratio}"
            )


@dataclass(frozen=True)
class Domain:
    """
    Assessable health dimension.

    `family` selects the risk bands used for classification.
    `higher_is_worse=False` marks an inverted scale where the scorer
    classifies the distance from the maximum instead of the raw score.
    """
    id: str
    name: str
    questions: Tuple[Question, ...]
    description: str = ""
    emoji: str = ""
    family: str = DEFAULT_FAMILY
    higher_is_worse: bool = True
    flag_trigger: Optional[FlagTrigger] = field(default=None, compare=False)
    trigger_action: Optional[str] = None

    @property
    def max_score(self) -> int:
        return sum(q.max_points for q in self.questions)

    @property
    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]

    def get_question(self, question_id: str) -> Question:
        for question in self.questions:
            if question.id == question_id:
                return question
        raise ValidationError(
            f"Question '{question_id}' does not belong to domain '{self.id}'",
            domain_id=self.id,
            question_id=question_id,
        )

    def unanswered(self, answers: Mapping[str, int]) -> List[str]:
        """Question ids of this domain with no recorded answer."""
        return [q.id for q in self.questions if answers.get(q.id) is None]


@dataclass(frozen=True)
class DomainGroup:
    """Wizard step grouping one to three domains."""
    id: str
    name: str
    domain_ids: Tuple[str, ...]
    emoji: str = ""


@dataclass(frozen=True, eq=False)
class DomainCatalog:
    """
    Read-only questionnaire definition.

    Wizard steps are numbered from 1: one step per domain group, then a
    review step, then a summary step.
    """
    domains: Tuple[Domain, ...]
    groups: Tuple[DomainGroup, ...]
    bands: Mapping[str, RiskBands] = field(
        default_factory=lambda: MappingProxyType({DEFAULT_FAMILY: RiskBands()})
    )
    name: str = "custom"

    def __post_init__(self):
        index: Dict[str, Domain] = {}
        for domain in self.domains:
            if domain.id in index:
                raise ValueError(f"Duplicate domain id: {domain.id}")
            question_ids = domain.question_ids
            if len(set(question_ids)) != len(question_ids):
                raise ValueError(f"Duplicate question id in domain: {domain.id}")
            if not domain.questions:
                raise ValueError(f"Domain has no questions: {domain.id}")
            index[domain.id] = domain

        grouped: List[str] = [d for g in self.groups for d in g.domain_ids]
        unknown = [d for d in grouped if d not in index]
        if unknown:
            raise ValueError(f"Groups reference unknown domains: {unknown}")
        if sorted(grouped) != sorted(index):
            raise ValueError("Every domain must appear in exactly one wizard group")
        if DEFAULT_FAMILY not in self.bands:
            raise ValueError(f"Risk bands must define the '{DEFAULT_FAMILY}' family")

        object.__setattr__(self, "bands", MappingProxyType(dict(self.bands)))
        object.__setattr__(self, "_index", MappingProxyType(index))
        logger.debug(f"Catalog '{self.name}' loaded: {len(self.domains)} domains, {len(self.groups)} groups")

    @classmethod
    def build(
        cls,
        domains: List[Domain],
        groups: Optional[List[DomainGroup]] = None,
        bands: Optional[Mapping[str, RiskBands]] = None,
        name: str = "custom",
    ) -> "DomainCatalog":
        """Build a catalog; without explicit groups every domain gets its own step."""
        if groups is None:
            groups = [DomainGroup(id=d.id, name=d.name, domain_ids=(d.id,)) for d in domains]
        return cls(
            domains=tuple(domains),
            groups=tuple(groups),
            bands=MappingProxyType(dict(bands or {DEFAULT_FAMILY: RiskBands()})),
            name=name,
        )

    # Lookups

    @property
    def domain_ids(self) -> List[str]:
        return [d.id for d in self.domains]

    def has_domain(self, domain_id: str) -> bool:
        return domain_id in self._index

    def get_domain(self, domain_id: str) -> Domain:
        try:
            return self._index[domain_id]
        except KeyError:
            raise NotFoundError("domain", domain_id) from None

    def get_question(self, domain_id: str, question_id: str) -> Question:
        return self.get_domain(domain_id).get_question(question_id)

    def bands_for(self, domain: Domain) -> RiskBands:
        return self.bands.get(domain.family, self.bands[DEFAULT_FAMILY])

    def position(self, domain_id: str) -> int:
        """Catalog order of a domain; unknown ids sort after all known ones."""
        for i, domain in enumerate(self.domains):
            if domain.id == domain_id:
                return i
        return len(self.domains)

    @property
    def max_total_score(self) -> int:
        return sum(d.max_score for d in self.domains)

    # Wizard steps

    @property
    def group_step_count(self) -> int:
        return len(self.groups)

    @property
    def review_step(self) -> int:
        return len(self.groups) + 1

    @property
    def summary_step(self) -> int:
        return len(self.groups) + 2

    def is_group_step(self, step: int) -> bool:
        return 1 <= step <= len(self.groups)

    def group_for_step(self, step: int) -> DomainGroup:
        if not self.is_group_step(step):
            raise NotFoundError("wizard step", str(step))
        return self.groups[step - 1]

    def domains_for_step(self, step: int) -> List[Domain]:
        return [self.get_domain(d) for d in self.group_for_step(step).domain_ids]

    def step_label(self, step: int) -> str:
        if self.is_group_step(step):
            return self.groups[step - 1].name
        if step == self.review_step:
            return "Review"
        if step == self.summary_step:
            return "Summary"
        raise NotFoundError("wizard step", str(step))
