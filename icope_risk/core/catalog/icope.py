"""
ICOPE Screening Questionnaire

Twelve domains modelled on the WHO Integrated Care for Older People
framework. Answers reflect the elder's usual condition in the last
2-4 weeks. Scale: 0 no difficulty, 1 some difficulty, 2 needs help.
"""
from functools import lru_cache
from typing import List, Mapping, Optional

from icope_risk.core.catalog.base import (
    AnswerOption,
    Domain,
    DomainCatalog,
    DomainGroup,
    Question,
    RiskBands,
    DEFAULT_FAMILY,
)


def _options(*labels: str) -> tuple:
    emojis = ("😊", "😐", "😟")
    return tuple(AnswerOption(value=i, label=label, emoji=emojis[i]) for i, label in enumerate(labels))


def _any_severe(answers: Mapping[str, int]) -> bool:
    return any(v == 2 for v in answers.values())


def _falls_or_severe(answers: Mapping[str, int]) -> bool:
    return (answers.get("mob_2") or 0) >= 1 or _any_severe(answers)


def _all_affected(answers: Mapping[str, int]) -> bool:
    return bool(answers) and all(v >= 1 for v in answers.values())


ICOPE_DOMAINS: List[Domain] = [
    Domain(
        id="cognition",
        name="Memory & Thinking",
        emoji="🧠",
        description="Memory, confusion, and orientation",
        questions=(
            Question(
                id="cog_1",
                short_label="Memory Problems",
                prompt="Does the elder have problems with memory, confusion, or getting lost?",
                options=_options(
                    "No problem",
                    "Some problem (forgets sometimes)",
                    "Severe (often confused / forgets people or place)",
                ),
            ),
        ),
        flag_trigger=_any_severe,
        trigger_action="Refer for cognitive specialist evaluation",
    ),
    Domain(
        id="mood",
        name="Mood & Feelings",
        emoji="💙",
        description="Emotional wellbeing and mood",
        questions=(
            Question(
                id="mood_1",
                short_label="Feeling Sad",
                prompt="In the last 2 weeks, has the elder felt sad, low, or lost interest in daily activities?",
                options=_options("No", "Sometimes", "Most days"),
            ),
        ),
        flag_trigger=_any_severe,
        trigger_action="Consider mental health referral. Administer PHQ-2 screening.",
    ),
    Domain(
        id="mobility",
        name="Walking & Falls",
        emoji="🚶",
        description="Walking ability and fall history",
        questions=(
            Question(
                id="mob_1",
                short_label="Walking / Getting Up",
                prompt="Does the elder have difficulty walking or getting up from a chair?",
                options=_options("No difficulty", "Some difficulty", "Unable / needs help"),
            ),
            Question(
                id="mob_2",
                short_label="Falls in Past Year",
                prompt="Has the elder fallen in the last 1 year?",
                options=_options("No", "Yes, once", "Yes, more than once"),
            ),
        ),
        flag_trigger=_falls_or_severe,
        trigger_action="Home safety assessment. Consider physiotherapy referral.",
    ),
    Domain(
        id="vision",
        name="Vision",
        emoji="👁️",
        description="Eyesight and visual function",
        questions=(
            Question(
                id="vis_1",
                short_label="Seeing Difficulty",
                prompt="Does the elder have difficulty seeing (even with spectacles)?",
                options=_options("No difficulty", "Some difficulty", "Severe difficulty / cannot see well"),
            ),
        ),
        flag_trigger=_any_severe,
        trigger_action="Refer for ophthalmology evaluation",
    ),
    Domain(
        id="hearing",
        name="Hearing",
        emoji="👂",
        description="Hearing ability and communication",
        questions=(
            Question(
                id="hear_1",
                short_label="Hearing Difficulty",
                prompt="Does the elder have difficulty hearing normal conversation?",
                options=_options("No difficulty", "Some difficulty", "Severe difficulty / cannot hear properly"),
            ),
        ),
        flag_trigger=_any_severe,
        trigger_action="Refer for audiology evaluation",
    ),
    Domain(
        id="vitality",
        name="Appetite & Weight",
        emoji="🍽️",
        description="Eating habits and weight changes",
        questions=(
            Question(
                id="vit_1",
                short_label="Appetite Change",
                prompt="Has the elder's appetite changed recently?",
                options=_options("No change", "Slightly reduced", "Very poor appetite / eating very little"),
            ),
            Question(
                id="vit_2",
                short_label="Weight Change",
                prompt="Has there been unintentional weight change?",
                options=_options("No change", "Mild weight loss or gain", "Significant weight loss or gain"),
            ),
        ),
        flag_trigger=_any_severe,
        trigger_action="Nutritional assessment and dietitian referral",
    ),
    Domain(
        id="sleep",
        name="Sleep",
        emoji="🌙",
        description="Sleep quality and patterns",
        questions=(
            Question(
                id="sleep_1",
                short_label="Sleep Trouble",
                prompt="Does the elder have trouble falling asleep or staying asleep?",
                options=_options("No problem", "Sometimes", "Most nights"),
            ),
            Question(
                id="sleep_2",
                short_label="Daytime Tiredness",
                prompt="Does the elder feel tired or doze off during the day?",
                options=_options("Rarely", "Sometimes", "Most days"),
            ),
        ),
    ),
    Domain(
        id="continence",
        name="Bladder & Bowel",
        emoji="🚽",
        description="Urinary and bowel control",
        questions=(
            Question(
                id="cont_1",
                short_label="Control Problems",
                prompt="Does the elder have difficulty controlling urine or bowel movements?",
                options=_options("No problem", "Urine problem only", "Urine and bowel problems"),
            ),
        ),
    ),
    Domain(
        id="adl",
        name="Self-Care (ADL)",
        emoji="🧼",
        description="Basic self-care activities",
        questions=(
            Question(
                id="adl_1",
                short_label="Daily Self-Care",
                prompt="Does the elder need help with bathing, dressing, eating or toileting?",
                options=_options("Independent", "Needs some help", "Fully dependent"),
            ),
        ),
        flag_trigger=_any_severe,
        trigger_action="Assess need for personal care support",
    ),
    Domain(
        id="iadl",
        name="Daily Tasks (IADL)",
        emoji="🏠",
        description="Complex daily activities",
        questions=(
            Question(
                id="iadl_1",
                short_label="Managing Tasks",
                prompt="Can the elder manage cooking, shopping, medicines, or money?",
                options=_options("Independent", "Needs assistance", "Fully dependent"),
            ),
        ),
        flag_trigger=_any_severe,
        trigger_action="Assess need for daily living support",
    ),
    Domain(
        id="social",
        name="Social & Loneliness",
        emoji="👥",
        description="Social activities and feelings of loneliness",
        questions=(
            Question(
                id="soc_1",
                short_label="Social Activities",
                prompt="Does the elder take part in family or community activities?",
                options=_options("Regularly", "Occasionally", "Rarely / never"),
            ),
            Question(
                id="soc_2",
                short_label="Feeling Lonely",
                prompt="How often does the elder feel lonely?",
                options=_options("Never", "Sometimes", "Often"),
            ),
        ),
        flag_trigger=_all_affected,
        trigger_action="Social support assessment. Consider community programs.",
    ),
    Domain(
        id="healthcare",
        name="Healthcare Access",
        emoji="🏥",
        description="Access to medical care",
        questions=(
            Question(
                id="hc_1",
                short_label="Reaching Doctor",
                prompt="Is it easy for the elder to reach a doctor or hospital when needed?",
                options=_options("Easy", "Some difficulty", "Very difficult / needs full help"),
            ),
        ),
    ),
]

ICOPE_GROUPS: List[DomainGroup] = [
    DomainGroup(id="cognitive", name="Mind & Mood", emoji="🧠", domain_ids=("cognition", "mood")),
    DomainGroup(id="physical", name="Movement & Falls", emoji="🚶", domain_ids=("mobility",)),
    DomainGroup(id="sensory", name="Vision & Hearing", emoji="👁️", domain_ids=("vision", "hearing")),
    DomainGroup(id="vitality", name="Food, Weight & Sleep", emoji="🍽️", domain_ids=("vitality", "sleep")),
    DomainGroup(id="daily", name="Daily Activities", emoji="🏠", domain_ids=("continence", "adl", "iadl")),
    DomainGroup(id="social", name="Social & Healthcare", emoji="👥", domain_ids=("social", "healthcare")),
]


def build_icope_catalog(bands: Optional[RiskBands] = None) -> DomainCatalog:
    """Build the ICOPE catalog with the given (or configured) risk bands."""
    if bands is None:
        from icope_risk.config import settings
        bands = RiskBands(
            healthy_max_ratio=settings.healthy_max_ratio,
            at_risk_max_ratio=settings.at_risk_max_ratio,
        )
    return DomainCatalog.build(
        domains=ICOPE_DOMAINS,
        groups=ICOPE_GROUPS,
        bands={DEFAULT_FAMILY: bands},
        name="icope",
    )


@lru_cache()
def default_catalog() -> DomainCatalog:
    """Process-wide ICOPE catalog, built once on first use."""
    return build_icope_catalog()
