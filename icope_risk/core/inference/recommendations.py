"""
Recommendations Module

Next-step recommendations derived from an assessment's overall risk,
its domain risk levels and any domain flag triggers.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from icope_risk.core.inference.risk_engine import DomainResult, RiskLevel


class Priority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return ["urgent", "high", "medium", "low"].index(self.value)


class Category(str, Enum):
    FOLLOW_UP = "follow-up"
    REFERRAL = "referral"
    INTERVENTION = "intervention"
    MONITORING = "monitoring"
    LIFESTYLE = "lifestyle"


@dataclass(frozen=True)
class Recommendation:
    """Single suggested next step."""
    id: str
    priority: Priority
    category: Category
    title: str
    description: str
    timeframe: Optional[str] = None
    domain: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "priority": self.priority.value,
            "category": self.category.value,
            "title": self.title,
            "description": self.description,
            "timeframe": self.timeframe,
            "domain": self.domain,
        }


def _rec(id, priority, category, title, description, timeframe=None) -> Recommendation:
    return Recommendation(id, Priority(priority), Category(category), title, description, timeframe)


OVERALL_RECOMMENDATIONS: Dict[RiskLevel, List[Recommendation]] = {
    RiskLevel.HEALTHY: [
        _rec("overall_healthy", "low", "follow-up", "Annual Reassessment",
             "Continue current care plan. Schedule annual comprehensive assessment.", "12 months"),
    ],
    RiskLevel.AT_RISK: [
        _rec("overall_atrisk", "medium", "follow-up", "Follow-up Assessment",
             "Schedule follow-up assessment to monitor at-risk domains.", "Within 2 weeks"),
        _rec("overall_plan", "medium", "intervention", "Care Plan Review",
             "Review and update care plan based on assessment findings.", "Within 1 week"),
    ],
    RiskLevel.INTERVENTION: [
        _rec("overall_urgent", "urgent", "referral", "Comprehensive Geriatric Assessment",
             "Urgent referral for comprehensive geriatric assessment.", "Within 48 hours"),
        _rec("overall_multidis", "high", "intervention", "Multidisciplinary Team Review",
             "Convene multidisciplinary team to develop intervention plan.", "Within 1 week"),
    ],
}

# Domains without an entry only contribute their flag trigger action
DOMAIN_RECOMMENDATIONS: Dict[str, Dict[RiskLevel, List[Recommendation]]] = {
    "cognition": {
        RiskLevel.AT_RISK: [
            _rec("cog_monitor", "medium", "monitoring", "Cognitive Monitoring",
                 "Monitor for signs of memory decline. Consider cognitive exercises.", "Monthly"),
        ],
        RiskLevel.INTERVENTION: [
            _rec("cog_referral", "high", "referral", "Cognitive Specialist Referral",
                 "Refer to neurologist or geriatric psychiatrist for comprehensive evaluation.", "Within 1 week"),
        ],
    },
    "mood": {
        RiskLevel.AT_RISK: [
            _rec("dep_phq9", "medium", "follow-up", "PHQ-9 Screening",
                 "Administer PHQ-9 for detailed depression assessment.", "Within 2 weeks"),
        ],
        RiskLevel.INTERVENTION: [
            _rec("dep_mental", "urgent", "referral", "Mental Health Referral",
                 "Urgent referral to mental health professional. Assess for suicide risk.", "Within 48 hours"),
        ],
    },
    "mobility": {
        RiskLevel.AT_RISK: [
            _rec("mob_exercise", "medium", "lifestyle", "Mobility Exercises",
                 "Recommend light walking and balance exercises. Consider assistive devices.", "Start immediately"),
            _rec("falls_home", "high", "intervention", "Home Safety Assessment",
                 "Conduct home safety evaluation. Remove hazards, add grab bars.", "Within 1 week"),
        ],
        RiskLevel.INTERVENTION: [
            _rec("mob_physio", "high", "referral", "Physiotherapy Referral",
                 "Refer to physiotherapist for mobility assessment and rehabilitation.", "Within 1 week"),
            _rec("falls_urgent", "urgent", "intervention", "Falls Prevention Program",
                 "Enroll in falls prevention program. Consider 24/7 supervision.", "Immediately"),
        ],
    },
    "vision": {
        RiskLevel.AT_RISK: [
            _rec("vis_screen", "medium", "follow-up", "Vision Screening",
                 "Schedule comprehensive vision screening.", "Within 1 month"),
        ],
        RiskLevel.INTERVENTION: [
            _rec("vis_ophth", "high", "referral", "Ophthalmology Referral",
                 "Urgent referral to ophthalmologist for evaluation.", "Within 1 week"),
        ],
    },
    "hearing": {
        RiskLevel.AT_RISK: [
            _rec("hear_screen", "medium", "follow-up", "Hearing Assessment",
                 "Schedule hearing evaluation. Consider hearing aids if needed.", "Within 1 month"),
        ],
        RiskLevel.INTERVENTION: [
            _rec("hear_audio", "high", "referral", "Audiology Referral",
                 "Refer to audiologist for comprehensive hearing evaluation.", "Within 2 weeks"),
        ],
    },
    "vitality": {
        RiskLevel.AT_RISK: [
            _rec("nut_counsel", "medium", "lifestyle", "Nutritional Counseling",
                 "Provide dietary guidance. Monitor food intake and weekly weight.", "Within 2 weeks"),
        ],
        RiskLevel.INTERVENTION: [
            _rec("nut_diet", "high", "referral", "Dietitian Referral",
                 "Refer to registered dietitian. Investigate cause of unintentional weight change.",
                 "Within 1 week"),
        ],
    },
    "adl": {
        RiskLevel.AT_RISK: [
            _rec("adl_assist", "medium", "intervention", "ADL Support Assessment",
                 "Assess need for personal care assistance.", "Within 2 weeks"),
        ],
        RiskLevel.INTERVENTION: [
            _rec("adl_care", "high", "intervention", "Personal Care Support",
                 "Arrange personal care support services.", "Within 1 week"),
        ],
    },
    "iadl": {
        RiskLevel.AT_RISK: [
            _rec("iadl_support", "medium", "intervention", "IADL Support Planning",
                 "Assess need for help with shopping, cooking, finances.", "Within 2 weeks"),
        ],
        RiskLevel.INTERVENTION: [
            _rec("iadl_services", "high", "intervention", "Community Support Services",
                 "Connect with community support services for daily living assistance.", "Within 1 week"),
        ],
    },
    "social": {
        RiskLevel.AT_RISK: [
            _rec("lone_social", "medium", "lifestyle", "Social Engagement",
                 "Connect with senior center or community programs.", "Within 2 weeks"),
        ],
        RiskLevel.INTERVENTION: [
            _rec("lone_urgent", "high", "intervention", "Social Support Intervention",
                 "Arrange regular visitor program. Assess for depression.", "Within 1 week"),
        ],
    },
}


def generate_recommendations(
    overall_risk: RiskLevel,
    results: Iterable[DomainResult],
) -> List[Recommendation]:
    """
    Build the prioritized recommendation list for an assessment.

    Sorted urgent first; duplicates (by id) keep their first occurrence.
    """
    recommendations: List[Recommendation] = list(OVERALL_RECOMMENDATIONS[overall_risk])

    for result in results:
        for rec in DOMAIN_RECOMMENDATIONS.get(result.domain_id, {}).get(result.risk_level, []):
            recommendations.append(replace(rec, domain=result.domain_name))
        if result.flag_triggered and result.trigger_action:
            recommendations.append(Recommendation(
                id=f"{result.domain_id}_flag",
                priority=Priority.HIGH,
                category=Category.REFERRAL,
                title=f"{result.domain_name}: flagged",
                description=result.trigger_action,
                domain=result.domain_name,
            ))

    recommendations.sort(key=lambda r: r.priority.rank)

    seen = set()
    unique = []
    for rec in recommendations:
        if rec.id in seen:
            continue
        seen.add(rec.id)
        unique.append(rec)
    return unique
