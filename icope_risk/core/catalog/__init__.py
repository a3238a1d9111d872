"""
Domain Catalog Module

Static questionnaire definitions consumed by the scorer and the wizard.
"""
from .base import AnswerOption, Question, Domain, DomainGroup, DomainCatalog, RiskBands, DEFAULT_FAMILY
from .icope import ICOPE_DOMAINS, ICOPE_GROUPS, build_icope_catalog, default_catalog

__all__ = [
    "AnswerOption",
    "Question",
    "Domain",
    "DomainGroup",
    "DomainCatalog",
    "RiskBands",
    "DEFAULT_FAMILY",
    "ICOPE_DOMAINS",
    "ICOPE_GROUPS",
    "build_icope_catalog",
    "default_catalog",
]
