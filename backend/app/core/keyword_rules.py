"""
Ordered keyword tables for heuristic classification

Each axis (document type, clause category, risk level, risk category) is a
tuple of KeywordRule entries checked top to bottom; the first rule with a
keyword contained in the lower-cased text wins. Table order is the
precedence and must not be re-sorted.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..models.analysis import ClauseCategory, RiskCategory, RiskLevel


@dataclass(frozen=True)
class KeywordRule:
    """One (keywords -> label) row of a classification table"""
    keywords: Tuple[str, ...]
    label: str

    def matches(self, text_lower: str) -> bool:
        return any(keyword in text_lower for keyword in self.keywords)


def match_first(text: Optional[str], rules: Sequence[KeywordRule], default: str) -> str:
    """
    Return the label of the first matching rule, or default

    Args:
        text: Text to classify (case-insensitive)
        rules: Ordered classification table
        default: Label returned when no rule matches

    Returns:
        Matched label
    """
    if not text:
        return default
    text_lower = text.lower()
    for rule in rules:
        if rule.matches(text_lower):
            return rule.label
    return default


# =====================================================
# DOCUMENT TYPE
# =====================================================

DEFAULT_DOCUMENT_TYPE = "Legal Agreement"

DOCUMENT_TYPE_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(("non-disclosure", "confidential", "nda"), "Non-Disclosure Agreement"),
    KeywordRule(("employment", "employee"), "Employment Agreement"),
    KeywordRule(("service", "consulting"), "Service Agreement"),
    KeywordRule(("license", "software"), "License Agreement"),
    KeywordRule(("lease", "rent"), "Lease Agreement"),
)


def detect_document_type(document_text: Optional[str]) -> str:
    """Detect the agreement type from document content"""
    return match_first(document_text, DOCUMENT_TYPE_RULES, DEFAULT_DOCUMENT_TYPE)


# =====================================================
# CLAUSE CATEGORY (matched against clause titles)
# =====================================================

CLAUSE_CATEGORY_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(("confidential", "disclosure"), ClauseCategory.CONFIDENTIALITY.value),
    KeywordRule(("payment", "fee"), ClauseCategory.PAYMENT.value),
    KeywordRule(("term", "duration"), ClauseCategory.TERMINATION.value),
    KeywordRule(("liability", "damage"), ClauseCategory.LIABILITY.value),
    KeywordRule(("intellectual", "property"), ClauseCategory.INTELLECTUAL_PROPERTY.value),
    KeywordRule(("warranty", "guarantee"), ClauseCategory.WARRANTY.value),
    KeywordRule(("governing", "law"), ClauseCategory.GOVERNING_LAW.value),
)


def categorize_clause(title: Optional[str]) -> str:
    return match_first(title, CLAUSE_CATEGORY_RULES, ClauseCategory.GENERAL.value)


# =====================================================
# RISK LEVEL / SEVERITY (matched against descriptions)
# =====================================================

RISK_LEVEL_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(("critical", "severe"), RiskLevel.CRITICAL.value),
    KeywordRule(("high", "significant"), RiskLevel.HIGH.value),
    KeywordRule(("low", "minor"), RiskLevel.LOW.value),
)


def extract_risk_level(description: Optional[str]) -> str:
    return match_first(description, RISK_LEVEL_RULES, RiskLevel.MEDIUM.value)


# Severity uses the same scale and table as clause risk level
extract_severity = extract_risk_level


# =====================================================
# RISK CATEGORY (matched against risk titles)
# =====================================================

RISK_CATEGORY_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(("financial", "payment", "cost"), RiskCategory.FINANCIAL.value),
    KeywordRule(("legal", "compliance", "regulatory"), RiskCategory.LEGAL.value),
    KeywordRule(("operational", "business", "process"), RiskCategory.OPERATIONAL.value),
)


def categorize_risk(title: Optional[str]) -> str:
    return match_first(title, RISK_CATEGORY_RULES, RiskCategory.LEGAL.value)


# =====================================================
# RECOMMENDATION PRIORITY (matched against the label before the colon)
# =====================================================

PRIORITY_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(("high",), "high"),
    KeywordRule(("critical",), "critical"),
)


def extract_priority(label: Optional[str]) -> str:
    return match_first(label, PRIORITY_RULES, "medium")


# =====================================================
# CLAUSE KEY TERMS
# =====================================================

KEY_TERM_STOPWORDS = frozenset({"agreement", "contract", "party", "shall", "will", "may", "must"})


def extract_clause_key_terms(text: str, limit: int = 3) -> list:
    """Pick up to `limit` lower-cased words longer than four characters, skipping stopwords"""
    words = text.lower().split()
    important = [w for w in words if len(w) > 4 and w not in KEY_TERM_STOPWORDS]
    return important[:limit]
