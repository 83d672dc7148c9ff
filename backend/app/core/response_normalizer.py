"""
Response normalization for LLM analysis output

Turns one untrusted provider response into the canonical Analysis record by
trying three tiers in order:

1. strict   - decode a JSON object (fences stripped, prose trimmed, truncated
              output repaired) and coerce its items into the schema
2. heuristic - pull sections such as "KEY CLAUSES IDENTIFIED" out of prose
3. synthetic - a clearly degraded analysis built from the original document

normalize() never raises; the worst case is a tier-3 analysis.
"""

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import structlog
from pydantic import ValidationError

from ..models.analysis import (
    Analysis,
    Clause,
    ClauseCategory,
    Importance,
    KeyTerm,
    Priority,
    QualityMetrics,
    Recommendation,
    Risk,
    RiskCategory,
    RiskLevel,
    Summary,
)
from .keyword_rules import (
    categorize_clause,
    categorize_risk,
    detect_document_type,
    extract_clause_key_terms,
    extract_priority,
    extract_risk_level,
    extract_severity,
)
from .telemetry import normalizer_tiers

logger = structlog.get_logger(__name__)

TIER_STRICT = "strict"
TIER_HEURISTIC = "heuristic"
TIER_SYNTHETIC = "synthetic"

REQUIRED_KEYS = ("summary", "clauses", "risks", "keyTerms", "recommendations", "qualityMetrics")
ARRAY_KEYS = ("clauses", "risks", "keyTerms", "recommendations")

DEFAULT_PARTIES = ["Party A", "Party B"]

# Comma cut points tried when repairing a truncated object
MAX_REPAIR_CUTS = 50


@dataclass(frozen=True)
class NormalizedResponse:
    analysis: Analysis
    tier: str
    confidence: float


def calculate_confidence(analysis: Analysis) -> float:
    """
    Additive confidence score for an analysis without a provider-supplied score

    +20 document type, +30 for 3+ clauses, +25 for 2+ risks,
    +15 for 2+ recommendations, +10 for 2+ key terms; capped at 100.
    """
    score = 0
    if analysis.summary.document_type:
        score += 20
    if len(analysis.clauses) >= 3:
        score += 30
    if len(analysis.risks) >= 2:
        score += 25
    if len(analysis.recommendations) >= 2:
        score += 15
    if len(analysis.key_terms) >= 2:
        score += 10
    return float(min(score, 100))


def _clamp_score(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if math.isnan(value):
        return default
    return float(max(0, min(100, value)))


def _as_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    return default


def _enum_or(value: Any, enum_cls, fallback: str) -> str:
    """Accept a valid enum value (case-insensitive) or use the keyword fallback"""
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in {member.value for member in enum_cls}:
            return candidate
    return fallback


# =====================================================
# TIER 1 HELPERS: cleaning and truncation repair
# =====================================================

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*")


def clean_response_text(response_text: str) -> str:
    """
    Strip markdown fences and slice from the first '{' to the last '}'

    When there is no closing brace after the first '{' the text is kept
    from the first '{' to the end so the repair step can close it.
    """
    cleaned = _FENCE_RE.sub("", response_text.strip())
    start = cleaned.find("{")
    if start == -1:
        return cleaned
    end = cleaned.rfind("}")
    if end > start:
        return cleaned[start:end + 1]
    return cleaned[start:]


def _scan_structure(text: str) -> Tuple[List[str], bool, List[Tuple[int, List[str]]]]:
    """
    Walk the text outside of strings

    Returns:
        (open bracket stack, still inside a string, comma cut points with the
        stack as it was at each comma)
    """
    stack: List[str] = []
    cuts: List[Tuple[int, List[str]]] = []
    in_string = False
    escaped = False

    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in "{[":
            stack.append(char)
        elif char in "}]":
            if stack:
                stack.pop()
        elif char == ",":
            cuts.append((index, list(stack)))

    return stack, in_string, cuts


def _closers(stack: List[str]) -> str:
    return "".join("}" if opener == "{" else "]" for opener in reversed(stack))


def repair_truncated_json(text: str) -> Optional[Dict[str, Any]]:
    """
    Best-effort recovery of an object cut off by a token limit

    First closes any open string and appends the missing closing brackets.
    If that does not decode, trims back to earlier commas (dropping the
    trailing partial entry) and closes from there. Trailing array entries
    may be lost; tiers 2 and 3 remain the safety net.
    """
    body = text.rstrip()
    if not body.startswith("{"):
        return None

    stack, in_string, cuts = _scan_structure(body)

    candidate = body + ('"' if in_string else "")
    candidate = candidate.rstrip().rstrip(",")
    try:
        decoded = json.loads(candidate + _closers(stack))
        if isinstance(decoded, dict):
            return decoded
    except json.JSONDecodeError:
        pass

    for index, stack_at_cut in reversed(cuts[-MAX_REPAIR_CUTS:]):
        try:
            decoded = json.loads(body[:index] + _closers(stack_at_cut))
        except json.JSONDecodeError:
            continue
        if isinstance(decoded, dict):
            return decoded
    return None


def decode_object(response_text: str) -> Optional[Dict[str, Any]]:
    """Decode the JSON object in a response, repairing truncation if needed"""
    cleaned = clean_response_text(response_text)
    if not cleaned.startswith("{"):
        return None

    try:
        decoded = json.loads(cleaned)
        if isinstance(decoded, dict):
            return decoded
    except json.JSONDecodeError:
        pass

    # The slice may end at an inner '}' of a truncated object; repair from the full tail
    unfenced = _FENCE_RE.sub("", response_text.strip())
    tail = unfenced[unfenced.find("{"):]
    repaired = repair_truncated_json(tail)
    if repaired is None and tail != cleaned:
        repaired = repair_truncated_json(cleaned)
    return repaired


# =====================================================
# TIER 2 PATTERNS
# =====================================================

_CLAUSE_SECTION_PATTERNS = (
    re.compile(r"KEY CLAUSES IDENTIFIED:[\s\S]*?(?=RISKS IDENTIFIED:|KEY TERMS:|RECOMMENDATIONS:|$)", re.I),
    re.compile(r"CLAUSES?[\s\S]*?(?=RISKS?|KEY TERMS?|RECOMMENDATIONS?|$)", re.I),
)
_RISK_SECTION_PATTERNS = (
    re.compile(r"RISKS IDENTIFIED:[\s\S]*?(?=KEY TERMS:|RECOMMENDATIONS:|OVERALL ASSESSMENT:|$)", re.I),
    re.compile(r"RISKS?[\s\S]*?(?=KEY TERMS?|RECOMMENDATIONS?|OVERALL|$)", re.I),
)
_KEY_TERMS_SECTION = re.compile(r"KEY TERMS?:[\s\S]*?(?=RECOMMENDATIONS?|OVERALL|$)", re.I)
_RECOMMENDATIONS_SECTION = re.compile(r"RECOMMENDATIONS?:[\s\S]*?(?=OVERALL|$)", re.I)

_LIST_LINE = re.compile(r"^(?:\d+\.|-\s)")
_TERM_LINE = re.compile(r"^[-*]\s")
_TITLED_ITEM = re.compile(r"^(?:\d+\.|-)?\s*([^:]+):\s*(.+)")
_TERM_ITEM = re.compile(r"^[-*]\s*([^:]+):\s*(.+)")
_BARE_ITEM = re.compile(r"^(?:\d+\.|-)\s*(.+)")

_DOCUMENT_TYPE_LINE = re.compile(r"DOCUMENT TYPE:\s*([^\n]+)", re.I)
_PARTIES_LINE = re.compile(r"MAIN PARTIES?:\s*([^\n]+)", re.I)


def _section(text: str, patterns) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def _list_lines(section: str, line_pattern=_LIST_LINE) -> List[str]:
    lines = (line.strip() for line in section.split("\n"))
    return [line for line in lines if line and line_pattern.match(line)]


class ResponseNormalizer:
    """
    Three-tier normalizer shared by every provider

    Stateless; one instance can serve concurrent requests.
    """

    def normalize(self, raw_response: Optional[str], original_text: Optional[str]) -> Analysis:
        """Return a valid Analysis for any input; never raises"""
        return self.parse(raw_response, original_text).analysis

    def parse(self, raw_response: Optional[str], original_text: Optional[str]) -> NormalizedResponse:
        """
        Normalize a raw response and report which tier produced it

        Args:
            raw_response: Text returned by the provider (may be None or empty)
            original_text: Document the analysis was requested for

        Returns:
            NormalizedResponse with the analysis, tier name and confidence
        """
        raw = raw_response if isinstance(raw_response, str) else ""
        original = original_text if isinstance(original_text, str) else ""

        try:
            result = self._parse_strict(raw)
            if result is None:
                result = self._parse_heuristic(raw, original)
        except Exception as e:
            logger.error(
                "Response normalization failed, using synthetic analysis",
                error=str(e),
                error_type=type(e).__name__,
                response_preview=raw[:500]
            )
            result = None

        if result is None:
            analysis = self.create_parse_fallback_analysis(original, "No parseable structure in response")
            result = NormalizedResponse(analysis=analysis, tier=TIER_SYNTHETIC, confidence=50.0)

        normalizer_tiers.labels(tier=result.tier).inc()
        logger.info(
            "Response normalized",
            tier=result.tier,
            clauses=len(result.analysis.clauses),
            risks=len(result.analysis.risks),
            confidence=result.confidence
        )
        return result

    # =====================================================
    # TIER 1: STRICT DECODE
    # =====================================================

    def _parse_strict(self, raw: str) -> Optional[NormalizedResponse]:
        payload = decode_object(raw)
        if payload is None:
            logger.debug("Strict decode found no JSON object")
            return None

        summary = payload.get("summary")
        if not isinstance(summary, dict) or not _as_text(summary.get("documentType")):
            logger.warning("Decoded object lacks summary.documentType, falling through")
            return None

        missing = [key for key in REQUIRED_KEYS if key not in payload]
        if missing:
            logger.info("Decoded object missing keys, synthesizing defaults", missing=missing)

        try:
            analysis = self._coerce_payload(payload)
        except ValidationError as e:
            logger.warning("Decoded object failed schema validation", errors=e.error_count())
            return None

        if "confidence" in payload:
            confidence = _clamp_score(payload.get("confidence"), calculate_confidence(analysis))
        else:
            confidence = calculate_confidence(analysis)

        return NormalizedResponse(analysis=analysis, tier=TIER_STRICT, confidence=confidence)

    def _coerce_payload(self, payload: Dict[str, Any]) -> Analysis:
        """Build an Analysis from a decoded object, repairing item-level defects"""
        arrays = {}
        for key in ARRAY_KEYS:
            value = payload.get(key)
            arrays[key] = [item for item in value if isinstance(item, dict)] if isinstance(value, list) else []

        clauses = self._coerce_clauses(arrays["clauses"])
        clause_ids = {clause.id for clause in clauses}
        risks = self._coerce_risks(arrays["risks"], clause_ids)
        key_terms = self._coerce_key_terms(arrays["keyTerms"])
        recommendations = self._coerce_recommendations(arrays["recommendations"])

        raw_summary = payload["summary"]
        total = raw_summary.get("totalClausesIdentified")
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            total = len(clauses)

        parties = raw_summary.get("mainParties")
        if isinstance(parties, list):
            parties = [_as_text(p) for p in parties if _as_text(p)]
        else:
            parties = []

        summary = Summary(
            documentType=_as_text(raw_summary.get("documentType")),
            keyPurpose=_as_text(raw_summary.get("keyPurpose")),
            mainParties=parties,
            effectiveDate=_as_text(raw_summary.get("effectiveDate")) or None,
            expirationDate=_as_text(raw_summary.get("expirationDate")) or None,
            totalClausesIdentified=total,
            completenessScore=_clamp_score(raw_summary.get("completenessScore"), 0.0)
        )

        raw_metrics = payload.get("qualityMetrics")
        if not isinstance(raw_metrics, dict):
            raw_metrics = {}
        missed = raw_metrics.get("potentialMissedClauses")
        metrics = QualityMetrics(
            clauseDetectionConfidence=_clamp_score(raw_metrics.get("clauseDetectionConfidence"), 0.0),
            analysisCompleteness=_clamp_score(raw_metrics.get("analysisCompleteness"), 0.0),
            potentialMissedClauses=[_as_text(m) for m in missed if _as_text(m)] if isinstance(missed, list) else []
        )

        return Analysis(
            summary=summary,
            clauses=clauses,
            risks=risks,
            keyTerms=key_terms,
            recommendations=recommendations,
            qualityMetrics=metrics
        )

    def _coerce_clauses(self, items: List[Dict[str, Any]]) -> List[Clause]:
        clauses = []
        seen = set()
        for item in items:
            title = _as_text(item.get("title")) or _as_text(item.get("name"))
            content = _as_text(item.get("content")) or _as_text(item.get("text"))
            if not title and not content:
                continue
            title = title or content[:60]

            clause_id = _as_text(item.get("id"))
            if not clause_id or clause_id in seen:
                clause_id = f"clause_{len(clauses) + 1}"
                while clause_id in seen:
                    clause_id = f"{clause_id}_dup"
            seen.add(clause_id)

            explanation = _as_text(item.get("explanation"))
            key_terms = item.get("keyTerms")
            if isinstance(key_terms, list):
                key_terms = [_as_text(t) for t in key_terms if _as_text(t)]
            else:
                key_terms = extract_clause_key_terms(f"{title} {content}")

            clauses.append(Clause(
                id=clause_id,
                title=title,
                content=content,
                category=_enum_or(item.get("category"), ClauseCategory, categorize_clause(title)),
                riskLevel=_enum_or(
                    item.get("riskLevel"), RiskLevel, extract_risk_level(explanation or content)
                ),
                explanation=explanation,
                sourceLocation=_as_text(item.get("sourceLocation")),
                keyTerms=key_terms
            ))
        return clauses

    def _coerce_risks(self, items: List[Dict[str, Any]], clause_ids: set) -> List[Risk]:
        risks = []
        for index, item in enumerate(items):
            title = _as_text(item.get("title"))
            description = _as_text(item.get("description"))
            if not title and not description:
                continue
            title = title or description[:60]

            reference = _as_text(item.get("clauseReference"))
            if reference not in clause_ids:
                reference = "general"

            risks.append(Risk(
                id=_as_text(item.get("id")) or f"risk_{index + 1}",
                title=title,
                description=description,
                severity=_enum_or(item.get("severity"), RiskLevel, extract_severity(description)),
                category=_enum_or(item.get("category"), RiskCategory, categorize_risk(title)),
                recommendation=_as_text(item.get("recommendation")),
                clauseReference=reference,
                supportingText=_as_text(item.get("supportingText"))
            ))
        return risks

    def _coerce_key_terms(self, items: List[Dict[str, Any]]) -> List[KeyTerm]:
        terms = []
        for item in items:
            term = _as_text(item.get("term"))
            if not term:
                continue
            terms.append(KeyTerm(
                term=term,
                definition=_as_text(item.get("definition")),
                importance=_enum_or(item.get("importance"), Importance, Importance.MEDIUM.value),
                context=_as_text(item.get("context"))
            ))
        return terms

    def _coerce_recommendations(self, items: List[Dict[str, Any]]) -> List[Recommendation]:
        recommendations = []
        for item in items:
            action = _as_text(item.get("action"))
            if not action:
                continue
            affected = item.get("affectedClauses")
            recommendations.append(Recommendation(
                priority=_enum_or(item.get("priority"), Priority, extract_priority(action)),
                action=action,
                rationale=_as_text(item.get("rationale")),
                affectedClauses=[_as_text(a) for a in affected if _as_text(a)] if isinstance(affected, list) else []
            ))
        return recommendations

    # =====================================================
    # TIER 2: HEURISTIC TEXT EXTRACTION
    # =====================================================

    def _parse_heuristic(self, raw: str, original: str) -> Optional[NormalizedResponse]:
        if not raw.strip():
            logger.warning("Empty response, no text to extract from")
            return None

        document_type = self._extract_document_type(raw, original)
        clauses = self._extract_clauses(raw)
        if not clauses:
            # Keep the clause array populated when no clause lines are found
            excerpt = original[:300]
            clauses = [Clause(
                id="clause_1",
                title=document_type,
                content=excerpt,
                category=ClauseCategory.GENERAL.value,
                riskLevel=RiskLevel.MEDIUM.value,
                explanation=f"Overall terms of the {document_type}",
                sourceLocation="Document body",
                keyTerms=extract_clause_key_terms(excerpt)
            )]

        clause_ids = [clause.id for clause in clauses]
        risks = self._extract_risks(raw, clause_ids)
        key_terms = self._extract_key_terms(raw)
        recommendations = self._extract_recommendations(raw, clause_ids)

        analysis = Analysis(
            summary=Summary(
                documentType=document_type,
                keyPurpose="Contract analysis and risk assessment",
                mainParties=self._extract_parties(raw) or list(DEFAULT_PARTIES),
                totalClausesIdentified=len(clauses),
                completenessScore=85
            ),
            clauses=clauses,
            risks=risks,
            keyTerms=key_terms,
            recommendations=recommendations,
            qualityMetrics=QualityMetrics(
                clauseDetectionConfidence=75,
                analysisCompleteness=85
            )
        )
        logger.info("Heuristic extraction used", document_type=document_type)
        return NormalizedResponse(
            analysis=analysis,
            tier=TIER_HEURISTIC,
            confidence=calculate_confidence(analysis)
        )

    def _extract_document_type(self, raw: str, original: str) -> str:
        match = _DOCUMENT_TYPE_LINE.search(raw)
        if match and match.group(1).strip():
            return match.group(1).strip()
        return detect_document_type(original)

    def _extract_parties(self, raw: str) -> List[str]:
        match = _PARTIES_LINE.search(raw)
        if not match:
            return []
        return [party.strip() for party in match.group(1).split(",") if party.strip()]

    def _extract_clauses(self, raw: str) -> List[Clause]:
        section = _section(raw, _CLAUSE_SECTION_PATTERNS)
        if section is None:
            return []

        clauses = []
        for line in _list_lines(section):
            match = _TITLED_ITEM.match(line)
            if not match:
                continue
            title, description = match.group(1).strip(), match.group(2).strip()
            number = len(clauses) + 1
            clauses.append(Clause(
                id=f"clause_{number}",
                title=title,
                content=description,
                category=categorize_clause(title),
                riskLevel=extract_risk_level(description),
                explanation=description,
                sourceLocation=f"Section {number}",
                keyTerms=extract_clause_key_terms(f"{title} {description}")
            ))
        return clauses

    def _extract_risks(self, raw: str, clause_ids: List[str]) -> List[Risk]:
        section = _section(raw, _RISK_SECTION_PATTERNS)
        if section is None:
            return []

        reference = clause_ids[0] if clause_ids else "general"
        risks = []
        for line in _list_lines(section):
            match = _TITLED_ITEM.match(line)
            if not match:
                continue
            title, description = match.group(1).strip(), match.group(2).strip()
            risks.append(Risk(
                id=f"risk_{len(risks) + 1}",
                title=title,
                description=description,
                severity=extract_severity(description),
                category=categorize_risk(title),
                recommendation=f"Address {title.lower()} through appropriate measures",
                clauseReference=reference,
                supportingText=description
            ))
        return risks

    def _extract_key_terms(self, raw: str) -> List[KeyTerm]:
        match = _KEY_TERMS_SECTION.search(raw)
        if not match:
            return []

        terms = []
        for line in _list_lines(match.group(0), _TERM_LINE):
            item = _TERM_ITEM.match(line)
            if item:
                terms.append(KeyTerm(
                    term=item.group(1).strip(),
                    definition=item.group(2).strip(),
                    importance=Importance.MEDIUM.value,
                    context="Document analysis"
                ))
        return terms

    def _extract_recommendations(self, raw: str, clause_ids: List[str]) -> List[Recommendation]:
        match = _RECOMMENDATIONS_SECTION.search(raw)
        if not match:
            return []

        recommendations = []
        for line in _list_lines(match.group(0)):
            titled = _TITLED_ITEM.match(line)
            if titled:
                priority = extract_priority(titled.group(1))
                action = titled.group(2).strip()
            else:
                bare = _BARE_ITEM.match(line)
                if not bare:
                    continue
                priority = Priority.MEDIUM.value
                action = bare.group(1).strip()

            recommendations.append(Recommendation(
                priority=priority,
                action=action,
                rationale="Important for contract compliance and risk management",
                affectedClauses=clause_ids[:2]
            ))
        return recommendations

    # =====================================================
    # TIER 3: SYNTHETIC FALLBACK
    # =====================================================

    def create_fallback_analysis(
        self,
        original_text: Optional[str],
        error_type: str,
        error_message: str
    ) -> Analysis:
        """
        Degraded analysis used when no provider produced a usable response

        Args:
            original_text: Document that was submitted
            error_type: ErrorCategory value describing the failure
            error_message: User-safe description of the failure
        """
        text = original_text or ""
        document_type = detect_document_type(text)
        return Analysis(
            summary=Summary(
                documentType=document_type,
                keyPurpose="Fallback analysis due to AI service error",
                mainParties=list(DEFAULT_PARTIES),
                totalClausesIdentified=1,
                completenessScore=60
            ),
            clauses=[Clause(
                id="clause_1",
                title="Document Content",
                content=text[:300],
                category=ClauseCategory.GENERAL.value,
                riskLevel=RiskLevel.MEDIUM.value,
                explanation="Automated clause analysis was unavailable; the opening of the document is shown",
                sourceLocation="Document body",
                keyTerms=["document", "agreement", "terms"]
            )],
            risks=[Risk(
                id="risk_1",
                title="Analysis Limitation Risk",
                description=f"Detailed analysis unavailable due to {error_type}: {error_message}",
                severity=RiskLevel.MEDIUM.value,
                category=RiskCategory.OPERATIONAL.value,
                recommendation="Have the document reviewed manually",
                clauseReference="clause_1",
                supportingText="Automated analysis could not be completed"
            )],
            keyTerms=[KeyTerm(
                term="Agreement",
                definition="Legal document requiring manual review",
                importance=Importance.HIGH.value,
                context="Throughout the document"
            )],
            recommendations=[Recommendation(
                priority=Priority.HIGH.value,
                action="Seek professional legal review due to automated analysis limitations",
                rationale="The automated analysis could not be completed",
                affectedClauses=["clause_1"]
            )],
            qualityMetrics=QualityMetrics(
                clauseDetectionConfidence=40,
                analysisCompleteness=60,
                potentialMissedClauses=["service_error_affected"]
            )
        )

    def create_parse_fallback_analysis(self, original_text: Optional[str], error_message: str) -> Analysis:
        """Degraded analysis for a response that could not be parsed at all"""
        text = original_text or ""
        return Analysis(
            summary=Summary(
                documentType=detect_document_type(text),
                keyPurpose="Document analysis and risk assessment",
                mainParties=list(DEFAULT_PARTIES),
                totalClausesIdentified=1,
                completenessScore=70
            ),
            clauses=[Clause(
                id="clause_1",
                title="Main Terms",
                content=text[:200],
                category=ClauseCategory.GENERAL.value,
                riskLevel=RiskLevel.MEDIUM.value,
                explanation="Primary terms and conditions of the agreement",
                sourceLocation="Document body",
                keyTerms=["terms", "conditions", "agreement"]
            )],
            risks=[Risk(
                id="risk_1",
                title="Parsing Error Risk",
                description=f"Analysis may be incomplete due to parsing error: {error_message}",
                severity=RiskLevel.MEDIUM.value,
                category=RiskCategory.OPERATIONAL.value,
                recommendation="Manual review recommended due to parsing limitations",
                clauseReference="clause_1",
                supportingText="Automated analysis encountered technical difficulties"
            )],
            keyTerms=[KeyTerm(
                term="Agreement",
                definition="The legal contract between the parties",
                importance=Importance.HIGH.value,
                context="Throughout the document"
            )],
            recommendations=[Recommendation(
                priority=Priority.HIGH.value,
                action="Manual review recommended due to parsing error",
                rationale="Automated analysis was incomplete",
                affectedClauses=["clause_1"]
            )],
            qualityMetrics=QualityMetrics(
                clauseDetectionConfidence=50,
                analysisCompleteness=70,
                potentialMissedClauses=["parsing_error_affected"]
            )
        )
