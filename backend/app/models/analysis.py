"""
Canonical analysis schema
Every analysis path (provider JSON, heuristic text extraction, synthetic fallback)
produces these shapes. JSON keys are camelCase; attributes are snake_case.
"""

from pydantic import BaseModel, Field, validator
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from enum import Enum


# =====================================================
# ENUMS
# =====================================================

class ClauseCategory(str, Enum):
    """Clause categories recognised by the analysis"""
    CONFIDENTIALITY = "confidentiality"
    PAYMENT = "payment"
    TERMINATION = "termination"
    LIABILITY = "liability"
    INTELLECTUAL_PROPERTY = "intellectual_property"
    WARRANTY = "warranty"
    GOVERNING_LAW = "governing_law"
    GENERAL = "general"


class RiskLevel(str, Enum):
    """Four-level scale shared by clause risk and risk severity"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskCategory(str, Enum):
    FINANCIAL = "financial"
    LEGAL = "legal"
    OPERATIONAL = "operational"


class Importance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


MAX_CLAUSE_KEY_TERMS = 5


class _CamelModel(BaseModel):
    class Config:
        populate_by_name = True
        use_enum_values = True


# =====================================================
# ANALYSIS PARTS
# =====================================================

class Summary(_CamelModel):
    document_type: str = Field(alias="documentType", min_length=1)
    key_purpose: str = Field(default="", alias="keyPurpose")
    main_parties: List[str] = Field(default_factory=list, alias="mainParties")
    effective_date: Optional[str] = Field(default=None, alias="effectiveDate")
    expiration_date: Optional[str] = Field(default=None, alias="expirationDate")
    total_clauses_identified: int = Field(default=0, ge=0, alias="totalClausesIdentified")
    completeness_score: float = Field(default=0, ge=0, le=100, alias="completenessScore")


class Clause(_CamelModel):
    id: str
    title: str
    content: str = ""
    category: ClauseCategory = ClauseCategory.GENERAL
    risk_level: RiskLevel = Field(default=RiskLevel.MEDIUM, alias="riskLevel")
    explanation: str = ""
    source_location: str = Field(default="", alias="sourceLocation")
    key_terms: List[str] = Field(default_factory=list, alias="keyTerms")

    @validator("key_terms")
    def limit_key_terms(cls, v):
        """Keep at most MAX_CLAUSE_KEY_TERMS terms per clause"""
        return v[:MAX_CLAUSE_KEY_TERMS]


class Risk(_CamelModel):
    id: str
    title: str
    description: str = ""
    severity: RiskLevel = RiskLevel.MEDIUM
    category: RiskCategory = RiskCategory.LEGAL
    recommendation: str = ""
    clause_reference: str = Field(default="general", alias="clauseReference")
    supporting_text: str = Field(default="", alias="supportingText")


class KeyTerm(_CamelModel):
    term: str
    definition: str = ""
    importance: Importance = Importance.MEDIUM
    context: str = ""


class Recommendation(_CamelModel):
    priority: Priority = Priority.MEDIUM
    action: str
    rationale: str = ""
    affected_clauses: List[str] = Field(default_factory=list, alias="affectedClauses")


class QualityMetrics(_CamelModel):
    clause_detection_confidence: float = Field(default=0, ge=0, le=100, alias="clauseDetectionConfidence")
    analysis_completeness: float = Field(default=0, ge=0, le=100, alias="analysisCompleteness")
    potential_missed_clauses: List[str] = Field(default_factory=list, alias="potentialMissedClauses")


class Analysis(_CamelModel):
    """
    Canonical analysis record

    The four list fields are always present and always lists; None coming
    from any parser is coerced to an empty list. Instances are frozen once
    built so the record handed to a caller cannot be mutated.
    """
    summary: Summary
    clauses: List[Clause] = Field(default_factory=list)
    risks: List[Risk] = Field(default_factory=list)
    key_terms: List[KeyTerm] = Field(default_factory=list, alias="keyTerms")
    recommendations: List[Recommendation] = Field(default_factory=list)
    quality_metrics: QualityMetrics = Field(default_factory=QualityMetrics, alias="qualityMetrics")

    @validator("clauses", "risks", "key_terms", "recommendations", pre=True)
    def none_to_empty_list(cls, v):
        return [] if v is None else v

    @validator("quality_metrics", pre=True)
    def none_to_default_metrics(cls, v):
        return {} if v is None else v

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase wire keys"""
        return self.model_dump(by_alias=True, mode="json")

    class Config:
        populate_by_name = True
        use_enum_values = True
        frozen = True


# =====================================================
# PROCESSING RESULT
# =====================================================

class ErrorDetails(_CamelModel):
    """Error information attached to degraded or failed results"""
    type: str = Field(description="ErrorCategory value, e.g. AUTHENTICATION_ERROR")
    message: str = Field(description="User-facing description of the failure")
    remediation: str = ""
    provider: Optional[str] = None
    fallback_used: bool = Field(default=False, alias="fallbackUsed")


class AnalysisResult(_CamelModel):
    """
    Uniform result of one analysis request

    The top-level shape is the same whichever path (primary, secondary,
    synthetic, failure) produced it.
    """
    success: bool
    analysis: Optional[Analysis] = None
    confidence: Optional[float] = Field(default=None, ge=0, le=100)
    using_primary: bool = Field(default=False, alias="usingPrimary")
    provider: Optional[str] = Field(default=None, description="primary | secondary | synthetic")
    model: Optional[str] = None
    parse_tier: Optional[str] = Field(default=None, alias="parseTier")
    attempts: int = Field(default=0, ge=0)
    error: Optional[str] = None
    error_details: Optional[ErrorDetails] = Field(default=None, alias="errorDetails")
    processing_time: float = Field(default=0.0, ge=0, alias="processingTime")
    processed_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        alias="processedAt"
    )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase wire keys, ready for a JSON response body"""
        return self.model_dump(by_alias=True, mode="json")
