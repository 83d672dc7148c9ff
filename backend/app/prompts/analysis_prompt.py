"""
Contract analysis prompt
Requests the canonical analysis object as JSON
"""

import json

ANALYSIS_RESPONSE_SHAPE = {
    "summary": {
        "documentType": "string",
        "keyPurpose": "string",
        "mainParties": ["string"],
        "effectiveDate": "YYYY-MM-DD or null",
        "expirationDate": "YYYY-MM-DD or null",
        "totalClausesIdentified": 0,
        "completenessScore": "0-100"
    },
    "clauses": [{
        "id": "clause_1",
        "title": "string",
        "content": "excerpt from the document",
        "category": "confidentiality|payment|termination|liability|intellectual_property|warranty|governing_law|general",
        "riskLevel": "low|medium|high|critical",
        "explanation": "string",
        "sourceLocation": "string",
        "keyTerms": ["up to 5 terms"]
    }],
    "risks": [{
        "id": "risk_1",
        "title": "string",
        "description": "string",
        "severity": "low|medium|high|critical",
        "category": "financial|legal|operational",
        "recommendation": "string",
        "clauseReference": "clause id or general",
        "supportingText": "string"
    }],
    "keyTerms": [{
        "term": "string",
        "definition": "string",
        "importance": "low|medium|high",
        "context": "string"
    }],
    "recommendations": [{
        "priority": "low|medium|high|critical",
        "action": "string",
        "rationale": "string",
        "affectedClauses": ["clause ids"]
    }],
    "qualityMetrics": {
        "clauseDetectionConfidence": "0-100",
        "analysisCompleteness": "0-100",
        "potentialMissedClauses": ["string"]
    }
}

TRUNCATION_NOTICE = "\n\n[Document truncated for analysis]"


def build_analysis_prompt(document_text: str, document_type: str = None, max_chars: int = 30000) -> str:
    """Build the analysis prompt, truncating very long documents"""
    text = document_text
    if len(text) > max_chars:
        text = text[:max_chars] + TRUNCATION_NOTICE

    type_hint = f"The document is believed to be a {document_type}.\n" if document_type else ""

    return f"""Analyze the following contract.
{type_hint}
Return ONLY a JSON object with exactly this structure:
{json.dumps(ANALYSIS_RESPONSE_SHAPE, indent=2)}

# DOCUMENT TO ANALYZE

```
{text}
```
"""
