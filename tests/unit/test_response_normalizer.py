"""
Tests for the three-tier response normalizer
"""
import json
import pytest

from backend.app.core.response_normalizer import (
    TIER_HEURISTIC,
    TIER_STRICT,
    TIER_SYNTHETIC,
    ResponseNormalizer,
    calculate_confidence,
    clean_response_text,
    decode_object,
    repair_truncated_json,
)
from backend.app.models.analysis import Analysis, Summary


ARRAY_KEYS = ("clauses", "risks", "keyTerms", "recommendations")
TOP_LEVEL_KEYS = ("summary",) + ARRAY_KEYS + ("qualityMetrics",)


def assert_valid_analysis(analysis):
    data = analysis.to_dict()
    for key in TOP_LEVEL_KEYS:
        assert key in data
    for key in ARRAY_KEYS:
        assert isinstance(data[key], list)
    assert data["summary"]["documentType"]
    return data


MINIMAL = (
    '{"summary":{"documentType":"NDA"},"clauses":[],"risks":[],'
    '"keyTerms":[],"recommendations":[],"qualityMetrics":{}}'
)

HEURISTIC_RESPONSE = """DOCUMENT TYPE: Service Agreement
MAIN PARTIES: Acme Corp, Beta LLC

KEY CLAUSES IDENTIFIED:
1. Payment: Net 30 days with a late fee
2. Limitation of Liability: Severe exposure, capped at fees paid
3. Confidentiality: Minor restrictions on disclosure

RISKS IDENTIFIED:
1. Financial Exposure: High cost if payments are late
2. Compliance Gap: Missing data protection terms

KEY TERMS:
- Net 30: Payment due thirty days after invoice
* Fees: Amounts payable under the agreement

RECOMMENDATIONS:
1. High priority: Negotiate a liability cap
2. Consider: Add a data protection addendum
- Review renewal terms

OVERALL ASSESSMENT: Acceptable with changes
"""


@pytest.mark.unit
@pytest.mark.fast
class TestCleaning:

    def test_strips_fences_and_prose(self):
        raw = "Here is the analysis:\n```json\n{\"a\": 1}\n```\nLet me know!"
        assert clean_response_text(raw) == '{"a": 1}'

    def test_keeps_text_without_braces(self):
        assert clean_response_text("  no json here ") == "no json here"

    def test_unterminated_object_kept_to_end(self):
        assert clean_response_text('prefix {"a": [1, 2') == '{"a": [1, 2'


@pytest.mark.unit
@pytest.mark.fast
class TestTruncationRepair:

    def test_appends_missing_braces(self):
        assert repair_truncated_json('{"summary": {"documentType": "NDA"') == {
            "summary": {"documentType": "NDA"}
        }

    def test_closes_arrays_and_strings(self):
        repaired = repair_truncated_json('{"clauses": [{"id": "clause_1", "title": "Pay')
        assert repaired == {"clauses": [{"id": "clause_1", "title": "Pay"}]}

    def test_trims_dangling_key(self):
        repaired = repair_truncated_json('{"a": 1, "b": [1, 2], "recommend')
        assert repaired == {"a": 1, "b": [1, 2]}

    def test_trims_trailing_comma(self):
        assert repair_truncated_json('{"a": [1, 2,') == {"a": [1, 2]}

    def test_non_object_returns_none(self):
        assert repair_truncated_json("[1, 2") is None

    def test_decode_object_repairs_truncated_payload(self):
        raw = '```json\n{"summary": {"documentType": "NDA"}, "clauses": [{"id": "clause_1", "title": "Payment"}'
        decoded = decode_object(raw)
        assert decoded["summary"]["documentType"] == "NDA"
        assert decoded["clauses"][0]["title"] == "Payment"


@pytest.mark.unit
@pytest.mark.fast
class TestStrictTier:

    def test_minimal_payload(self, normalizer):
        """Scenario A: minimal well-formed object decodes strictly"""
        result = normalizer.parse(MINIMAL, "some document")

        assert result.tier == TIER_STRICT
        data = assert_valid_analysis(result.analysis)
        assert data["summary"]["documentType"] == "NDA"
        for key in ARRAY_KEYS:
            assert data[key] == []

    def test_full_payload_round_trip(self, normalizer, sample_analysis_json, sample_analysis_payload):
        analysis = normalizer.normalize(sample_analysis_json, "doc")
        data = analysis.to_dict()

        assert data["clauses"][0]["category"] == "confidentiality"
        assert data["risks"][0]["clauseReference"] == "clause_1"
        assert data["summary"]["mainParties"] == ["Acme Corp", "Beta LLC"]
        assert data["summary"]["totalClausesIdentified"] == 3
        assert len(data["keyTerms"]) == len(sample_analysis_payload["keyTerms"])

    @pytest.mark.parametrize("wrapper", [
        "```json\n{}\n```",
        "```\n{}\n```",
        "Sure! Here is the JSON:\n{}\nHope this helps.",
    ])
    def test_wrapped_payloads(self, normalizer, wrapper):
        raw = wrapper.replace("{}", MINIMAL)
        result = normalizer.parse(raw, "doc")
        assert result.tier == TIER_STRICT
        assert result.analysis.summary.document_type == "NDA"

    def test_missing_array_keys_are_synthesized(self, normalizer):
        result = normalizer.parse('{"summary": {"documentType": "Lease Agreement"}}', "doc")

        assert result.tier == TIER_STRICT
        data = assert_valid_analysis(result.analysis)
        assert data["qualityMetrics"]["potentialMissedClauses"] == []

    def test_null_arrays_become_empty(self, normalizer):
        raw = json.dumps({"summary": {"documentType": "NDA"}, "clauses": None, "risks": "none"})
        data = assert_valid_analysis(normalizer.normalize(raw, "doc"))
        assert data["clauses"] == []
        assert data["risks"] == []

    def test_missing_document_type_falls_through(self, normalizer):
        raw = json.dumps({"summary": {"keyPurpose": "x"}, "clauses": []})
        result = normalizer.parse(raw, "Consulting services agreement")
        assert result.tier == TIER_HEURISTIC
        assert result.analysis.summary.document_type == "Service Agreement"

    def test_truncated_payload_is_repaired(self, normalizer, sample_analysis_json):
        truncated = sample_analysis_json[:sample_analysis_json.rindex('"keyTerms"') + 20]
        result = normalizer.parse(truncated, "doc")

        assert result.tier == TIER_STRICT
        assert len(result.analysis.clauses) == 3
        assert len(result.analysis.risks) == 2

    def test_invalid_enum_values_are_coerced_by_keywords(self, normalizer):
        raw = json.dumps({
            "summary": {"documentType": "NDA"},
            "clauses": [{"title": "Payment Terms", "content": "Severe penalties", "category": "Money", "riskLevel": "extreme"}],
            "risks": [{"title": "Financial loss", "description": "critical gap", "severity": "??", "clauseReference": "clause_9"}],
            "recommendations": [{"action": "Escalate: critical", "priority": "urgent"}],
            "keyTerms": [{"term": "Fee", "importance": "vital"}, {"definition": "no term"}]
        })
        data = normalizer.normalize(raw, "doc").to_dict()

        clause = data["clauses"][0]
        assert clause["id"] == "clause_1"
        assert clause["category"] == "payment"
        assert clause["riskLevel"] == "critical"
        assert data["risks"][0]["severity"] == "critical"
        assert data["risks"][0]["category"] == "financial"
        assert data["risks"][0]["clauseReference"] == "general"
        assert data["recommendations"][0]["priority"] == "critical"
        assert data["keyTerms"] == [{"term": "Fee", "definition": "", "importance": "medium", "context": ""}]

    def test_duplicate_clause_ids_are_made_unique(self, normalizer):
        raw = json.dumps({
            "summary": {"documentType": "NDA"},
            "clauses": [{"id": "c", "title": "A"}, {"id": "c", "title": "B"}, {"title": "C"}]
        })
        ids = [c.id for c in normalizer.normalize(raw, "doc").clauses]
        assert len(ids) == len(set(ids)) == 3

    def test_clause_key_terms_capped(self, normalizer):
        raw = json.dumps({
            "summary": {"documentType": "NDA"},
            "clauses": [{"title": "A", "keyTerms": ["a", "b", "c", "d", "e", "f", "g"]}]
        })
        assert len(normalizer.normalize(raw, "doc").clauses[0].key_terms) == 5

    def test_provider_total_clauses_kept_when_int(self, normalizer):
        raw = json.dumps({"summary": {"documentType": "NDA", "totalClausesIdentified": 12}, "clauses": []})
        assert normalizer.normalize(raw, "doc").summary.total_clauses_identified == 12

    def test_provider_total_clauses_replaced_when_not_int(self, normalizer):
        raw = json.dumps({
            "summary": {"documentType": "NDA", "totalClausesIdentified": "many"},
            "clauses": [{"title": "A"}, {"title": "B"}]
        })
        assert normalizer.normalize(raw, "doc").summary.total_clauses_identified == 2

    def test_provider_confidence_is_honored_and_clamped(self, normalizer):
        raw = json.dumps({"summary": {"documentType": "NDA"}, "confidence": 150})
        assert normalizer.parse(raw, "doc").confidence == 100.0

        raw = json.dumps({"summary": {"documentType": "NDA"}, "confidence": 42})
        assert normalizer.parse(raw, "doc").confidence == 42.0

    def test_scores_are_clamped(self, normalizer):
        raw = json.dumps({
            "summary": {"documentType": "NDA", "completenessScore": 250},
            "qualityMetrics": {"clauseDetectionConfidence": -5, "analysisCompleteness": "high"}
        })
        analysis = normalizer.normalize(raw, "doc")
        assert analysis.summary.completeness_score == 100
        assert analysis.quality_metrics.clause_detection_confidence == 0
        assert analysis.quality_metrics.analysis_completeness == 0


@pytest.mark.unit
@pytest.mark.fast
class TestHeuristicTier:

    def test_scenario_b_single_payment_clause(self, normalizer):
        raw = "DOCUMENT TYPE: Service Agreement\nKEY CLAUSES IDENTIFIED:\n1. Payment: Net 30 days"
        result = normalizer.parse(raw, "original")

        assert result.tier == TIER_HEURISTIC
        analysis = result.analysis
        assert analysis.summary.document_type == "Service Agreement"
        assert len(analysis.clauses) == 1
        assert analysis.clauses[0].category == "payment"
        assert analysis.clauses[0].title == "Payment"
        assert analysis.clauses[0].content == "Net 30 days"
        assert analysis.summary.total_clauses_identified == 1

    def test_full_sectioned_response(self, normalizer):
        analysis = normalizer.normalize(HEURISTIC_RESPONSE, "original")
        data = assert_valid_analysis(analysis)

        assert data["summary"]["mainParties"] == ["Acme Corp", "Beta LLC"]
        assert [c["id"] for c in data["clauses"]] == ["clause_1", "clause_2", "clause_3"]
        assert [c["category"] for c in data["clauses"]] == ["payment", "liability", "confidentiality"]
        assert [c["riskLevel"] for c in data["clauses"]] == ["medium", "critical", "low"]
        assert data["clauses"][1]["sourceLocation"] == "Section 2"
        assert data["summary"]["totalClausesIdentified"] == len(data["clauses"])

        assert len(data["risks"]) == 2
        assert data["risks"][0]["severity"] == "high"
        assert data["risks"][0]["category"] == "financial"
        assert data["risks"][0]["clauseReference"] == "clause_1"
        assert data["risks"][0]["recommendation"] == "Address financial exposure through appropriate measures"
        assert data["risks"][1]["category"] == "legal"

        assert [t["term"] for t in data["keyTerms"]] == ["Net 30", "Fees"]

        recs = data["recommendations"]
        assert [r["priority"] for r in recs] == ["high", "medium", "medium"]
        assert recs[0]["action"] == "Negotiate a liability cap"
        assert recs[2]["action"] == "Review renewal terms"
        assert recs[0]["affectedClauses"] == ["clause_1", "clause_2"]

    def test_document_type_falls_back_to_detector(self, normalizer):
        raw = "KEY CLAUSES IDENTIFIED:\n1. Rent: Due monthly"
        analysis = normalizer.normalize(raw, "This lease agreement")
        assert analysis.summary.document_type == "Lease Agreement"

    def test_default_parties(self, normalizer):
        analysis = normalizer.normalize("KEY CLAUSES IDENTIFIED:\n1. Term: One year", "doc")
        assert analysis.summary.main_parties == ["Party A", "Party B"]

    def test_prose_without_headers_still_yields_a_clause(self, normalizer):
        original = "This Employment Agreement sets out salary and duties."
        result = normalizer.parse("The contract looks standard overall.", original)

        assert result.tier == TIER_HEURISTIC
        data = assert_valid_analysis(result.analysis)
        assert len(data["clauses"]) == 1
        assert data["clauses"][0]["title"] == "Employment Agreement"
        assert data["clauses"][0]["content"] == original
        assert data["summary"]["totalClausesIdentified"] == 1

    def test_dash_list_lines(self, normalizer):
        raw = "KEY CLAUSES IDENTIFIED:\n- Warranty: Limited to 90 days\n- Governing Law: Delaware"
        clauses = normalizer.normalize(raw, "doc").clauses
        assert [c.category for c in clauses] == ["warranty", "governing_law"]
        assert clauses[0].title == "Warranty"


@pytest.mark.unit
@pytest.mark.fast
class TestSyntheticTier:

    @pytest.mark.parametrize("raw", ["", "   \n ", None])
    def test_empty_response_uses_synthetic(self, normalizer, raw):
        result = normalizer.parse(raw, "Non-disclosure of secrets")

        assert result.tier == TIER_SYNTHETIC
        data = assert_valid_analysis(result.analysis)
        assert data["summary"]["documentType"] == "Non-Disclosure Agreement"
        assert data["clauses"][0]["title"] == "Main Terms"
        assert data["qualityMetrics"]["potentialMissedClauses"] == ["parsing_error_affected"]
        assert result.confidence == 50.0

    def test_fallback_analysis_shape(self, normalizer):
        original = "x" * 500
        analysis = normalizer.create_fallback_analysis(original, "AUTHENTICATION_ERROR", "Authentication failed.")
        data = assert_valid_analysis(analysis)

        assert len(data["clauses"]) == 1
        assert data["clauses"][0]["content"] == "x" * 300
        assert data["risks"][0]["title"] == "Analysis Limitation Risk"
        assert "AUTHENTICATION_ERROR" in data["risks"][0]["description"]
        assert data["keyTerms"][0]["term"] == "Agreement"
        assert data["recommendations"][0]["priority"] == "high"
        assert 40 <= data["qualityMetrics"]["clauseDetectionConfidence"] <= 60
        assert data["summary"]["totalClausesIdentified"] == 1

    def test_fallback_with_empty_document(self, normalizer):
        data = assert_valid_analysis(normalizer.create_fallback_analysis("", "GENERIC_ERROR", "boom"))
        assert data["summary"]["documentType"] == "Legal Agreement"
        assert data["clauses"][0]["content"] == ""

    def test_unexpected_error_never_escapes(self, normalizer, monkeypatch):
        def explode(*_args, **_kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(normalizer, "_parse_strict", explode)
        result = normalizer.parse(MINIMAL, "doc")
        assert result.tier == TIER_SYNTHETIC

    @pytest.mark.parametrize("raw", ["{", "}{", "{{{{", "```", "[]", '{"summary": []}', "\x00\x01"])
    def test_garbage_always_yields_valid_analysis(self, normalizer, raw):
        assert_valid_analysis(normalizer.normalize(raw, "doc"))


@pytest.mark.unit
@pytest.mark.fast
class TestConfidence:

    def build(self, clauses=0, risks=0, recommendations=0, key_terms=0):
        return Analysis(
            summary=Summary(documentType="NDA"),
            clauses=[{"id": f"clause_{i}", "title": "t"} for i in range(clauses)],
            risks=[{"id": f"risk_{i}", "title": "r"} for i in range(risks)],
            recommendations=[{"action": "a"} for _ in range(recommendations)],
            keyTerms=[{"term": "k"} for _ in range(key_terms)]
        )

    def test_document_type_only(self):
        assert calculate_confidence(self.build()) == 20

    def test_all_components(self):
        assert calculate_confidence(self.build(3, 2, 2, 2)) == 100

    def test_partial(self):
        assert calculate_confidence(self.build(clauses=3, key_terms=2)) == 60
        assert calculate_confidence(self.build(clauses=2, risks=1)) == 20
