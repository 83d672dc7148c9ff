"""
Pytest configuration and shared fixtures for contract analysis tests
"""
import os
import sys
import json
import pytest
from pathlib import Path
from typing import Any, List

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment variables; empty keys keep the app off the network
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_FORMAT"] = "text"
os.environ["ENVIRONMENT"] = "test"
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""

from backend.app.config.settings import Settings  # noqa: E402
from backend.app.core.response_normalizer import ResponseNormalizer  # noqa: E402
from backend.app.orchestrators.processing_orchestrator import ProcessingOrchestrator  # noqa: E402
from backend.app.providers.base import InferenceProvider  # noqa: E402


# ============================================================================
# Scripted providers
# ============================================================================

class ScriptedProvider(InferenceProvider):
    """
    Provider that replays a list of outcomes, one per call

    Each outcome is either raw response text or an exception to raise. The
    last outcome repeats once the list is exhausted.
    """

    def __init__(self, name: str, outcomes: List[Any], model: str = "scripted-model"):
        super().__init__(model=model, max_tokens=1000, timeout=5.0)
        self.name = name
        self.outcomes = list(outcomes)
        self.calls = 0
        self.prompts: List[str] = []
        self.closed = False

    async def infer(self, prompt: str) -> Any:
        self.calls += 1
        self.prompts.append(prompt)
        outcome = self.outcomes[min(self.calls, len(self.outcomes)) - 1]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def extract_text(self, envelope: Any) -> str:
        return envelope

    async def close(self) -> None:
        self.closed = True


class ManualClock:
    """Monotonic clock advanced by hand"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def make_provider():
    def _make(outcomes, name="scripted", model="scripted-model"):
        return ScriptedProvider(name, outcomes, model=model)
    return _make


@pytest.fixture
def manual_clock():
    return ManualClock()


# ============================================================================
# Settings and orchestrator
# ============================================================================

@pytest.fixture
def settings(tmp_path):
    """Settings built explicitly so the process environment cannot leak in"""
    return Settings(
        _env_file=None,
        anthropic_api_key=None,
        openai_api_key=None,
        primary_max_attempts=3,
        primary_base_delay=1.0,
        primary_max_delay=32.0,
        secondary_max_attempts=3,
        secondary_base_delay=1.0,
        secondary_max_delay=10.0,
        circuit_breaker_threshold=5,
        circuit_breaker_timeout=60.0,
        fallback_enabled=True,
        synthetic_fallback_enabled=True,
        storage_dir=str(tmp_path / "uploads"),
        environment="test"
    )


@pytest.fixture
def normalizer():
    return ResponseNormalizer()


@pytest.fixture
def make_orchestrator(settings, manual_clock):
    def _make(primary=None, secondary=None, sleep=no_sleep, **overrides):
        effective = settings.model_copy(update=overrides) if overrides else settings
        return ProcessingOrchestrator(
            settings=effective,
            primary=primary,
            secondary=secondary,
            sleep=sleep,
            clock=manual_clock
        )
    return _make


# ============================================================================
# API client
# ============================================================================

@pytest.fixture
def make_client(settings):
    """
    TestClient whose worker state is rebuilt around the given providers

    The app lifespan still runs; its worker state is swapped for one that
    uses the test settings and scripted providers.
    """
    from fastapi.testclient import TestClient
    from backend.app.main import app
    from backend.app.core.state import WorkerState

    clients = []

    def _make(primary=None, secondary=None, initialized=True, **overrides):
        effective = settings.model_copy(update=overrides) if overrides else settings
        client = TestClient(app)
        client.__enter__()
        clients.append(client)

        state = WorkerState()
        if initialized:
            state.initialize(effective, primary=primary, secondary=secondary)
        app.state.worker_state = state
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def test_client(make_client):
    """Client with no provider configured"""
    return make_client()


# ============================================================================
# Test Document Fixtures
# ============================================================================

@pytest.fixture
def sample_nda_text():
    """Sample NDA text for testing"""
    return """
NON-DISCLOSURE AGREEMENT

This Agreement is entered into as of January 1, 2024.

1. CONFIDENTIAL INFORMATION
The Receiving Party agrees to hold in confidence all Confidential Information
for a period of two (2) years from the date of disclosure.

2. TERM
This Agreement shall remain in effect for a period of three (3) years.

3. GOVERNING LAW
This Agreement shall be governed by the laws of the State of California.
"""


@pytest.fixture
def sample_analysis_payload():
    """Well-formed analysis object as a provider would return it"""
    return {
        "summary": {
            "documentType": "Non-Disclosure Agreement",
            "keyPurpose": "Protect confidential information",
            "mainParties": ["Acme Corp", "Beta LLC"],
            "effectiveDate": "2024-01-01",
            "expirationDate": None,
            "totalClausesIdentified": 3,
            "completenessScore": 90
        },
        "clauses": [
            {
                "id": "clause_1",
                "title": "Confidentiality Term",
                "content": "two (2) years from the date of disclosure",
                "category": "confidentiality",
                "riskLevel": "medium",
                "explanation": "Fixed two year term",
                "sourceLocation": "Section 1",
                "keyTerms": ["confidential", "two years"]
            },
            {
                "id": "clause_2",
                "title": "Term",
                "content": "three (3) years",
                "category": "termination",
                "riskLevel": "low",
                "explanation": "Agreement duration",
                "sourceLocation": "Section 2",
                "keyTerms": ["term"]
            },
            {
                "id": "clause_3",
                "title": "Governing Law",
                "content": "State of California",
                "category": "governing_law",
                "riskLevel": "low",
                "explanation": "California law applies",
                "sourceLocation": "Section 3",
                "keyTerms": ["california"]
            }
        ],
        "risks": [
            {
                "id": "risk_1",
                "title": "Short protection period",
                "description": "Information loses protection after two years",
                "severity": "high",
                "category": "legal",
                "recommendation": "Extend the term",
                "clauseReference": "clause_1",
                "supportingText": "two (2) years"
            },
            {
                "id": "risk_2",
                "title": "Venue cost",
                "description": "Litigation in California may be costly",
                "severity": "low",
                "category": "financial",
                "recommendation": "Negotiate venue",
                "clauseReference": "clause_3",
                "supportingText": "State of California"
            }
        ],
        "keyTerms": [
            {"term": "Confidential Information", "definition": "Non-public information", "importance": "high", "context": "Section 1"},
            {"term": "Receiving Party", "definition": "Party receiving information", "importance": "medium", "context": "Section 1"}
        ],
        "recommendations": [
            {"priority": "high", "action": "Extend confidentiality term", "rationale": "Longer protection", "affectedClauses": ["clause_1"]},
            {"priority": "low", "action": "Review venue", "rationale": "Cost control", "affectedClauses": ["clause_3"]}
        ],
        "qualityMetrics": {
            "clauseDetectionConfidence": 88,
            "analysisCompleteness": 92,
            "potentialMissedClauses": []
        }
    }


@pytest.fixture
def sample_analysis_json(sample_analysis_payload):
    return json.dumps(sample_analysis_payload)


@pytest.fixture
def sample_docx_file(tmp_path):
    """Create a temporary .docx file for testing"""
    from docx import Document

    doc_path = tmp_path / "uploads" / "test_nda.docx"
    doc_path.parent.mkdir(parents=True, exist_ok=True)
    doc = Document()
    doc.add_paragraph("NON-DISCLOSURE AGREEMENT")
    doc.add_paragraph("This Agreement is entered into as of January 1, 2024.")
    doc.add_paragraph("Confidential Information shall be held for two (2) years.")
    doc.save(doc_path)

    return doc_path


# ============================================================================
# Markers Configuration
# ============================================================================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "fast: Fast running tests")
    config.addinivalue_line("markers", "requires_api_keys: Tests requiring real API keys")
