"""
Contract analysis API endpoints
"""

import logging
from typing import Optional, Dict, Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from ..core.document_extractor import DocumentExtractionError, DocumentNotFoundError
from ..core.logger import add_log_context
from ..core.state import WorkerState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


class AnalyzeRequest(BaseModel):
    """Either documentText or storageKey must be supplied"""
    document_text: Optional[str] = Field(default=None, alias="documentText")
    storage_key: Optional[str] = Field(default=None, alias="storageKey")
    document_type: Optional[str] = Field(default=None, alias="documentType")

    class Config:
        populate_by_name = True


def get_worker_state(request: Request) -> WorkerState:
    """
    Access the worker state from app.state

    Raises:
        HTTPException: 503 if the worker has not been initialized
    """
    state = getattr(request.app.state, "worker_state", None)
    if state is None or not state.initialized or state.orchestrator is None:
        raise HTTPException(
            status_code=503,
            detail="Service not ready - orchestrator not initialized"
        )
    return state


@router.post("/analyze")
async def analyze_document(body: AnalyzeRequest, request: Request) -> Dict[str, Any]:
    """
    Analyze a contract supplied as text or as a storage key

    Returns:
        AnalysisResult JSON; the shape is the same for primary, secondary
        and synthetic results
    """
    state = get_worker_state(request)

    text = body.document_text
    extraction_confidence = None
    if not text and body.storage_key:
        try:
            extraction = await state.extractor.extract(body.storage_key)
        except DocumentNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except DocumentExtractionError as e:
            raise HTTPException(status_code=400, detail=str(e))
        text = extraction.text
        extraction_confidence = extraction.confidence

    if not text:
        raise HTTPException(status_code=400, detail="Provide documentText or storageKey")

    try:
        result = await state.orchestrator.process_document(text, body.document_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    state.increment_request_count()
    if not result.success:
        state.increment_error_count()
        logger.warning(
            "Analysis request failed",
            extra=add_log_context(error_type=result.error_details.type if result.error_details else None)
        )

    payload = result.to_dict()
    if extraction_confidence is not None:
        payload["extractionConfidence"] = extraction_confidence
    return payload


@router.get("/stats")
async def get_stats(request: Request) -> Dict[str, Any]:
    """Processing statistics for this worker"""
    state = get_worker_state(request)
    return {
        "processing": state.orchestrator.get_stats(),
        "worker": state.get_stats()
    }


@router.post("/stats/reset")
async def reset_stats(request: Request) -> Dict[str, Any]:
    state = get_worker_state(request)
    state.orchestrator.reset_stats()
    return {"status": "reset"}


@router.get("/providers/status")
async def providers_status(request: Request) -> Dict[str, Any]:
    """Configuration and circuit breaker state per provider"""
    state = get_worker_state(request)
    return state.orchestrator.get_provider_status()
