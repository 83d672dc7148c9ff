"""
FastAPI backend for contract analysis
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .api.analysis_endpoints import router as analysis_router
from .config.settings import get_settings
from .core.logger import setup_logging, get_logger, add_log_context
from .core.state import WorkerState
from .core.telemetry import metrics_response

settings = get_settings()

# Configure logging FIRST
setup_logging(settings.log_level, settings.log_format)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build worker state on startup and release provider clients on shutdown"""
    worker_id = os.getpid()
    logger.info("Starting contract analysis API worker", extra=add_log_context(worker_pid=worker_id))

    worker_state = WorkerState(worker_id=worker_id)
    providers_ready = worker_state.initialize(settings)
    app.state.worker_state = worker_state

    if providers_ready:
        logger.info("Worker ready", extra=add_log_context(worker_pid=worker_id))
    else:
        logger.warning(
            "Worker starting in degraded mode - no inference provider configured",
            extra=add_log_context(
                worker_pid=worker_id,
                synthetic_fallback_enabled=settings.synthetic_fallback_enabled
            )
        )

    yield  # Application runs here

    logger.info("Worker statistics", extra=add_log_context(**worker_state.get_stats()))
    await worker_state.cleanup()
    logger.info("Worker shutdown complete", extra=add_log_context(worker_pid=worker_id))


app = FastAPI(
    title="Contract Analysis API",
    description="Contract clause, risk and recommendation analysis with provider failover",
    version="1.0.0",
    lifespan=lifespan
)

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:8000").split(",")
]

for origin in ALLOWED_ORIGINS:
    if origin == "*":
        logger.warning("WARNING: Using wildcard (*) for CORS origins with credentials is a security risk!")
        if settings.environment == "production":
            raise ValueError("CORS wildcard origin not allowed in production with credentials enabled")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.include_router(analysis_router)


@app.get("/")
async def root():
    return {
        "service": "Contract Analysis",
        "version": "1.0.0",
        "status": "operational"
    }


@app.get("/health")
async def health_check(request: Request):
    """
    Health check

    Returns 200 even in degraded mode; `status` reports whether any
    inference provider is configured.
    """
    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0",
        "worker_pid": os.getpid(),
        "checks": {
            "service_running": True
        }
    }

    worker_state = getattr(request.app.state, "worker_state", None)
    if worker_state is None or not worker_state.initialized:
        health_data["status"] = "degraded"
        health_data["checks"]["orchestrator"] = "not_initialized"
        health_data["message"] = "Service starting up - orchestrator not yet initialized"
        return health_data

    health_data["checks"]["orchestrator"] = "initialized"
    providers = worker_state.orchestrator.get_provider_status()
    health_data["checks"]["primary_provider"] = "configured" if providers["primary"]["configured"] else "not_configured"
    health_data["checks"]["secondary_provider"] = "configured" if providers["secondary"]["configured"] else "not_configured"

    if not (providers["primary"]["configured"] or providers["secondary"]["configured"]):
        health_data["status"] = "degraded"
        health_data["message"] = "No inference provider configured - only fallback analysis is available"

    health_data["worker_stats"] = worker_state.get_stats()
    return health_data


@app.get("/metrics")
async def metrics():
    """Prometheus metrics"""
    return metrics_response()
