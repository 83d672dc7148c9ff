"""
Worker state management
Builds the providers, orchestrator and extractor once per worker process
"""

import os
import logging
from typing import Optional
from dataclasses import dataclass
from datetime import datetime, timezone

from ..config.settings import Settings
from ..orchestrators.processing_orchestrator import ProcessingOrchestrator
from ..providers import AnthropicProvider, OpenAIProvider, InferenceProvider
from .document_extractor import DocumentExtractor
from .logger import add_log_context
from .response_normalizer import ResponseNormalizer

logger = logging.getLogger(__name__)


@dataclass
class WorkerState:
    """
    Per-worker application state

    Created by the application lifespan and stored on app.state; tests
    build their own instances.
    """

    worker_id: Optional[int] = None
    orchestrator: Optional[ProcessingOrchestrator] = None
    extractor: Optional[DocumentExtractor] = None
    initialized: bool = False
    initialization_time: Optional[datetime] = None
    request_count: int = 0
    error_count: int = 0

    def __post_init__(self):
        if self.worker_id is None:
            self.worker_id = os.getpid()

    def _build_primary(self, settings: Settings) -> Optional[InferenceProvider]:
        if not settings.primary_configured:
            logger.warning(
                "ANTHROPIC_API_KEY not configured, primary provider disabled",
                extra=add_log_context(worker_pid=self.worker_id)
            )
            return None
        try:
            return AnthropicProvider(
                api_key=settings.anthropic_api_key,
                model=settings.anthropic_model,
                max_tokens=settings.anthropic_max_tokens,
                timeout=settings.provider_timeout
            )
        except ValueError as e:
            logger.error(
                f"Primary provider rejected: {e}",
                extra=add_log_context(worker_pid=self.worker_id)
            )
            return None

    def _build_secondary(self, settings: Settings) -> Optional[InferenceProvider]:
        if not settings.secondary_configured:
            logger.info(
                "OPENAI_API_KEY not configured, secondary provider disabled",
                extra=add_log_context(worker_pid=self.worker_id)
            )
            return None
        try:
            return OpenAIProvider(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                max_tokens=settings.openai_max_tokens,
                timeout=settings.provider_timeout
            )
        except ValueError as e:
            logger.error(
                f"Secondary provider rejected: {e}",
                extra=add_log_context(worker_pid=self.worker_id)
            )
            return None

    def initialize(
        self,
        settings: Settings,
        primary: Optional[InferenceProvider] = None,
        secondary: Optional[InferenceProvider] = None
    ) -> bool:
        """
        Build worker resources

        The orchestrator is always created; with no provider configured it
        serves the synthetic fallback (or failures when that is disabled).

        Args:
            settings: Application settings
            primary: Provider override (tests); built from settings when None
            secondary: Provider override (tests); built from settings when None

        Returns:
            True when at least one provider is available
        """
        if self.initialized:
            logger.info(
                f"Worker {self.worker_id} already initialized, skipping",
                extra=add_log_context(worker_pid=self.worker_id)
            )
            return self._has_provider()

        primary = primary if primary is not None else self._build_primary(settings)
        secondary = secondary if secondary is not None else self._build_secondary(settings)

        self.orchestrator = ProcessingOrchestrator(
            settings=settings,
            normalizer=ResponseNormalizer(),
            primary=primary,
            secondary=secondary
        )
        self.extractor = DocumentExtractor(settings.storage_dir)
        self.initialized = True
        self.initialization_time = datetime.now(timezone.utc)

        logger.info(
            f"Worker {self.worker_id} initialized",
            extra=add_log_context(
                worker_pid=self.worker_id,
                primary=primary.name if primary else None,
                secondary=secondary.name if secondary else None
            )
        )
        return self._has_provider()

    def _has_provider(self) -> bool:
        if self.orchestrator is None:
            return False
        return self.orchestrator.primary is not None or self.orchestrator.secondary is not None

    async def cleanup(self) -> None:
        """Close provider HTTP clients on shutdown"""
        if not self.initialized:
            return

        logger.info(
            f"Cleaning up worker {self.worker_id}",
            extra=add_log_context(
                worker_pid=self.worker_id,
                requests_processed=self.request_count,
                errors_encountered=self.error_count
            )
        )
        if self.orchestrator is not None:
            try:
                await self.orchestrator.close()
            except Exception as e:
                logger.warning(
                    f"Worker {self.worker_id}: Error closing provider clients - {e}",
                    extra=add_log_context(worker_pid=self.worker_id)
                )

        self.orchestrator = None
        self.extractor = None
        self.initialized = False

    def increment_request_count(self) -> None:
        self.request_count += 1

    def increment_error_count(self) -> None:
        self.error_count += 1

    def get_stats(self) -> dict:
        uptime = None
        if self.initialization_time:
            uptime = (datetime.now(timezone.utc) - self.initialization_time).total_seconds()

        return {
            "worker_id": self.worker_id,
            "initialized": self.initialized,
            "initialization_time": self.initialization_time.isoformat() if self.initialization_time else None,
            "uptime_seconds": uptime,
            "requests_processed": self.request_count,
            "errors_encountered": self.error_count,
            "providers_available": self._has_provider()
        }
