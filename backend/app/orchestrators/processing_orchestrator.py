"""
Processing orchestrator for contract analysis

Runs the primary provider through retry and its circuit breaker, fails over
to the secondary provider, and as a last resort returns the synthetic
analysis. Every path returns the same AnalysisResult shape.
"""

import asyncio
import threading
import time
import uuid
from dataclasses import dataclass, asdict
from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog

from ..config.settings import Settings
from ..core.circuit_breaker import CircuitBreaker, CircuitOpenError
from ..core.error_classifier import ClassifiedError, ProviderError, classify, describe_error
from ..core.response_normalizer import ResponseNormalizer, TIER_SYNTHETIC
from ..core.retry import RetryPolicy, with_retry
from ..core.telemetry import analysis_duration, analysis_requests, provider_attempts, provider_errors
from ..models.analysis import AnalysisResult, ErrorDetails
from ..prompts.analysis_prompt import build_analysis_prompt
from ..providers.base import InferenceProvider

logger = structlog.get_logger(__name__)

PRIMARY = "primary"
SECONDARY = "secondary"
SYNTHETIC = "synthetic"

SYNTHETIC_CONFIDENCE = 60.0
SYNTHETIC_MODEL = "fallback-analysis"


@dataclass
class ProcessingStats:
    total_requests: int = 0
    primary_requests: int = 0
    secondary_requests: int = 0
    fallback_requests: int = 0
    failures: int = 0
    total_attempts: int = 0


@dataclass
class _ProviderRoute:
    role: str
    provider: InferenceProvider
    breaker: CircuitBreaker
    policy: RetryPolicy


@dataclass
class _Failure:
    role: str
    provider_name: Optional[str]
    error: BaseException
    classified: ClassifiedError


def validate_input(document_text: Any, max_chars: int = 200000) -> str:
    """
    Reject empty or oversize documents

    Raises:
        ValueError: If the text is not a non-empty string within max_chars
    """
    if not isinstance(document_text, str) or not document_text.strip():
        raise ValueError("Document text is required and must be a non-empty string")
    if len(document_text) > max_chars:
        raise ValueError(
            f"Document too large: {len(document_text)} characters (maximum {max_chars})"
        )
    return document_text


class ProcessingOrchestrator:
    """
    Chooses a provider, normalizes its output and tracks processing statistics

    One instance is created at application startup and shared by all
    requests; statistics and circuit breakers live on the instance.

    Args:
        settings: Retry, breaker, fallback and limit configuration
        normalizer: Response normalizer shared by both providers
        primary: Primary provider, or None when not configured
        secondary: Secondary provider, or None when not configured
        sleep: Backoff sleep, injectable for tests
        clock: Monotonic clock for deadlines and breakers
    """

    def __init__(
        self,
        settings: Settings,
        normalizer: Optional[ResponseNormalizer] = None,
        primary: Optional[InferenceProvider] = None,
        secondary: Optional[InferenceProvider] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        self.settings = settings
        self.normalizer = normalizer or ResponseNormalizer()
        self._sleep = sleep
        self._clock = clock

        self.primary = self._route(
            PRIMARY, primary,
            RetryPolicy(
                max_attempts=settings.primary_max_attempts,
                base_delay=settings.primary_base_delay,
                max_delay=settings.primary_max_delay
            )
        )
        self.secondary = self._route(
            SECONDARY, secondary,
            RetryPolicy(
                max_attempts=settings.secondary_max_attempts,
                base_delay=settings.secondary_base_delay,
                max_delay=settings.secondary_max_delay
            )
        )

        self._stats = ProcessingStats()
        self._stats_lock = threading.Lock()

        logger.info(
            "Initialized processing orchestrator",
            primary=primary.name if primary else None,
            secondary=secondary.name if secondary else None,
            fallback_enabled=settings.fallback_enabled,
            synthetic_fallback_enabled=settings.synthetic_fallback_enabled
        )

    def _route(self, role: str, provider: Optional[InferenceProvider], policy: RetryPolicy) -> Optional[_ProviderRoute]:
        if provider is None:
            return None
        breaker = CircuitBreaker(
            name=provider.name,
            threshold=self.settings.circuit_breaker_threshold,
            timeout=self.settings.circuit_breaker_timeout,
            clock=self._clock
        )
        return _ProviderRoute(role=role, provider=provider, breaker=breaker, policy=policy)

    def _count(self, **increments: int) -> None:
        with self._stats_lock:
            for field_name, amount in increments.items():
                setattr(self._stats, field_name, getattr(self._stats, field_name) + amount)

    # =====================================================
    # PROCESSING
    # =====================================================

    async def process_document(self, document_text: str, document_type: Optional[str] = None) -> AnalysisResult:
        """
        Analyze one document

        Args:
            document_text: Plain text of the contract
            document_type: Optional caller hint passed to the prompt

        Returns:
            AnalysisResult from the primary, secondary or synthetic path, or a
            failure result when no path is allowed

        Raises:
            ValueError: If the document text is empty or too large
        """
        validate_input(document_text, self.settings.max_document_chars)

        request_id = str(uuid.uuid4())
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            document_length=len(document_text)
        )
        start_time = time.perf_counter()
        self._count(total_requests=1)

        try:
            result = await self._run(document_text, document_type, start_time)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "document_length")

        analysis_duration.observe(result.processing_time)
        return result

    async def _run(self, document_text: str, document_type: Optional[str], start_time: float) -> AnalysisResult:
        deadline = self._clock() + self.settings.request_deadline
        prompt = build_analysis_prompt(document_text, document_type, self.settings.prompt_max_chars)
        attempts = [0]

        failure: Optional[_Failure] = None
        for route in (self.primary, self.secondary):
            if route is None:
                continue
            # A lone secondary serves directly; behind a primary it is a fallback
            if route.role == SECONDARY and self.primary is not None:
                if not self.settings.fallback_enabled:
                    break
                if failure is not None and not failure.classified.fallback_eligible:
                    break

            try:
                raw = await self._call_provider(route, prompt, deadline, attempts)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                failure = _Failure(route.role, route.provider.name, e, describe_error(e))
                logger.warning(
                    "Provider failed",
                    role=route.role,
                    provider=route.provider.name,
                    category=failure.classified.category.value,
                    attempts=attempts[0],
                    detail=failure.classified.technical_detail
                )
                continue

            return self._success(route, raw, document_text, attempts[0], failure, start_time)

        if failure is None:
            error = ProviderError("No inference provider API key configured")
            failure = _Failure(PRIMARY, None, error, describe_error(error))

        if (
            self.settings.fallback_enabled
            and self.settings.synthetic_fallback_enabled
            and failure.classified.fallback_eligible
        ):
            return self._synthetic(document_text, attempts[0], failure, start_time)
        return self._failed(attempts[0], failure, start_time)

    async def _call_provider(
        self,
        route: _ProviderRoute,
        prompt: str,
        deadline: float,
        attempts: List[int]
    ) -> str:
        """Run one provider through its breaker and retry policy, returning raw text"""
        provider = route.provider

        async def attempt() -> str:
            # Re-checked per attempt so a breaker opened mid-retry stops the loop
            route.breaker.check()

            remaining = deadline - self._clock()
            if remaining <= 0:
                raise ProviderError(
                    "Request deadline exceeded, timed out before calling provider",
                    code="ETIMEDOUT",
                    provider=provider.name
                )

            attempts[0] += 1
            self._count(total_attempts=1)
            try:
                raw = await provider.complete(prompt, timeout=min(provider.timeout, remaining))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                category = classify(e)
                provider_attempts.labels(provider=provider.name, outcome="failure").inc()
                provider_errors.labels(provider=provider.name, category=category.value).inc()
                route.breaker.record_failure(category)
                raise

            provider_attempts.labels(provider=provider.name, outcome="success").inc()
            return raw

        try:
            return await with_retry(
                attempt,
                context=f"{route.role}:{provider.name}",
                policy=route.policy,
                sleep=self._sleep,
                deadline=deadline,
                clock=self._clock
            )
        except CircuitOpenError as e:
            provider_errors.labels(provider=provider.name, category=classify(e).value).inc()
            raise

    # =====================================================
    # RESULTS
    # =====================================================

    def _error_details(self, failure: _Failure, fallback_used: bool) -> ErrorDetails:
        return ErrorDetails(
            type=failure.classified.category.value,
            message=failure.classified.user_message,
            remediation=failure.classified.remediation,
            provider=failure.provider_name,
            fallbackUsed=fallback_used
        )

    def _success(
        self,
        route: _ProviderRoute,
        raw: str,
        document_text: str,
        attempts: int,
        failure: Optional[_Failure],
        start_time: float
    ) -> AnalysisResult:
        normalized = self.normalizer.parse(raw, document_text)
        using_primary = route.role == PRIMARY

        if using_primary:
            self._count(primary_requests=1)
        else:
            self._count(secondary_requests=1)
        analysis_requests.labels(path=route.role).inc()

        processing_time = time.perf_counter() - start_time
        logger.info(
            "Document analysis completed",
            role=route.role,
            provider=route.provider.name,
            tier=normalized.tier,
            attempts=attempts,
            processing_time=round(processing_time, 3)
        )

        return AnalysisResult(
            success=True,
            analysis=normalized.analysis,
            confidence=normalized.confidence,
            usingPrimary=using_primary,
            provider=route.role,
            model=route.provider.model,
            parseTier=normalized.tier,
            attempts=attempts,
            errorDetails=self._error_details(failure, True) if failure else None,
            processingTime=processing_time
        )

    def _synthetic(self, document_text: str, attempts: int, failure: _Failure, start_time: float) -> AnalysisResult:
        classified = failure.classified
        analysis = self.normalizer.create_fallback_analysis(
            document_text,
            classified.category.value,
            classified.user_message
        )
        self._count(fallback_requests=1)
        analysis_requests.labels(path=SYNTHETIC).inc()

        processing_time = time.perf_counter() - start_time
        logger.warning(
            "Returning synthetic fallback analysis",
            category=classified.category.value,
            provider=failure.provider_name,
            attempts=attempts
        )

        return AnalysisResult(
            success=True,
            analysis=analysis,
            confidence=SYNTHETIC_CONFIDENCE,
            usingPrimary=False,
            provider=SYNTHETIC,
            model=SYNTHETIC_MODEL,
            parseTier=TIER_SYNTHETIC,
            attempts=attempts,
            errorDetails=self._error_details(failure, True),
            processingTime=processing_time
        )

    def _failed(self, attempts: int, failure: _Failure, start_time: float) -> AnalysisResult:
        self._count(failures=1)
        analysis_requests.labels(path="failed").inc()

        processing_time = time.perf_counter() - start_time
        logger.error(
            "Document analysis failed",
            category=failure.classified.category.value,
            provider=failure.provider_name,
            attempts=attempts,
            detail=failure.classified.technical_detail
        )

        return AnalysisResult(
            success=False,
            usingPrimary=False,
            attempts=attempts,
            error=str(failure.error) or type(failure.error).__name__,
            errorDetails=self._error_details(failure, False),
            processingTime=processing_time
        )

    async def analyze(self, document_text: str, document_type: Optional[str] = None) -> Dict[str, Any]:
        """Analyze a document and return the camelCase JSON-ready result"""
        result = await self.process_document(document_text, document_type)
        return result.to_dict()

    # =====================================================
    # STATISTICS AND STATUS
    # =====================================================

    def get_stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            stats = asdict(self._stats)

        total = stats["total_requests"]
        if total:
            stats["primary_success_rate"] = round(stats["primary_requests"] / total * 100, 2)
            stats["total_success_rate"] = round((total - stats["failures"]) / total * 100, 2)
        else:
            stats["primary_success_rate"] = 0.0
            stats["total_success_rate"] = 0.0
        return stats

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._stats = ProcessingStats()
        logger.info("Processing statistics reset")

    def get_provider_status(self) -> Dict[str, Any]:
        status = {}
        for role, route in ((PRIMARY, self.primary), (SECONDARY, self.secondary)):
            if route is None:
                status[role] = {"configured": False}
                continue
            status[role] = {
                "configured": True,
                "name": route.provider.name,
                "model": route.provider.model,
                "circuitBreaker": route.breaker.status()
            }
        status["fallbackEnabled"] = self.settings.fallback_enabled
        status["syntheticFallbackEnabled"] = self.settings.synthetic_fallback_enabled
        return status

    async def close(self) -> None:
        for route in (self.primary, self.secondary):
            if route is not None:
                await route.provider.close()
