"""
Per-provider circuit breaker

CLOSED -> OPEN after `threshold` consecutive SERVICE_UNAVAILABLE failures.
OPEN -> CLOSED once `timeout` seconds have elapsed since opening; the elapsed
time is checked on the next access instead of scheduling a timer, and the
close also zeroes the failure counter. There is no half-open state.
"""

import threading
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Callable, Dict, Any, Optional

import structlog

from .error_classifier import ErrorCategory, ProviderError
from .telemetry import circuit_breaker_open

logger = structlog.get_logger(__name__)


class CircuitOpenError(ProviderError):
    """Raised instead of calling a provider whose breaker is open"""

    def __init__(self, provider: str, retry_after: float = 0.0):
        super().__init__(
            f"Circuit breaker open for {provider}: service unavailable",
            code="CIRCUIT_OPEN",
            provider=provider
        )
        self.retry_after = retry_after


@dataclass
class CircuitBreakerState:
    consecutive_failures: int = 0
    is_open: bool = False
    opened_at: Optional[float] = None


class CircuitBreaker:
    """
    Failure counter shared by every request targeting one provider

    All transitions happen under a lock so concurrent requests see a
    consistent counter and open flag.

    Args:
        name: Provider name, used for logs and the breaker gauge
        threshold: Consecutive counted failures that open the breaker
        timeout: Seconds the breaker stays open
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        name: str,
        threshold: int = 5,
        timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic
    ):
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self.name = name
        self.threshold = threshold
        self.timeout = timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._state = CircuitBreakerState()
        # Wall-clock open time, reported by status endpoints only
        self._opened_at_wall: Optional[datetime] = None
        circuit_breaker_open.labels(provider=name).set(0)

    def _close_if_expired(self) -> None:
        """Caller holds the lock"""
        state = self._state
        if state.is_open and state.opened_at is not None:
            if self._clock() - state.opened_at >= self.timeout:
                self._state = CircuitBreakerState()
                self._opened_at_wall = None
                circuit_breaker_open.labels(provider=self.name).set(0)
                logger.info("Circuit breaker closed after timeout", provider=self.name)

    def allow_request(self) -> bool:
        """True when a call to the provider may be attempted"""
        with self._lock:
            self._close_if_expired()
            return not self._state.is_open

    def check(self) -> None:
        """Raise CircuitOpenError when the breaker rejects calls"""
        with self._lock:
            self._close_if_expired()
            if self._state.is_open:
                remaining = max(0.0, self.timeout - (self._clock() - self._state.opened_at))
                raise CircuitOpenError(self.name, retry_after=remaining)

    def record_failure(self, category: ErrorCategory) -> bool:
        """
        Count a failure; only SERVICE_UNAVAILABLE failures are counted

        Returns:
            True if this failure opened the breaker
        """
        if category != ErrorCategory.SERVICE_UNAVAILABLE:
            return False

        with self._lock:
            self._close_if_expired()
            state = self._state
            state.consecutive_failures += 1

            if state.is_open or state.consecutive_failures < self.threshold:
                return False

            state.is_open = True
            state.opened_at = self._clock()
            self._opened_at_wall = datetime.now(timezone.utc)

        circuit_breaker_open.labels(provider=self.name).set(1)
        logger.error(
            "Circuit breaker tripped - opening circuit",
            provider=self.name,
            failures=state.consecutive_failures,
            threshold=self.threshold,
            timeout_seconds=self.timeout
        )
        return True

    @property
    def state(self) -> CircuitBreakerState:
        """Snapshot of the current state"""
        with self._lock:
            self._close_if_expired()
            return CircuitBreakerState(**asdict(self._state))

    def status(self) -> Dict[str, Any]:
        """camelCase snapshot for the provider status endpoint"""
        with self._lock:
            self._close_if_expired()
            return {
                "consecutiveFailures": self._state.consecutive_failures,
                "isOpen": self._state.is_open,
                "openedAt": self._opened_at_wall.isoformat() if self._opened_at_wall else None,
                "threshold": self.threshold,
                "timeoutSeconds": self.timeout
            }

    def reset(self) -> None:
        with self._lock:
            self._state = CircuitBreakerState()
            self._opened_at_wall = None
        circuit_breaker_open.labels(provider=self.name).set(0)
