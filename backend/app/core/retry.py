"""
Retry with exponential backoff and jitter for inference provider calls
"""

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import structlog

from .error_classifier import classify, is_retryable as default_is_retryable

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt budget and backoff bounds for one provider

    Attributes:
        max_attempts: Total invocations allowed, including the first
        base_delay: Delay in seconds before the first retry
        max_delay: Cap applied before jitter is added
        jitter: Fraction of the capped delay added at random (0.1 = up to 10%)
    """
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 32.0
    jitter: float = 0.1

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be non-negative")


def calculate_backoff_delay(
    attempt: int,
    policy: RetryPolicy,
    rng: Callable[[], float] = random.random
) -> float:
    """
    Delay before the retry that follows zero-based `attempt`

    min(base_delay * 2^attempt, max_delay) plus up to policy.jitter of that value.
    """
    delay = min(policy.base_delay * (2 ** attempt), policy.max_delay)
    return delay + delay * policy.jitter * rng()


async def with_retry(
    operation: Callable[[], Awaitable[Any]],
    context: str,
    policy: RetryPolicy,
    is_retryable: Callable[[BaseException], bool] = default_is_retryable,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    deadline: Optional[float] = None,
    clock: Callable[[], float] = time.monotonic,
    rng: Callable[[], float] = random.random
) -> Any:
    """
    Invoke `operation` until it succeeds, the error is terminal, or attempts run out

    Args:
        operation: Zero-argument coroutine factory; called once per attempt
        context: Label for logs (provider / operation name)
        policy: Attempt budget and backoff bounds
        is_retryable: Decides whether a failure may be retried
        sleep: Awaitable sleep, injectable for tests
        deadline: Absolute clock() value after which no further retry is started
        clock: Monotonic clock used with `deadline`
        rng: Jitter source in [0, 1)

    Returns:
        The operation's result

    Raises:
        The last error raised by `operation`. asyncio.CancelledError always
        propagates immediately, aborting any pending backoff.
    """
    for attempt in range(policy.max_attempts):
        attempt_number = attempt + 1
        try:
            result = await operation()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            category = classify(e)
            retryable = is_retryable(e)
            is_last = attempt_number >= policy.max_attempts

            logger.warning(
                "Attempt failed",
                context=context,
                attempt=attempt_number,
                max_attempts=policy.max_attempts,
                category=category.value,
                retryable=retryable,
                error=str(e)
            )

            if not retryable or is_last:
                raise

            delay = calculate_backoff_delay(attempt, policy, rng)
            if deadline is not None and clock() + delay >= deadline:
                logger.warning(
                    "Request deadline reached, not retrying",
                    context=context,
                    attempt=attempt_number
                )
                raise

            logger.info(
                "Backing off before retry",
                context=context,
                attempt=attempt_number,
                wait_seconds=round(delay, 3)
            )
            await sleep(delay)
            continue

        logger.info(
            "Attempt succeeded",
            context=context,
            attempt=attempt_number,
            max_attempts=policy.max_attempts
        )
        return result

    # max_attempts >= 1 guarantees the loop returns or raises
    raise RuntimeError(f"{context}: retry loop exited without a result")
