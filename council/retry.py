# council/retry.py
"""
PulseCraft — Retry and Timeout Wrappers

with_retry(): bounded exponential backoff around one provider call.
    attempt 1 fails → sleep initial_delay
    attempt 2 fails → sleep initial_delay * 2
    attempt 3 fails → sleep initial_delay * 4 (only if a 4th attempt exists)
    last attempt fails → re-raise that error unchanged
No jitter, no circuit breaker. Total latency is bounded by with_timeout()
around the whole public operation.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, TypeVar

from core.errors import OperationTimeout

logger = logging.getLogger("pulsecraft.council.retry")

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY_MS = 1000


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings handed to the fan-out engines."""
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS
    sleep: Optional[Callable[[float], Awaitable[None]]] = None

    async def run(self, fn: Callable[[], Awaitable[T]], label: str = "call") -> T:
        return await with_retry(
            fn,
            max_attempts=self.max_attempts,
            initial_delay_ms=self.initial_delay_ms,
            label=label,
            sleep=self.sleep,
        )


def backoff_schedule(max_attempts: int, initial_delay_ms: int) -> List[float]:
    """Delays in seconds slept between attempts (one fewer than attempts)."""
    return [initial_delay_ms * (2 ** i) / 1000.0 for i in range(max(0, max_attempts - 1))]


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS,
    label: str = "call",
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """
    Await fn() up to max_attempts times.

    Args:
        fn: Zero-arg coroutine factory (called fresh on every attempt)
        max_attempts: Total attempts, including the first
        initial_delay_ms: Delay before the second attempt; doubles each time
        label: Name used in retry logs
        sleep: Awaitable sleep, injectable for tests

    Raises:
        The last exception raised by fn(), unmodified.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    sleep = sleep or asyncio.sleep

    last_error: Optional[Exception] = None
    for attempt in range(max_attempts):
        try:
            return await fn()
        except Exception as e:
            last_error = e
            remaining = max_attempts - attempt - 1
            if remaining == 0:
                break
            delay_s = initial_delay_ms * (2 ** attempt) / 1000.0
            logger.warning(
                "%s failed (%s). Retrying in %.0fms... (%d left)",
                label, e, delay_s * 1000, remaining,
            )
            await sleep(delay_s)

    logger.error("%s failed after %d attempts: %s", label, max_attempts, last_error)
    raise last_error


async def with_timeout(awaitable: Awaitable[T], seconds: float, operation: str) -> T:
    """
    Race an operation against a hard deadline.

    The awaiting task is cancelled on timeout; provider requests it had in
    flight are abandoned with it.

    Raises:
        OperationTimeout: when the deadline passes first
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as e:
        logger.error("%s exceeded %ss deadline", operation, seconds)
        raise OperationTimeout(operation, seconds) from e


__all__ = [
    "RetryPolicy",
    "with_retry",
    "with_timeout",
    "backoff_schedule",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_INITIAL_DELAY_MS",
]
