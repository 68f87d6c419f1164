"""Bounded exponential-backoff retry around remote generation calls."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from .errors import ErrorKind, QuotaExceededError, classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    retries: int = 3,
    base_delay: float = 4.0,
    sleep: SleepFn = asyncio.sleep,
    label: str = "request",
) -> Optional[T]:
    """Run ``operation`` and retry transient failures with doubling delays.

    Args:
        operation: Zero-argument coroutine function to call.
        retries: Retries allowed after the first attempt.
        base_delay: Seconds to wait before the first retry.
        sleep: Awaitable sleep, replaceable for tests.
        label: Name used in log messages.

    Returns:
        The operation's result, or None when it failed permanently or ran
        out of retries. None means "skip this asset for now".

    Raises:
        QuotaExceededError: The service reported its quota is exhausted.
            Raised on the first occurrence, without waiting.
    """
    remaining = retries
    delay = base_delay

    while True:
        try:
            return await operation()
        except Exception as e:
            kind = classify_error(e)

            if kind == ErrorKind.QUOTA_EXCEEDED:
                logger.error(f"Quota exceeded during {label}. Stopping retries.")
                if isinstance(e, QuotaExceededError):
                    raise
                raise QuotaExceededError(str(e)) from e

            if kind == ErrorKind.TRANSIENT and remaining > 0:
                logger.warning(
                    f"{label} overloaded ({e}). Cooling down for {delay:.1f}s "
                    f"(retries left: {remaining})"
                )
                await sleep(delay)
                remaining -= 1
                delay *= 2
                continue

            logger.error(f"{label} failed: {e}")
            return None


class RetryExecutor:
    """Retry policy shared by every remote call of a pipeline run."""

    def __init__(
        self,
        retries: int = 3,
        base_delay: float = 4.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.retries = retries
        self.base_delay = base_delay
        self._sleep = sleep

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        label: str = "request",
    ) -> Optional[T]:
        """Execute ``operation`` under this executor's policy."""
        return await run_with_retry(
            operation,
            retries=self.retries,
            base_delay=self.base_delay,
            sleep=self._sleep,
            label=label,
        )
