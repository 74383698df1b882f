"""
Retry policy for notification sends.

Each delivery step (summary text, file upload) is retried a bounded number of
times with a wait that grows linearly with the attempt number: 2s after the
first failure, 4s after the second, and so on. The last failure propagates to
the caller.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


def linear_backoff(base: float) -> Callable[[int], float]:
    """Wait before the next attempt, given the 1-based number of the failed one."""
    return lambda attempt: base * attempt


@dataclass
class RetryPolicy:
    """
    Bounded retry with a backoff schedule.

    Attributes:
        max_attempts: Total attempts, including the first one.
        backoff: Maps the failed attempt number to seconds to wait.
    """
    max_attempts: int = 3
    backoff: Callable[[int], float] = field(default_factory=lambda: linear_backoff(2.0))

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def run(self, operation: Callable[[], Awaitable[T]], label: str = "operation") -> T:
        """
        Await `operation()` until it succeeds or attempts run out.

        Args:
            operation: Zero-argument coroutine function, called once per attempt.
            label: Name used in log lines.

        Returns:
            The result of the first successful attempt.

        Raises:
            Exception: Whatever the last attempt raised.
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as e:
                if attempt >= self.max_attempts:
                    logger.error(f"{label} failed after {attempt} attempts: {e}")
                    raise
                wait = self.backoff(attempt)
                logger.warning(
                    f"{label} attempt {attempt}/{self.max_attempts} failed: {e}; "
                    f"retrying in {wait:.1f}s"
                )
                await asyncio.sleep(wait)
                attempt += 1
