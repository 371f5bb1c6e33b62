"""Explicit retry policies.

Operations that retry take a RetryPolicy instead of sleeping inline, so
tests can inject a sleeper that records delays without waiting.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[None]]
Backoff = Callable[[int], float]


def fixed_delay(seconds: float) -> Backoff:
    return lambda _attempt: seconds


def exponential_backoff(base_seconds: float) -> Backoff:
    """``base * 2**(attempt-1)``: 1x, 2x, 4x, ..."""
    return lambda attempt: base_seconds * (2 ** (attempt - 1))


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how long to wait between attempts.

    ``backoff(n)`` is the delay after failed attempt ``n`` (1-based).
    """

    max_attempts: int = 3
    backoff: Backoff = field(default=fixed_delay(0.0))
    sleeper: Sleeper = asyncio.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = "max_attempts must be at least 1"
            raise ValueError(msg)

    @classmethod
    def fixed(
        cls,
        attempts: int,
        delay_seconds: float,
        sleeper: Sleeper = asyncio.sleep,
    ) -> "RetryPolicy":
        return cls(attempts, fixed_delay(delay_seconds), sleeper)

    @classmethod
    def exponential(
        cls,
        attempts: int,
        base_seconds: float,
        sleeper: Sleeper = asyncio.sleep,
    ) -> "RetryPolicy":
        return cls(attempts, exponential_backoff(base_seconds), sleeper)

    async def run(
        self,
        fn: Callable[[], Awaitable[T]],
        retry_on: tuple[type[BaseException], ...] = (Exception,),
    ) -> T:
        """Call ``fn`` until it returns, re-raising the last error."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await fn()
            except retry_on as e:
                if attempt == self.max_attempts:
                    raise
                delay = self.backoff(attempt)
                logger.info(
                    "Attempt %d/%d failed (%s), retrying in %.2fs",
                    attempt,
                    self.max_attempts,
                    e,
                    delay,
                )
                await self.sleeper(delay)
        msg = "unreachable"
        raise AssertionError(msg)

    async def poll(self, fn: Callable[[], Awaitable[Optional[T]]]) -> Optional[T]:
        """Call ``fn`` until it returns something other than None."""
        for attempt in range(1, self.max_attempts + 1):
            result = await fn()
            if result is not None:
                return result
            if attempt < self.max_attempts:
                await self.sleeper(self.backoff(attempt))
        return None
