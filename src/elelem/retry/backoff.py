"""
Backoff configuration for the retry engine.

Delays grow exponentially from ``starting_delay`` by ``time_multiple`` per
retry, capped at ``max_delay``, with up to ``jitter`` random seconds added.
No delay precedes the first attempt.
"""

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential_jitter

from elelem.config import Settings

SleepFn = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class BackoffConfig:
    """
    Attempt bound and delay schedule.

    Attributes:
        max_attempts: Total attempts, including the first
        starting_delay: Seconds before the second attempt
        time_multiple: Exponential growth factor between delays
        max_delay: Upper bound for a single delay (seconds)
        jitter: Maximum random seconds added to each delay
    """

    max_attempts: int = 3
    starting_delay: float = 0.1
    time_multiple: float = 2.0
    max_delay: float = 10.0
    jitter: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.starting_delay < 0 or self.max_delay < 0 or self.jitter < 0:
            raise ValueError("delays must be >= 0")
        if self.time_multiple < 1:
            raise ValueError("time_multiple must be >= 1")

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackoffConfig":
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            starting_delay=settings.RETRY_STARTING_DELAY,
            time_multiple=settings.RETRY_TIME_MULTIPLE,
            max_delay=settings.RETRY_MAX_DELAY,
            jitter=settings.RETRY_JITTER,
        )

    def with_attempts(self, max_attempts: int) -> "BackoffConfig":
        return replace(self, max_attempts=max_attempts)

    def retrying(self, sleep: SleepFn = asyncio.sleep) -> AsyncRetrying:
        """
        Build the tenacity driver for one retry engine invocation.

        Every exception is retried; the last one is re-raised once the
        attempts run out.
        """
        return AsyncRetrying(
            sleep=sleep,
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(
                multiplier=self.starting_delay,
                max=self.max_delay,
                exp_base=self.time_multiple,
                jitter=self.jitter,
            ),
            reraise=True,
        )


# Cache reads and writes always use this unless the caller overrides backoff
DEFAULT_BACKOFF = BackoffConfig()
