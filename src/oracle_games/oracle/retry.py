"""
retry.py

PURPOSE: Exponential backoff with jitter for transient oracle failures.
DEPENDENCIES: None (asyncio)

ARCHITECTURE NOTES:
Only errors flagged retryable (OracleUnavailable by default) are retried.
Rate limits and unusable responses surface on the first failure so the
player hears about them straight away.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from oracle_games.config import RetrySettings
from oracle_games.errors import OracleError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RetryPolicy:
    """How many times to retry and how long to wait between attempts."""

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 20.0
    exponential_base: float = 2.0
    jitter_factor: float = 0.1

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> "RetryPolicy":
        return cls(
            max_retries=settings.max_retries,
            initial_delay=settings.initial_delay,
            max_delay=settings.max_delay,
            exponential_base=settings.exponential_base,
            jitter_factor=settings.jitter_factor,
        )

    def delay_for(self, attempt: int, rng: random.Random | None = None) -> float:
        """Delay before retry number `attempt + 1` (attempt counts from 0)."""
        delay = min(self.initial_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter_factor > 0:
            delay += delay * self.jitter_factor * (rng or random).random()
        return delay


async def with_retries(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Sleep = asyncio.sleep,
    description: str = "oracle call",
) -> T:
    """
    Await `operation()`, retrying retryable oracle errors with backoff.

    Raises:
        OracleError: The last error once retries are exhausted, or the first
            non-retryable one.
    """
    attempts = policy.max_retries + 1
    for attempt in range(attempts):
        try:
            return await operation()
        except OracleError as e:
            if not e.retryable or attempt + 1 >= attempts:
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                f"{description} failed (attempt {attempt + 1}/{attempts}): {e}. "
                f"Retrying in {delay:.2f}s"
            )
            await sleep(delay)

    raise AssertionError("unreachable")  # pragma: no cover
