# src/provider/retry.py - v2
"""Retry policy with exponential backoff and jitter for provider calls.

The policy is pure data; `with_retry` runs any awaitable factory under it.
Logging is left to the `on_retry` callback.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from tabilingo.core.errors import ProviderCallFailed
from tabilingo.provider.base_provider import (
    ProviderAuthError,
    ProviderQuotaExhaustedError,
    ProviderRateLimitError,
)

T = TypeVar("T")

NON_RETRYABLE = frozenset({"auth", "quota"})


def _no_jitter(delay: float) -> float:
    return 0.0


def proportional_jitter(ratio: float) -> Callable[[float], float]:
    """Jitter uniformly drawn from [0, ratio * delay]."""

    def jitter(delay: float) -> float:
        return random.uniform(0.0, ratio * delay)  # noqa: S311

    return jitter


@dataclass(frozen=True)
class RetryPolicy:
    """How many times and how long to wait between provider attempts.

    `max_retries` counts retries, so a call is attempted at most
    `max_retries + 1` times.
    """

    max_retries: int = 3
    initial_delay_s: float = 5.0
    max_delay_s: float = 60.0
    backoff_factor: float = 2.0
    rate_limit_backoff_factor: float = 4.0
    jitter: Callable[[float], float] = field(default=_no_jitter, compare=False)

    def compute_delay(self, attempt: int, error_type: str) -> float:
        """Delay before retry number `attempt + 1` (attempt is 0-based)."""
        factor = (
            self.rate_limit_backoff_factor
            if error_type == "rate_limit"
            else self.backoff_factor
        )
        base = min(self.initial_delay_s * factor**attempt, self.max_delay_s)
        return base + self.jitter(base)


def classify_error(error: Exception) -> str:
    """Classify an exception into a retry error type."""
    if isinstance(error, ProviderRateLimitError):
        return "rate_limit"
    if isinstance(error, ProviderAuthError):
        return "auth"
    if isinstance(error, ProviderQuotaExhaustedError):
        return "quota"

    msg = str(error).lower()
    name = type(error).__name__.lower()
    if "429" in msg or "too many requests" in msg or "rate limit" in msg:
        return "rate_limit"
    if "timeout" in name or "timeout" in msg:
        return "timeout"
    if any(c in msg for c in ("500", "502", "503", "504", "server")):
        return "server_error"
    return "transient"


OnRetry = Callable[[int, str, float, Exception], Any]


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    on_retry: OnRetry | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await `operation()` until it succeeds or the policy gives up.

    Args:
        operation: Factory returning a fresh awaitable per attempt.
        policy: Retry policy.
        on_retry: Called as `(attempt, error_type, delay_s, error)` before
            each backoff sleep.
        sleep: Awaitable sleep, injectable for tests.

    Raises:
        ProviderCallFailed: On a non-retryable error or once retries are
            exhausted, chained to the last error.
    """
    attempts = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            attempts += 1
            error_type = classify_error(e)
            if error_type in NON_RETRYABLE or attempts > policy.max_retries:
                raise ProviderCallFailed(attempts, error_type, e) from e

            delay = policy.compute_delay(attempts - 1, error_type)
            if on_retry is not None:
                on_retry(attempts, error_type, delay, e)
            await sleep(delay)
