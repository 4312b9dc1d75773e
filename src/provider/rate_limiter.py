# src/provider/rate_limiter.py - v1
"""Minimum-interval rate limiter for provider calls.

One limiter instance should be shared by every client that talks to the same
provider account. The lock serialises `acquire()` so concurrent tasks are
spaced out in arrival order.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable


class RateLimiter:
    """Enforces `min_interval_s` between the starts of consecutive calls."""

    def __init__(
        self,
        min_interval_s: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._min_interval = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> float:
        """Wait until a call may start. Returns the time waited in seconds."""
        async with self._lock:
            waited = 0.0
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                if elapsed < self._min_interval:
                    waited = self._min_interval - elapsed
                    await self._sleep(waited)
            self._last_request = self._clock()
            return waited
