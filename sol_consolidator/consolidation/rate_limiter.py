"""
Fixed-window rate limiter for bundle submissions.

At most `max_per_window` permits start per one-second window. A caller that
finds the window full sleeps until the window edge, then opens a new window.
Callers queued behind a full window are all released together at that edge;
throughput is capped, not smoothed.

One instance is shared by reference by every submission path in the process.
It does not isolate concurrent consolidate() calls from each other.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from sol_consolidator.config import get_settings
from sol_consolidator.logging import get_logger

logger = get_logger(__name__)

WINDOW_MS = 1000.0


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class RateLimiter:
    """Counts permits in the current window; `acquire` may suspend, never fails."""

    def __init__(
        self,
        max_per_window: int = 2,
        *,
        window_ms: float = WINDOW_MS,
        clock: Callable[[], float] = _monotonic_ms,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_per_window < 1:
            raise ValueError("max_per_window must be >= 1")
        self.max_per_window = max_per_window
        self.window_ms = window_ms
        self._clock = clock
        self._sleep = sleep
        self.count = 0
        self.window_start = clock()

    async def acquire(self) -> None:
        now = self._clock()
        if now - self.window_start >= self.window_ms:
            self.count = 0
            self.window_start = now

        if self.count >= self.max_per_window:
            remaining = self.window_ms - (now - self.window_start)
            logger.info("rate_limit_wait", wait_ms=round(remaining, 1), max_per_window=self.max_per_window)
            await self._sleep(remaining / 1000.0)
            self.count = 0
            self.window_start = self._clock()

        self.count += 1

    def reset(self) -> None:
        self.count = 0
        self.window_start = self._clock()


_shared: RateLimiter | None = None


def get_rate_limiter(max_per_window: int | None = None) -> RateLimiter:
    """Process-wide limiter, created on first use. max_per_window only applies on creation."""
    global _shared
    if _shared is None:
        if max_per_window is None:
            max_per_window = get_settings().max_bundles_per_second
        _shared = RateLimiter(max_per_window)
    return _shared
