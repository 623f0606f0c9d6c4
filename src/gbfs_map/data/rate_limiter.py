"""Minimum-spacing rate limiter for feed requests."""

import asyncio
import time


class RateLimiter:
    """Serializes callers so consecutive requests are at least `interval` apart.

    Uses an async lock so concurrent callers queue up instead of bursting.
    """

    def __init__(self, interval: float = 0.25):
        """Initialize the limiter.

        Args:
            interval: Minimum number of seconds between two acquisitions.
        """
        self._interval = interval
        self._last_request: float | None = None
        self._lock = asyncio.Lock()

    @property
    def interval(self) -> float:
        return self._interval

    def delay_needed(self) -> float:
        """Seconds to wait before the next request may go out (0 if none)."""
        if self._last_request is None:
            return 0.0
        elapsed = time.monotonic() - self._last_request
        return max(0.0, self._interval - elapsed)

    async def acquire(self) -> None:
        """Wait until a request may be sent, then record it."""
        async with self._lock:
            delay = self.delay_needed()
            if delay > 0:
                await asyncio.sleep(delay)
            self._last_request = time.monotonic()

    def reset(self) -> None:
        """Forget the last request time."""
        self._last_request = None

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None
