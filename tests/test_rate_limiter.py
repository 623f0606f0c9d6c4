"""Tests for the request rate limiter."""

import time

import pytest

from gbfs_map.data.rate_limiter import RateLimiter


def test_no_delay_before_first_request():
    """The first request goes out immediately."""
    assert RateLimiter(1.0).delay_needed() == 0.0


@pytest.mark.asyncio
async def test_delay_needed_after_request():
    """A request starts the interval; reset clears it."""
    limiter = RateLimiter(10.0)
    await limiter.acquire()

    assert 9.0 < limiter.delay_needed() <= 10.0

    limiter.reset()
    assert limiter.delay_needed() == 0.0


@pytest.mark.asyncio
async def test_consecutive_requests_are_spaced():
    """Back-to-back requests wait out the interval."""
    limiter = RateLimiter(0.05)

    start = time.monotonic()
    await limiter.acquire()
    await limiter.acquire()
    async with limiter:
        pass
    elapsed = time.monotonic() - start

    assert elapsed >= 0.09


@pytest.mark.asyncio
async def test_zero_interval_never_waits():
    """A zero interval disables limiting."""
    limiter = RateLimiter(0.0)
    await limiter.acquire()
    assert limiter.delay_needed() == 0.0
    assert limiter.interval == 0.0
