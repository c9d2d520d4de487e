"""Async token-bucket throttle for Meraki Dashboard API requests."""

from __future__ import annotations

import asyncio
import time


class TokenBucket:
    """A simple token bucket that refills at a fixed rate."""

    def __init__(self, rate: float, capacity: float) -> None:
        self.rate = rate
        self.capacity = capacity
        self.tokens = capacity
        self._last_refill = time.monotonic()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
        self._last_refill = now

    def try_acquire(self) -> bool:
        """Try to consume one token. Returns True if successful."""
        self._refill()
        if self.tokens >= 1.0:
            self.tokens -= 1.0
            return True
        return False

    def time_until_available(self) -> float:
        """Seconds until at least one token is available."""
        self._refill()
        if self.tokens >= 1.0:
            return 0.0
        return (1.0 - self.tokens) / self.rate


class RateLimiter:
    """Request throttle shared by every call a client makes.

    The Dashboard API budgets requests per organization per second; the
    bucket lets a short burst through and then paces callers at the
    sustained rate. ``acquire()`` blocks (async) until a token is available.
    """

    def __init__(self, requests_per_sec: float = 10.0, burst: int = 10) -> None:
        self._bucket = TokenBucket(rate=float(requests_per_sec), capacity=float(burst))
        self._waits = 0

    @property
    def waits(self) -> int:
        """How many acquisitions had to sleep for a token."""
        return self._waits

    async def acquire(self) -> None:
        """Wait until the bucket allows a request, then consume one token."""
        waited = False
        while not self._bucket.try_acquire():
            waited = True
            await asyncio.sleep(max(self._bucket.time_until_available(), 0.001))
        if waited:
            self._waits += 1
