"""Token-bucket pacing for external service calls."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol


class RateLimiter(Protocol):
    """Interface for pacing outbound requests."""

    async def acquire(self) -> None:
        """Wait until a request may be sent."""


@dataclass
class TokenBucketLimiter(RateLimiter):
    """Async token bucket refilled at a steady rate.

    Tokens accumulate up to ``capacity`` while idle, so short bursts go out
    immediately and sustained traffic is paced at ``rate_per_second``.
    """

    rate_per_second: float
    capacity: float = 1.0
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    _tokens: float = field(init=False)
    _updated_at: float = field(init=False)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    def __post_init__(self) -> None:
        if self.rate_per_second <= 0:
            raise ValueError("rate_per_second must be positive")
        if self.capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._tokens = self.capacity
        self._updated_at = self.clock()

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available."""
        async with self._lock:
            while True:
                self._refill()
                if self._tokens >= 1:
                    self._tokens -= 1
                    return
                wait_seconds = (1 - self._tokens) / self.rate_per_second
                await self.sleep(wait_seconds)

    def _refill(self) -> None:
        now = self.clock()
        elapsed = max(now - self._updated_at, 0.0)
        self._updated_at = now
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate_per_second)


@dataclass
class NoopLimiter(RateLimiter):
    """Limiter that never waits."""

    async def acquire(self) -> None:
        """Return immediately."""
        return None
