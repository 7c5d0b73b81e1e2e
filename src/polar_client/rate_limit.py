"""Client-side rate limiting for outbound API calls.

A sliding-window limiter: at most ``requests_per_minute`` admissions inside
any rolling window. Over-budget callers wait for capacity instead of
failing, and are admitted in arrival order.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
import logging
import time

logger = logging.getLogger(__name__)


@dataclass
class RateLimiter:
    """Sliding-window request limiter using a monotonic clock.

    The window state is the only shared mutable state in the client; every
    read and update happens under ``_lock``. A caller cancelled while
    waiting leaves no timestamp behind, so it consumes no budget.
    """

    requests_per_minute: int
    window_s: float = 60.0
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    _admitted: deque[float] = field(default_factory=deque, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.requests_per_minute < 1:
            raise ValueError("RateLimiter.requests_per_minute must be >= 1")
        if self.window_s <= 0:
            raise ValueError("RateLimiter.window_s must be > 0")

    async def acquire(self) -> float:
        """Acquire a single request permit and return the wait time applied."""
        waited = 0.0
        # Holding the lock while sleeping keeps waiters in FIFO order.
        async with self._lock:
            while True:
                now = self.clock()
                self._evict(now)
                if len(self._admitted) < self.requests_per_minute:
                    self._admitted.append(now)
                    if waited > 0:
                        logger.debug("Rate limit wait %.2fs before request", waited)
                    return waited
                wait_time = self._admitted[0] + self.window_s - now
                if wait_time > 0:
                    await self.sleep(wait_time)
                    waited += wait_time

    def status(self) -> tuple[int, int]:
        """Return ``(available, limit)`` for the current window."""
        self._evict(self.clock())
        return (
            max(0, self.requests_per_minute - len(self._admitted)),
            self.requests_per_minute,
        )

    def _evict(self, now: float) -> None:
        cutoff = now - self.window_s
        while self._admitted and self._admitted[0] <= cutoff:
            self._admitted.popleft()
