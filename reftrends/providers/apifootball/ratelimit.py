"""Client-side rate limiting for API-Football.

The free and basic plans allow a fixed number of requests per rolling
minute. Requests are recorded in a sliding window; when the window is full
the caller waits until the oldest request falls out, plus a small slack.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Rate limit configuration."""
    max_requests: int = 30
    window_seconds: float = 60.0
    # Added to the computed wait so the oldest request is safely outside the window
    slack_seconds: float = 1.0


@dataclass
class SlidingWindow:
    """Sliding window of request timestamps."""
    timestamps: list = field(default_factory=list)

    def add(self, ts: float) -> None:
        self.timestamps.append(ts)

    def count_in_window(self, window_seconds: float, now: float) -> int:
        cutoff = now - window_seconds
        self.timestamps = [t for t in self.timestamps if t > cutoff]
        return len(self.timestamps)

    def oldest(self) -> Optional[float]:
        return self.timestamps[0] if self.timestamps else None


class SlidingWindowLimiter:
    """Async sliding window limiter shared by every request of one client."""

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        *,
        time_fn: Callable[[], float] = time.monotonic,
        sleep_fn: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config or RateLimitConfig()
        if self.config.max_requests <= 0:
            raise ValueError("max_requests must be > 0")
        self._window = SlidingWindow()
        self._lock = asyncio.Lock()
        self._now = time_fn
        self._sleep = sleep_fn
        self.total_requests = 0
        self.total_waits = 0

    def try_acquire(self) -> bool:
        """Record a request if the window has room; never waits."""
        now = self._now()
        if self._window.count_in_window(self.config.window_seconds, now) >= self.config.max_requests:
            return False
        self._window.add(now)
        self.total_requests += 1
        return True

    def wait_time(self) -> float:
        """Seconds until a request would be admitted (0 if there is room now)."""
        now = self._now()
        if self._window.count_in_window(self.config.window_seconds, now) < self.config.max_requests:
            return 0.0
        # a full window is never empty since max_requests > 0
        oldest = self._window.timestamps[0]
        return max(0.0, self.config.window_seconds - (now - oldest)) + self.config.slack_seconds

    async def acquire(self) -> None:
        async with self._lock:
            while True:
                delay = self.wait_time()
                if delay <= 0.0:
                    break
                self.total_waits += 1
                logger.info({"rate_limit": {"event": "wait", "seconds": round(delay, 2)}})
                await self._sleep(delay)
            self._window.add(self._now())
            self.total_requests += 1

    def stats(self) -> Dict[str, float]:
        now = self._now()
        return {
            "in_window": self._window.count_in_window(self.config.window_seconds, now),
            "max_requests": self.config.max_requests,
            "total_requests": self.total_requests,
            "total_waits": self.total_waits,
        }


__all__ = ["RateLimitConfig", "SlidingWindow", "SlidingWindowLimiter"]
