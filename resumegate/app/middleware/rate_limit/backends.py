"""Rate limit backends.

Only an in-memory backend is provided: limiter windows live for the process
lifetime and are never persisted.
"""

import asyncio
import math
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Callable

from resumegate.app.core.logging import get_logger
from resumegate.app.middleware.rate_limit.models import RateLimitResult, RateLimitWindow

logger = get_logger(__name__)


class RateLimitBackend(ABC):
    """Abstract base class for rate limit backends."""

    @abstractmethod
    async def check(self, identity: str, limit: int) -> RateLimitResult:
        """Check whether one more call from ``identity`` is admitted.

        Args:
            identity: Rate limit key (caller token, hashed API key, ...)
            limit: Maximum calls allowed per window for this call site

        Returns:
            RateLimitResult with allowed status and metadata
        """

    @abstractmethod
    async def cleanup(self) -> int:
        """Drop windows whose interval has passed. Returns the number dropped."""


class InMemoryRateLimiter(RateLimitBackend):
    """In-memory fixed window rate limiter with bounded identity tracking.

    Memory is bounded by ``max_tracked_identities``: windows are kept in an
    OrderedDict in recency order and admitting a new identity at capacity
    evicts the least-recently-used window. An evicted identity is treated as
    never seen on its next call, so the limiter fails open under memory
    pressure rather than rejecting.

    The limit is a per-call argument, so different endpoints can apply
    different limits while sharing windows and the interval.
    """

    DEFAULT_MAX_TRACKED_IDENTITIES = 500

    def __init__(
        self,
        window_seconds: float = 60,
        max_tracked_identities: int = DEFAULT_MAX_TRACKED_IDENTITIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize rate limiter.

        Args:
            window_seconds: Window length in seconds
            max_tracked_identities: Maximum windows retained (LRU eviction)
            clock: Monotonic time source in seconds
        """
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_tracked_identities < 1:
            raise ValueError("max_tracked_identities must be at least 1")
        self.window_seconds = window_seconds
        self._max_tracked = max_tracked_identities
        self._clock = clock
        self._windows: OrderedDict[str, RateLimitWindow] = OrderedDict()
        self._lock = asyncio.Lock()

    @property
    def max_tracked_identities(self) -> int:
        return self._max_tracked

    def __len__(self) -> int:
        return len(self._windows)

    def __contains__(self, identity: str) -> bool:
        return identity in self._windows

    def _evict_for_new_identity(self) -> None:
        while len(self._windows) >= self._max_tracked:
            evicted, _ = self._windows.popitem(last=False)
            logger.debug(f"Rate limiter evicted LRU window for {evicted[:16]}")

    async def check(self, identity: str, limit: int) -> RateLimitResult:
        if limit < 1:
            raise ValueError("limit must be at least 1")

        async with self._lock:
            now = self._clock()
            window = self._windows.get(identity)

            if window is None or now - window.window_start >= self.window_seconds:
                if window is None:
                    self._evict_for_new_identity()
                window = RateLimitWindow(identity=identity, count=1, window_start=now)
                self._windows[identity] = window
                self._windows.move_to_end(identity)
                return RateLimitResult(
                    allowed=True,
                    limit=limit,
                    remaining=limit - 1,
                    reset_time=now + self.window_seconds,
                )

            self._windows.move_to_end(identity)
            window.count += 1
            reset_time = window.window_start + self.window_seconds

            if window.count > limit:
                return RateLimitResult(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset_time=reset_time,
                    retry_after=max(1, math.ceil(reset_time - now)),
                )

            return RateLimitResult(
                allowed=True,
                limit=limit,
                remaining=limit - window.count,
                reset_time=reset_time,
            )

    async def cleanup(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [
                identity for identity, window in self._windows.items()
                if now - window.window_start >= self.window_seconds
            ]
            for identity in expired:
                del self._windows[identity]
            return len(expired)
