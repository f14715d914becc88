"""Result cache for the analysis gateway.

Provides a pluggable cache backend interface and a bounded, time-expiring
in-memory implementation. Entries live only for the process lifetime; a
restart is equivalent to evicting everything.
"""

from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable
import asyncio
import time

from resumegate.app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class _CacheEntry:
    """Internal cache entry with TTL tracking."""

    value: bytes
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if the entry has expired at ``now``."""
        return now >= self.expires_at


class CacheBackend(ABC):
    """Abstract base class for cache backends.

    All cache implementations must inherit from this class and implement
    the abstract methods.
    """

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Retrieve a value from the cache.

        Args:
            key: The cache key to look up.

        Returns:
            The cached value as bytes, or None if not found or expired.
        """

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store a value in the cache.

        Args:
            key: The cache key.
            value: The value to store (as bytes).
            ttl: Time-to-live in seconds, must be positive.

        Raises:
            ValueError: If ``ttl`` is not positive.
        """

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """Remove all expired entries and return how many were removed."""


class InMemoryCache(CacheBackend):
    """In-memory LRU cache with TTL support.

    Entries are kept in an OrderedDict in recency order; reads and writes
    move a key to the most-recently-used end, and writes evict from the
    least-recently-used end while the entry count exceeds ``max_entries``.

    Every read-modify-write sequence runs under one asyncio.Lock, so
    concurrent callers can never push the cache over capacity.
    """

    DEFAULT_MAX_ENTRIES = 500

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory cache.

        Args:
            max_entries: Maximum number of entries before LRU eviction
            clock: Monotonic time source in seconds
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._clock = clock
        self._data: OrderedDict[str, _CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __len__(self) -> int:
        return len(self._data)

    async def get(self, key: str) -> bytes | None:
        async with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._data[key]
                return None
            self._data.move_to_end(key)
            return entry.value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        async with self._lock:
            # Replace wholesale, never mutate an existing entry in place
            self._data.pop(key, None)
            self._data[key] = _CacheEntry(value=value, expires_at=self._clock() + ttl)
            while len(self._data) > self._max_entries:
                evicted, _ = self._data.popitem(last=False)
                logger.debug(f"Cache evicted LRU entry {evicted[:16]}...")

    async def cleanup_expired(self) -> int:
        """Remove all expired entries from the cache.

        Returns:
            Number of entries removed.
        """
        async with self._lock:
            now = self._clock()
            expired_keys = [
                key for key, entry in self._data.items() if entry.is_expired(now)
            ]
            for key in expired_keys:
                del self._data[key]
            return len(expired_keys)
