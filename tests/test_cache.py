"""Tests for the result cache."""

import asyncio

import pytest

from resumegate.app.core.cache import InMemoryCache, _CacheEntry


class TestCacheEntry:
    """Tests for the internal _CacheEntry class."""

    def test_cache_entry_expires_at_boundary(self):
        entry = _CacheEntry(value=b"test", expires_at=100.0)
        assert not entry.is_expired(99.9)
        assert entry.is_expired(100.0)


class TestInMemoryCache:
    """Tests for the InMemoryCache implementation."""

    @pytest.fixture
    def cache(self, clock):
        return InMemoryCache(max_entries=3, clock=clock)

    @pytest.mark.asyncio
    async def test_set_and_get(self, cache):
        """Can store and retrieve values."""
        await cache.set("key1", b"value1", ttl=60)
        assert await cache.get("key1") == b"value1"

    @pytest.mark.asyncio
    async def test_get_nonexistent_key(self, cache):
        """Getting nonexistent key returns None."""
        assert await cache.get("nonexistent") is None

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, cache, clock):
        await cache.set("key1", b"value1", ttl=300)

        clock.advance(299)
        assert await cache.get("key1") == b"value1"

        clock.advance(1)
        assert await cache.get("key1") is None
        # Expired entries are removed on read
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_overwrite_replaces_value_and_ttl(self, cache, clock):
        await cache.set("key1", b"old", ttl=10)
        clock.advance(5)
        await cache.set("key1", b"new", ttl=10)
        clock.advance(8)

        assert await cache.get("key1") == b"new"
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_lru_eviction_at_capacity(self, cache):
        for key in ("a", "b", "c", "d"):
            await cache.set(key, key.encode(), ttl=60)

        assert len(cache) == 3
        assert await cache.get("a") is None
        assert await cache.get("d") == b"d"

    @pytest.mark.asyncio
    async def test_get_refreshes_recency(self, cache):
        for key in ("a", "b", "c"):
            await cache.set(key, key.encode(), ttl=60)

        await cache.get("a")
        await cache.set("d", b"d", ttl=60)

        assert await cache.get("a") == b"a"
        assert await cache.get("b") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ttl", [0, -5])
    async def test_non_positive_ttl_rejected(self, cache, ttl):
        with pytest.raises(ValueError):
            await cache.set("key1", b"value1", ttl=ttl)
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_cleanup_expired(self, cache, clock):
        await cache.set("short", b"1", ttl=10)
        await cache.set("long", b"2", ttl=100)
        clock.advance(50)

        removed = await cache.cleanup_expired()

        assert removed == 1
        assert await cache.get("long") == b"2"

    @pytest.mark.asyncio
    async def test_concurrent_writes_stay_bounded(self):
        cache = InMemoryCache(max_entries=10)
        await asyncio.gather(*(cache.set(f"k{i}", b"v", ttl=60) for i in range(50)))
        assert len(cache) == 10

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            InMemoryCache(max_entries=0)

