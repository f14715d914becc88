"""Tests for the per-identity rate limiter."""

import asyncio

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from resumegate.app.core.config import Settings
from resumegate.app.exceptions import InvalidInputError
from resumegate.app.middleware.rate_limit import (
    InMemoryRateLimiter,
    RateLimitResult,
    create_rate_limiter,
    resolve_identity,
)


class TestInMemoryRateLimiter:
    """Tests for in-memory rate limiter."""

    @pytest.fixture
    def limiter(self, clock):
        return InMemoryRateLimiter(window_seconds=60, max_tracked_identities=3, clock=clock)

    @pytest.mark.asyncio
    async def test_first_call_opens_window(self, limiter):
        result = await limiter.check("alice", 5)
        assert result.allowed is True
        assert result.remaining == 4
        assert result.limit == 5

    @pytest.mark.asyncio
    async def test_limit_plus_one_rejects_exactly_last_call(self, limiter):
        """limit + 1 calls yield limit allows followed by one reject."""
        results = [await limiter.check("alice", 5) for _ in range(6)]

        assert [r.allowed for r in results] == [True] * 5 + [False]
        assert results[-1].remaining == 0
        assert results[-1].retry_after == 60

    @pytest.mark.asyncio
    async def test_window_resets_after_interval(self, limiter, clock):
        for _ in range(6):
            await limiter.check("alice", 5)

        clock.advance(60)
        result = await limiter.check("alice", 5)

        assert result.allowed is True
        assert result.remaining == 4
        assert limiter._windows["alice"].count == 1

    @pytest.mark.asyncio
    async def test_window_not_reset_before_interval(self, limiter, clock):
        for _ in range(5):
            await limiter.check("alice", 5)

        clock.advance(59)
        result = await limiter.check("alice", 5)
        assert result.allowed is False
        assert result.retry_after == 1

    @pytest.mark.asyncio
    async def test_different_identities_independent(self, limiter):
        for _ in range(6):
            await limiter.check("alice", 5)

        assert (await limiter.check("alice", 5)).allowed is False
        assert (await limiter.check("bob", 5)).allowed is True

    @pytest.mark.asyncio
    async def test_limit_is_per_call(self, limiter):
        """Call sites with different limits share the same window."""
        assert (await limiter.check("alice", 2)).allowed is True
        assert (await limiter.check("alice", 2)).allowed is True
        assert (await limiter.check("alice", 2)).allowed is False
        # Same window, looser call site
        assert (await limiter.check("alice", 10)).allowed is True

    @pytest.mark.asyncio
    async def test_lru_identity_evicted_at_capacity(self, limiter):
        for identity in ("a", "b", "c"):
            await limiter.check(identity, 1)

        await limiter.check("d", 1)

        assert len(limiter) == 3
        assert "a" not in limiter
        # An evicted identity is treated as never seen
        assert (await limiter.check("a", 1)).allowed is True

    @pytest.mark.asyncio
    async def test_recent_use_protects_from_eviction(self, limiter):
        for identity in ("a", "b", "c"):
            await limiter.check(identity, 5)

        await limiter.check("a", 5)  # a becomes most recently used
        await limiter.check("d", 5)

        assert "a" in limiter
        assert "b" not in limiter

    @pytest.mark.asyncio
    async def test_cleanup_drops_expired_windows(self, limiter, clock):
        await limiter.check("a", 5)
        clock.advance(30)
        await limiter.check("b", 5)
        clock.advance(31)

        removed = await limiter.cleanup()

        assert removed == 1
        assert "a" not in limiter
        assert "b" in limiter

    @pytest.mark.asyncio
    async def test_concurrent_calls_never_over_admit(self):
        limiter = InMemoryRateLimiter(window_seconds=60)
        results = await asyncio.gather(*(limiter.check("alice", 5) for _ in range(20)))
        assert sum(r.allowed for r in results) == 5

    @pytest.mark.asyncio
    async def test_invalid_limit_rejected(self, limiter):
        with pytest.raises(ValueError):
            await limiter.check("alice", 0)

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            InMemoryRateLimiter(window_seconds=0)
        with pytest.raises(ValueError):
            InMemoryRateLimiter(max_tracked_identities=0)


class TestRateLimitResult:
    """Tests for RateLimitResult dataclass."""

    def test_result_creation(self):
        result = RateLimitResult(allowed=True, limit=100, remaining=99, reset_time=1234567890)
        assert result.allowed is True
        assert result.retry_after is None


class TestLimiterConfiguration:

    def test_create_from_settings(self):
        config = Settings(rate_limit_window_seconds=30, rate_limit_max_tracked_identities=7)
        limiter = create_rate_limiter(config)
        assert limiter.window_seconds == 30
        assert limiter.max_tracked_identities == 7


class TestResolveIdentity:
    """Tests for deriving the rate limit identity from a request."""

    def _identity_app(self, config: Settings) -> TestClient:
        app = FastAPI()

        @app.get("/whoami")
        async def whoami(request: Request):
            return {"identity": resolve_identity(request, config)}

        return TestClient(app)

    def test_shared_mode_uses_fixed_token(self):
        client = self._identity_app(Settings(rate_limit_identity_mode="shared"))
        resp = client.get("/whoami", headers={"Authorization": "Bearer secret"})
        assert resp.json()["identity"] == "CACHE_TOKEN"

    def test_client_mode_hashes_api_key(self):
        client = self._identity_app(Settings(rate_limit_identity_mode="client"))
        resp = client.get("/whoami", headers={"Authorization": "Bearer secret"})
        identity = resp.json()["identity"]
        assert identity.startswith("ratelimit:apikey:")
        assert "secret" not in identity

    def test_client_mode_falls_back_to_forwarded_ip(self):
        client = self._identity_app(Settings(rate_limit_identity_mode="client"))
        first = client.get("/whoami", headers={"X-Forwarded-For": "10.0.0.1, 10.0.0.2"}).json()
        second = client.get("/whoami", headers={"X-Forwarded-For": "10.0.0.1"}).json()
        other = client.get("/whoami", headers={"X-Forwarded-For": "10.0.0.9"}).json()

        assert first["identity"].startswith("ratelimit:ip:")
        assert first == second
        assert first != other

    def test_client_mode_rejects_oversized_key(self):
        client = self._identity_app(Settings(rate_limit_identity_mode="client"))
        with pytest.raises(InvalidInputError) as exc_info:
            client.get("/whoami", headers={"Authorization": "Bearer " + "k" * 600})
        assert exc_info.value.field == "authorization"
        assert exc_info.value.status_code == 400
