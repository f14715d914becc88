"""Shared fixtures for the analysis gateway tests."""

import json

import pytest

from resumegate.app.core.cache import InMemoryCache
from resumegate.app.core.config import Settings
from resumegate.app.middleware.rate_limit import InMemoryRateLimiter
from resumegate.app.providers.mock import MockProvider
from resumegate.app.services.analysis_gateway import AnalysisGateway


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


VALID_MATCH = {
    "score": 80,
    "presentKeywords": ["Python", "FastAPI"],
    "missingKeywords": ["Kubernetes"],
    "suggestions": {
        "skills": ["Mention Docker"],
        "experience": ["Quantify results"],
        "education": [],
        "projects": ["Add a deployment project"],
    },
}


def fenced(payload: dict) -> str:
    """Wrap a payload the way chat models tend to."""
    return f"Sure! Here is the result:\n```json\n{json.dumps(payload)}\n```\nLet me know if you need more."


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        llm_provider="mock",
        llm_timeout_seconds=1.0,
        rate_limit_window_seconds=60,
        rate_limit_max_tracked_identities=500,
        rate_limit_job_match=5,
        rate_limit_resume_optimize=5,
        rate_limit_identity_mode="shared",
        cache_enabled=True,
        cache_max_entries=500,
        cache_default_ttl=300,
    )


@pytest.fixture
def mock_provider():
    return MockProvider(response=fenced(VALID_MATCH))


@pytest.fixture
def gateway(test_settings, mock_provider, clock):
    limiter = InMemoryRateLimiter(window_seconds=60, max_tracked_identities=500, clock=clock)
    cache = InMemoryCache(max_entries=500, clock=clock)
    return AnalysisGateway(
        rate_limiter=limiter,
        cache=cache,
        provider=mock_provider,
        config=test_settings,
    )
