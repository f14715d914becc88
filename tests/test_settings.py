import pytest
from pydantic import ValidationError

from resumegate.app.core.config import Settings


def test_cors_origins_accepts_host_without_json(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "43.163.94.63")

    settings = Settings(_env_file=None)
    assert "http://43.163.94.63" in settings.cors_origins
    assert "https://43.163.94.63" in settings.cors_origins


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('["http://localhost:5173"]', ["http://localhost:5173"]),
        ("*", ["*"]),
        ("[]", []),
        ("", []),
        ("http://a.test, http://b.test", ["http://a.test", "http://b.test"]),
    ],
)
def test_cors_origins_parsing_variants(monkeypatch, raw: str, expected: list[str]) -> None:
    monkeypatch.setenv("CORS_ORIGINS", raw)

    settings = Settings(_env_file=None)
    assert settings.cors_origins == expected


def test_defaults(monkeypatch) -> None:
    for name in ("RATE_LIMIT_JOB_MATCH", "CACHE_DEFAULT_TTL", "CACHE_MAX_ENTRIES", "LLM_PROVIDER"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)
    assert settings.rate_limit_window_seconds == 60
    assert settings.rate_limit_job_match == 5
    assert settings.rate_limit_max_tracked_identities == 500
    assert settings.rate_limit_identity_mode == "shared"
    assert settings.cache_max_entries == 500
    assert settings.cache_default_ttl == 300


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_JOB_MATCH", "20")
    monkeypatch.setenv("RATE_LIMIT_IDENTITY_MODE", "client")
    monkeypatch.setenv("CACHE_ENABLED", "false")

    settings = Settings(_env_file=None)
    assert settings.rate_limit_job_match == 20
    assert settings.rate_limit_identity_mode == "client"
    assert settings.cache_enabled is False


@pytest.mark.parametrize(
    "overrides",
    [
        {"rate_limit_job_match": 0},
        {"rate_limit_window_seconds": -1},
        {"cache_max_entries": 0},
        {"cache_default_ttl": 0},
        {"llm_timeout_seconds": 0},
        {"rate_limit_identity_mode": "per-user"},
        {"llm_provider": "anthropic"},
    ],
)
def test_invalid_values_rejected(overrides) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
