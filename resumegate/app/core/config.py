"""Application settings loaded from the environment."""

import json
import re
from typing import Annotated, Any, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_origins(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(item).strip() for item in raw]

    text = str(raw).strip()
    if text.startswith(("[", '"')):
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, list):
            return [str(item).strip() for item in decoded]
        if isinstance(decoded, str):
            text = decoded.strip()
    return re.split(r"[,\s]+", text)


def _parse_cors_origins(raw: Any) -> list[str]:
    """Normalize a CORS_ORIGINS value.

    Accepts a JSON list, ``*``, or comma/space separated origins. A bare host
    expands to its http and https origins, since browsers always send the
    scheme in the Origin header.
    """
    origins: list[str] = []
    for entry in _split_origins(raw):
        if not entry:
            continue
        if entry == "*":
            return ["*"]
        variants = [entry] if "://" in entry else [f"http://{entry}", f"https://{entry}"]
        for origin in variants:
            if origin not in origins:
                origins.append(origin)
    return origins


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Debug mode - enables detailed error responses
    debug: bool = False

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    # Rate limiting settings
    rate_limit_window_seconds: int = 60
    rate_limit_max_tracked_identities: int = 500
    rate_limit_job_match: int = 5  # requests per window
    rate_limit_resume_optimize: int = 5
    # shared: every caller shares one window (fixed token)
    # client: one window per API key / client IP
    rate_limit_identity_mode: Literal["shared", "client"] = "shared"
    rate_limit_shared_identity: str = "CACHE_TOKEN"

    # Result cache settings
    cache_enabled: bool = True
    cache_max_entries: int = 500
    cache_default_ttl: int = 300  # 5 minutes

    # LLM provider settings
    llm_provider: Literal["gemini", "openai", "mock"] = "gemini"
    llm_model: str | None = None  # defaults per provider when unset
    llm_timeout_seconds: float = 30.0
    llm_temperature: float = 0.2
    llm_max_output_tokens: int = 2048

    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_organization: str | None = None

    # HTTP Client connection pool settings
    httpx_connect_timeout: float = 10.0
    httpx_read_timeout: float = 60.0
    httpx_write_timeout: float = 10.0
    httpx_pool_timeout: float = 5.0
    httpx_keepalive_expiry: float = 30.0
    httpx_max_connections: int = 100
    httpx_max_keepalive_connections: int = 20

    # Request body limit (resumes are text, not uploads)
    max_request_body_bytes: int = 1024 * 1024

    # Use NoDecode so misconfigured values don't crash JSON parsing at startup.
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def decode_cors_origins(cls, v: Any) -> list[str]:
        return _parse_cors_origins(v)

    @field_validator(
        "rate_limit_window_seconds",
        "rate_limit_max_tracked_identities",
        "rate_limit_job_match",
        "rate_limit_resume_optimize",
        "cache_max_entries",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate limit and capacity values are positive."""
        if v < 1:
            raise ValueError("Rate limit and capacity values must be at least 1")
        return v

    @field_validator("cache_default_ttl")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v < 1:
            raise ValueError("cache_default_ttl must be at least 1 second")
        return v

    @field_validator(
        "llm_timeout_seconds",
        "httpx_connect_timeout",
        "httpx_read_timeout",
        "httpx_write_timeout",
        "httpx_pool_timeout",
    )
    @classmethod
    def validate_timeout_positive(cls, v: float) -> float:
        """Validate timeout values are positive."""
        if v <= 0:
            raise ValueError("Timeout values must be positive")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
