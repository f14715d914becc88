"""Rate limiting for the analysis gateway.

This package provides the per-identity fixed window limiter used by the
gateway and the helper that derives a rate limit identity from a request.
"""

import hashlib

from fastapi import Request

from resumegate.app.core.config import Settings, settings as default_settings
from resumegate.app.core.logging import get_logger
from resumegate.app.exceptions import InvalidInputError

# Re-export models
from resumegate.app.middleware.rate_limit.models import (
    RateLimitResult,
    RateLimitWindow,
)

# Re-export backends
from resumegate.app.middleware.rate_limit.backends import (
    InMemoryRateLimiter,
    RateLimitBackend,
)

logger = get_logger(__name__)

__all__ = [
    # Models
    "RateLimitResult",
    "RateLimitWindow",
    # Backends
    "RateLimitBackend",
    "InMemoryRateLimiter",
    # Helpers
    "create_rate_limiter",
    "resolve_identity",
]


def create_rate_limiter(config: Settings | None = None) -> InMemoryRateLimiter:
    """Build a rate limiter from settings."""
    config = config or default_settings
    return InMemoryRateLimiter(
        window_seconds=config.rate_limit_window_seconds,
        max_tracked_identities=config.rate_limit_max_tracked_identities,
    )


def resolve_identity(request: Request, config: Settings | None = None) -> str:
    """Get the rate limit identity for a request.

    In ``shared`` mode every caller shares one fixed token. In ``client``
    mode the identity is the caller's API key if one is presented, otherwise
    the client IP. Both are hashed so raw keys and addresses are never held
    in memory.

    Args:
        request: FastAPI request object
        config: Settings to read the identity mode from

    Returns:
        Rate limit identity string (hashed, no sensitive data exposed)
    """
    config = config or default_settings
    if config.rate_limit_identity_mode == "shared":
        return config.rate_limit_shared_identity

    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        api_key = auth[7:].strip()
        # Bound key length so oversized headers cannot be used for hashing DoS
        if len(api_key) > 512:
            logger.warning("Rejected oversized API key in rate limit identity", extra={"path": request.url.path})
            raise InvalidInputError("authorization", "API key too long (max 512 characters)")
        if api_key:
            key_hash = hashlib.sha256(api_key.encode()).hexdigest()[:32]
            return f"ratelimit:apikey:{key_hash}"

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        client_ip = forwarded.split(",")[0].strip()
    else:
        client_ip = request.client.host if request.client else "unknown"

    ip_hash = hashlib.sha256(client_ip.encode()).hexdigest()[:32]
    return f"ratelimit:ip:{ip_hash}"
