"""Middleware package for the analysis gateway."""

from resumegate.app.middleware.rate_limit import (
    InMemoryRateLimiter,
    RateLimitResult,
    create_rate_limiter,
    resolve_identity,
)
from resumegate.app.middleware.request_id import RequestIdMiddleware, get_request_id
from resumegate.app.middleware.request_size import RequestSizeLimitMiddleware

__all__ = [
    "InMemoryRateLimiter",
    "RateLimitResult",
    "create_rate_limiter",
    "resolve_identity",
    "RequestIdMiddleware",
    "get_request_id",
    "RequestSizeLimitMiddleware",
]
