"""Core utilities for the analysis gateway."""

from resumegate.app.core.cache import CacheBackend, InMemoryCache
from resumegate.app.core.config import settings
from resumegate.app.core.logging import get_logger, setup_logging
from resumegate.app.core.utils import request_fingerprint, serialize_profile

__all__ = [
    "CacheBackend",
    "InMemoryCache",
    "settings",
    "get_logger",
    "setup_logging",
    "request_fingerprint",
    "serialize_profile",
]
