"""Rate limiting data models.

This module contains dataclasses for rate limit state and results.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""
    allowed: bool
    limit: int
    remaining: int
    reset_time: float
    retry_after: Optional[int] = None


@dataclass
class RateLimitWindow:
    """Per-identity fixed window state."""
    identity: str
    count: int
    window_start: float
