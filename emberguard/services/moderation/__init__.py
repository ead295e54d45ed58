"""
EmberGuard - Moderation Package
===============================

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .coordinator import (
    ModerationCoordinator,
    STAT_CONTENT,
    STAT_JOIN_GATE,
    STAT_MASS_JOIN,
    STAT_SPAM,
)
from .rate_limiter import ObserveRateLimiter
from .reasons import describe_violations

__all__ = [
    "ModerationCoordinator",
    "ObserveRateLimiter",
    "describe_violations",
    "STAT_CONTENT",
    "STAT_JOIN_GATE",
    "STAT_MASS_JOIN",
    "STAT_SPAM",
]
