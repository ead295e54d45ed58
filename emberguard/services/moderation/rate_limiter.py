"""
EmberGuard - Observe Rate Limiter
=================================

Caller-side guard against duplicate delivery of the same event.

DESIGN:
    The heat tracker scores every call, so a gateway that redelivers a
    message would double-count it. The coordinator allows at most one
    observe per (actor, community) per min_interval; a limited event
    skips the spam check only, never the content check.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import Callable, Optional, Tuple

from emberguard.core.constants import MAX_TRACKED_ACTORS, OBSERVE_MIN_INTERVAL
from emberguard.utils.cache import LRUCache


class ObserveRateLimiter:
    """Minimum-interval limiter keyed by (actor, community)."""

    def __init__(
        self,
        min_interval: float = OBSERVE_MIN_INTERVAL,
        max_tracked: int = MAX_TRACKED_ACTORS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._last_allowed: LRUCache[Tuple[str, str], float] = LRUCache(max_tracked)

    def allow(self, actor_id: str, community_id: str, now: Optional[float] = None) -> bool:
        """True (and recorded) if the pair has not been allowed within min_interval."""
        now = self._clock() if now is None else now
        key = (str(actor_id), str(community_id))
        last = self._last_allowed.get(key)
        if last is not None and now - last < self.min_interval:
            return False
        self._last_allowed.set(key, now)
        return True

    def sweep(self, now: Optional[float] = None) -> int:
        now = self._clock() if now is None else now
        return self._last_allowed.prune(lambda _, last: now - last >= self.min_interval)


__all__ = ["ObserveRateLimiter"]
