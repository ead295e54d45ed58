"""
EmberGuard - Join Pattern Detector
==================================

Sliding-window mass-join detection plus per-actor join gate.

DESIGN:
    Every join is recorded in its community's window before anything
    else is decided. A mass join is a community-wide emergency, so it is
    reported even when the joiner would also fail the gate; the gate
    (account age, then avatar) is only consulted when no raid is in
    progress.

    Windows live in a bounded LRU keyed by community. sweep() prunes
    stale joins, drops empty windows, and enforces the capacity bound.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import Callable, Optional

from emberguard.core.constants import MAX_TRACKED_COMMUNITIES, SECONDS_PER_DAY
from emberguard.core.logger import logger
from emberguard.models.community import CommunityConfig
from emberguard.models.verdicts import (
    NO_VERDICT,
    JoinGateVerdict,
    MassJoinVerdict,
    Verdict,
)
from emberguard.utils.cache import LRUCache

from .models import JoinRecord, JoinWindow


REASON_NEW_ACCOUNT = "new_account"
REASON_NO_AVATAR = "no_avatar"


class JoinPatternDetector:
    """Tracks recent joins per community and classifies each new one."""

    def __init__(
        self,
        max_tracked: int = MAX_TRACKED_COMMUNITIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._clock = clock
        self._windows: LRUCache[str, JoinWindow] = LRUCache(max_tracked)

    def observe_join(
        self,
        actor_id: str,
        community_id: str,
        account_created_at: float,
        has_avatar: bool,
        config: CommunityConfig,
        now: Optional[float] = None,
    ) -> Verdict:
        """
        Record a join and classify it.

        Args:
            actor_id: The joining account.
            community_id: Community joined.
            account_created_at: Account creation time (epoch seconds).
            has_avatar: Whether the account has a custom avatar.
            config: The community's config.
            now: Join time; defaults to the detector's clock.

        Returns:
            MassJoinVerdict, JoinGateVerdict, or NO_VERDICT.
        """
        now = self._clock() if now is None else now
        raid = config.raid_control
        key = str(community_id)

        window = self._windows.get(key)
        if window is None:
            window = JoinWindow(window_seconds=raid.window_seconds)
        window.window_seconds = raid.window_seconds
        window.prune(now)
        window.entries.append(JoinRecord(
            actor_id=str(actor_id),
            joined_at=now,
            account_age_at_join=max(0.0, now - account_created_at),
        ))

        for evicted_key, _ in self._windows.set(key, window):
            logger.debug("Join Window Evicted", [("Community", evicted_key), ("Reason", "capacity")])

        count = len(window.entries)
        if count > raid.join_limit:
            return MassJoinVerdict(count=count)

        gate = raid.join_gate
        if not gate.enabled:
            return NO_VERDICT
        if now - account_created_at < gate.min_account_age_days * SECONDS_PER_DAY:
            return JoinGateVerdict(reason=REASON_NEW_ACCOUNT)
        if gate.require_avatar and not has_avatar:
            return JoinGateVerdict(reason=REASON_NO_AVATAR)
        return NO_VERDICT

    def recent_join_count(self, community_id: str, now: Optional[float] = None) -> int:
        window = self._windows.get(str(community_id), touch=False)
        if window is None:
            return 0
        now = self._clock() if now is None else now
        cutoff = now - window.window_seconds
        return sum(1 for record in window.entries if record.joined_at > cutoff)

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Prune stale joins and drop empty windows.

        Returns:
            Number of windows removed.
        """
        now = self._clock() if now is None else now
        for _, window in self._windows.items():
            window.prune(now)
        removed = self._windows.prune(lambda _, window: not window.entries)
        removed += len(self._windows.enforce_capacity())
        return removed

    def __len__(self) -> int:
        return len(self._windows)


__all__ = [
    "JoinPatternDetector",
    "REASON_NEW_ACCOUNT",
    "REASON_NO_AVATAR",
]
