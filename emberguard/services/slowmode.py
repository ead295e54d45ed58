"""
EmberGuard - Auto Slow Mode
===========================

Per-channel message rate monitor that recommends slow mode.

DESIGN:
    Counts messages per channel over the last minute. When a community
    has auto slow mode on and a channel goes over its threshold, one
    ENABLE_SLOWMODE action is produced, then the channel is quiet for a
    cooldown so a busy channel is not re-throttled on every message.
    The action carries revert_after_seconds; turning slow mode back off
    is the integration layer's job.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Optional, Tuple

from emberguard.core.constants import (
    MAX_TRACKED_CHANNELS,
    SLOWMODE_COOLDOWN,
    SLOWMODE_REVERT_AFTER,
    SLOWMODE_WINDOW,
)
from emberguard.models.community import SlowModeSettings
from emberguard.models.verdicts import ActionKind, ModerationAction
from emberguard.utils.cache import LRUCache


@dataclass
class ChannelActivity:
    timestamps: Deque[float] = field(default_factory=deque)
    last_triggered_at: Optional[float] = None


class ChannelActivityMonitor:
    """Tracks recent message times per (community, channel)."""

    def __init__(
        self,
        window_seconds: int = SLOWMODE_WINDOW,
        cooldown_seconds: int = SLOWMODE_COOLDOWN,
        revert_after_seconds: int = SLOWMODE_REVERT_AFTER,
        max_tracked: int = MAX_TRACKED_CHANNELS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.window_seconds = window_seconds
        self.cooldown_seconds = cooldown_seconds
        self.revert_after_seconds = revert_after_seconds
        self._clock = clock
        self._channels: LRUCache[Tuple[str, str], ChannelActivity] = LRUCache(max_tracked)

    def record(
        self,
        community_id: str,
        channel_id: str,
        settings: SlowModeSettings,
        now: Optional[float] = None,
    ) -> Optional[ModerationAction]:
        """
        Count one message and decide whether to enable slow mode.

        Returns:
            An ENABLE_SLOWMODE action, or None.
        """
        if not settings.auto_enable:
            return None

        now = self._clock() if now is None else now
        key = (str(community_id), str(channel_id))
        activity = self._channels.get_or_create(key, ChannelActivity)

        cutoff = now - self.window_seconds
        while activity.timestamps and activity.timestamps[0] <= cutoff:
            activity.timestamps.popleft()
        activity.timestamps.append(now)

        count = len(activity.timestamps)
        if count <= settings.threshold:
            return None
        if (
            activity.last_triggered_at is not None
            and now - activity.last_triggered_at < self.cooldown_seconds
        ):
            return None

        activity.last_triggered_at = now
        return ModerationAction(
            kind=ActionKind.ENABLE_SLOWMODE,
            channel_id=str(channel_id),
            duration_seconds=settings.duration_seconds,
            revert_after_seconds=self.revert_after_seconds,
            count=count,
            reason=f"Auto slow mode: {count} messages in the last minute",
        )

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop channels with no recent messages and no active cooldown."""
        now = self._clock() if now is None else now
        horizon = now - max(self.window_seconds, self.cooldown_seconds)

        def stale(_, activity: ChannelActivity) -> bool:
            last_seen = activity.timestamps[-1] if activity.timestamps else None
            recent = last_seen is not None and last_seen > horizon
            cooling = activity.last_triggered_at is not None and activity.last_triggered_at > horizon
            return not recent and not cooling

        return self._channels.prune(stale)

    def __len__(self) -> int:
        return len(self._channels)


__all__ = ["ChannelActivityMonitor", "ChannelActivity"]
