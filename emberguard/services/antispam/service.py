"""
EmberGuard - Heat Tracker
=========================

Per-actor decaying "heat" accumulator driving spam classification.

DESIGN:
    Every message adds a score built from independent rule hits, and
    heat drains by one point per decay period of idle time. A burst of
    similar messages therefore climbs past the community threshold, while
    normal chatter decays back to zero between messages.

    Heat is capped so one extreme burst cannot keep an actor flagged for
    an unbounded time. State lives in a bounded LRU keyed by
    (actor, community); sweep() drops idle actors and the capacity bound
    drops the least recently active ones first.

    observe() never awaits. The tracker does not deduplicate deliveries;
    the coordinator rate-limits observe calls per actor.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from collections import deque
from typing import Any, Callable, Dict, List, Optional, Tuple

from emberguard.core.constants import (
    HEAT_CAP,
    HEAT_DECAY_PERIOD,
    HEAT_HISTORY_SIZE,
    HEAT_IDLE_EVICTION,
    HEAT_SNAPSHOT_MAX_AGE,
    MAX_TRACKED_ACTORS,
)
from emberguard.core.logger import logger
from emberguard.models.community import CommunityConfig
from emberguard.utils.cache import LRUCache

from .constants import (
    RAPID_REPOST_SECONDS,
    RULE_DUPLICATE,
    RULE_EMOJIS,
    RULE_LENGTH,
    RULE_MENTIONS,
    RULE_NEWLINES,
    RULE_RAPID,
    RULE_WEIGHTS,
)
from .detectors import count_emojis, count_mentions, count_newlines, normalize_content
from .models import ActorHeatState, HeatObservation


ActorKey = Tuple[str, str]

SNAPSHOT_VERSION = 1


class HeatTracker:
    """
    Tracks heat per (actor, community).

    Attributes:
        decay_period: Seconds of idle time per heat point lost.
        heat_cap: Upper bound on heat.
        history_size: Recent normalized contents kept per actor.
        idle_eviction: Seconds without messages before sweep() drops an actor.
        snapshot_max_age: Entries older than this are dropped on restore().
    """

    def __init__(
        self,
        decay_period: int = HEAT_DECAY_PERIOD,
        heat_cap: int = HEAT_CAP,
        history_size: int = HEAT_HISTORY_SIZE,
        idle_eviction: int = HEAT_IDLE_EVICTION,
        max_tracked: int = MAX_TRACKED_ACTORS,
        snapshot_max_age: int = HEAT_SNAPSHOT_MAX_AGE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.decay_period = decay_period
        self.heat_cap = heat_cap
        self.history_size = history_size
        self.idle_eviction = idle_eviction
        self.snapshot_max_age = snapshot_max_age
        self._clock = clock
        self._states: LRUCache[ActorKey, ActorHeatState] = LRUCache(max_tracked)

    # =========================================================================
    # Observation
    # =========================================================================

    def observe(
        self,
        actor_id: str,
        community_id: str,
        content: str,
        config: CommunityConfig,
        now: Optional[float] = None,
    ) -> HeatObservation:
        """
        Score one message and update the actor's heat.

        Args:
            actor_id: Author of the message.
            community_id: Community the message was posted in.
            content: Raw message text.
            config: The community's current config.
            now: Event time; defaults to the tracker's clock.

        Returns:
            HeatObservation with the new heat and whether it meets the
            community's heat threshold.
        """
        now = self._clock() if now is None else now
        settings = config.anti_spam
        key = (str(actor_id), str(community_id))

        state = self._states.get(key)
        first_message = state is None
        if first_message:
            state = ActorHeatState(
                last_message_at=now,
                recent_contents=deque(maxlen=self.history_size),
            )

        elapsed = max(0.0, now - state.last_message_at)
        if not first_message:
            state.heat = max(0, state.heat - int(elapsed // self.decay_period))

        normalized = normalize_content(content)
        rules: List[str] = []

        if normalized and normalized in state.recent_contents:
            rules.append(RULE_DUPLICATE)
        if not first_message and elapsed < RAPID_REPOST_SECONDS:
            rules.append(RULE_RAPID)
        if len(content) > settings.character_limit:
            rules.append(RULE_LENGTH)
        if count_emojis(content) > settings.emoji_limit:
            rules.append(RULE_EMOJIS)
        if count_mentions(content) > settings.mention_limit:
            rules.append(RULE_MENTIONS)
        if count_newlines(content) > settings.newline_limit:
            rules.append(RULE_NEWLINES)

        score = sum(RULE_WEIGHTS[rule] for rule in rules)
        state.heat = min(self.heat_cap, state.heat + score)
        state.last_message_at = now
        state.recent_contents.append(normalized)

        for (evicted_actor, evicted_community), _ in self._states.set(key, state):
            logger.debug("Heat State Evicted", [
                ("Actor", evicted_actor),
                ("Community", evicted_community),
                ("Reason", "capacity"),
            ])

        return HeatObservation(
            heat=state.heat,
            triggered=state.heat >= settings.heat_threshold,
            score=score,
            rules=tuple(rules),
        )

    def heat_of(self, actor_id: str, community_id: str, now: Optional[float] = None) -> int:
        """Current heat with decay applied, without recording anything."""
        state = self._states.get((str(actor_id), str(community_id)), touch=False)
        if state is None:
            return 0
        now = self._clock() if now is None else now
        elapsed = max(0.0, now - state.last_message_at)
        return max(0, state.heat - int(elapsed // self.decay_period))

    # =========================================================================
    # Reset & Eviction
    # =========================================================================

    def clear(self, actor_id: str, community_id: Optional[str] = None) -> int:
        """
        Reset an actor's state.

        Args:
            actor_id: Actor to reset.
            community_id: Limit the reset to one community; None clears all.

        Returns:
            Number of entries removed.
        """
        actor_id = str(actor_id)
        if community_id is not None:
            return int(self._states.delete((actor_id, str(community_id))))
        return self._states.prune(lambda key, _: key[0] == actor_id)

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Drop idle actors and enforce the capacity bound.

        Returns:
            Number of entries removed.
        """
        now = self._clock() if now is None else now
        cutoff = now - self.idle_eviction
        removed = self._states.prune(lambda _, state: state.last_message_at < cutoff)
        removed += len(self._states.enforce_capacity())
        return removed

    def __len__(self) -> int:
        return len(self._states)

    # =========================================================================
    # Snapshot / Restore
    # =========================================================================

    def snapshot(self, now: Optional[float] = None) -> Dict[str, Any]:
        """Serializable copy of all tracked state."""
        now = self._clock() if now is None else now
        return {
            "version": SNAPSHOT_VERSION,
            "taken_at": now,
            "actors": [
                {
                    "actor_id": actor_id,
                    "community_id": community_id,
                    "heat": state.heat,
                    "last_message_at": state.last_message_at,
                    "recent_contents": list(state.recent_contents),
                }
                for (actor_id, community_id), state in self._states.items()
            ],
        }

    def restore(self, data: Any, now: Optional[float] = None) -> int:
        """
        Load state from snapshot(), skipping anything stale or malformed.

        Entries whose last message is older than snapshot_max_age are
        dropped; decay would have zeroed them anyway.

        Returns:
            Number of actors restored.
        """
        if not isinstance(data, dict) or data.get("version") != SNAPSHOT_VERSION:
            return 0
        entries = data.get("actors")
        if not isinstance(entries, list):
            return 0

        now = self._clock() if now is None else now
        cutoff = now - self.snapshot_max_age
        restored = 0

        for entry in entries:
            try:
                actor_id = str(entry["actor_id"])
                community_id = str(entry["community_id"])
                last_message_at = float(entry["last_message_at"])
                heat = int(entry["heat"])
                contents = [str(c) for c in entry.get("recent_contents", [])]
            except (KeyError, TypeError, ValueError, AttributeError):
                continue
            if last_message_at < cutoff or last_message_at > now:
                continue

            history = deque(contents[-self.history_size:], maxlen=self.history_size)
            self._states.set(
                (actor_id, community_id),
                ActorHeatState(
                    heat=max(0, min(self.heat_cap, heat)),
                    last_message_at=last_message_at,
                    recent_contents=history,
                ),
            )
            restored += 1

        return restored


__all__ = ["HeatTracker"]
