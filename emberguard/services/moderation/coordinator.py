"""
EmberGuard - Moderation Coordinator
===================================

Runs the detectors for each inbound event and decides the action.

DESIGN:
    Message events move Received -> SpamCheck -> [ContentCheck] -> Decided.
    Administrators and holders of a fully exempt role skip every check.
    A spam trigger short-circuits the content check, since the message
    is being deleted either way.

    Messages no check actioned are offered to auto-delete, which may add
    a SCHEDULE_DELETE follow-up. This applies to exempt actors too.

    An event without a community id is ignored before any lookup.

    Join events go through the join pattern detector only. A mass join
    switches the community into panic mode; a gate rejection kicks the
    joiner.

    Each check runs inside its own try/except. A detector that raises is
    logged and treated as "no verdict": the event gets no automated
    action, and the next event gets a fresh evaluation.

    Statistics are written through ConfigStore.update(), which re-reads
    the record under the community lock, so concurrent events never lose
    an increment. A failed stats write is reported in the result but
    never withholds the decided action.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import Callable, List, Optional, Tuple

from emberguard.core.constants import LOG_TRUNCATE_SHORT, SEVERE_HEAT, SPAM_MUTE_SECONDS
from emberguard.core.logger import logger
from emberguard.models.community import CommunityConfig
from emberguard.models.events import JoinEvent, MessageEvent
from emberguard.models.verdicts import (
    NO_ACTION,
    NO_VERDICT,
    ActionKind,
    ContentVerdict,
    EvaluationResult,
    JoinGateVerdict,
    MassJoinVerdict,
    ModerationAction,
    SpamVerdict,
    Violation,
)
from emberguard.services.antispam import HeatObservation, HeatTracker
from emberguard.services.auto_delete import auto_delete_action
from emberguard.services.content_filter import ContentClassifier
from emberguard.services.raid import JoinPatternDetector
from emberguard.services.slowmode import ChannelActivityMonitor
from emberguard.storage.config_store import ConfigStore

from .rate_limiter import ObserveRateLimiter
from .reasons import SPAM_MUTE_REASON, SPAM_WARNING, describe_join_gate, describe_violations


# Keys used in stats.violation_counts
STAT_SPAM = "spam"
STAT_CONTENT = "content"
STAT_MASS_JOIN = "mass_join"
STAT_JOIN_GATE = "join_gate"


class ModerationCoordinator:
    """
    Orchestrates the detectors for one process.

    All detectors are injected, so tests and alternative deployments can
    swap any of them.
    """

    def __init__(
        self,
        store: ConfigStore,
        heat_tracker: HeatTracker,
        classifier: ContentClassifier,
        join_detector: JoinPatternDetector,
        rate_limiter: Optional[ObserveRateLimiter] = None,
        activity_monitor: Optional[ChannelActivityMonitor] = None,
        severe_heat: int = SEVERE_HEAT,
        mute_seconds: int = SPAM_MUTE_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.heat_tracker = heat_tracker
        self.classifier = classifier
        self.join_detector = join_detector
        self.rate_limiter = rate_limiter or ObserveRateLimiter(clock=clock)
        self.activity_monitor = activity_monitor or ChannelActivityMonitor(clock=clock)
        self.severe_heat = severe_heat
        self.mute_seconds = mute_seconds
        self._clock = clock

    # =========================================================================
    # Message Events
    # =========================================================================

    async def evaluate_message(self, event: MessageEvent) -> EvaluationResult:
        """
        Decide what to do about one message.

        Returns:
            EvaluationResult with the verdict, the action, the stats as
            persisted, and any channel-level follow-ups (slow mode,
            auto-delete).
        """
        if not event.community_id:
            logger.debug("Event Without Community Ignored", [("Actor", str(event.actor_id))])
            return EvaluationResult()

        now = self._clock() if event.timestamp is None else event.timestamp
        config = await self.store.get(event.community_id)

        followups = self._activity_followups(event, config, now)

        if self._is_exempt(event, config):
            return EvaluationResult(followups=followups + self._auto_delete_followups(event, config))

        observation = self._spam_check(event, config, now)
        if observation is not None and observation.triggered:
            verdict = SpamVerdict(heat_at_trigger=observation.heat)
            action = self._spam_action(observation.heat)
            stat_kind = STAT_SPAM
        else:
            violations = self._content_check(event, config)
            if not violations:
                return EvaluationResult(followups=followups + self._auto_delete_followups(event, config))
            verdict = ContentVerdict(violations=tuple(violations))
            action = ModerationAction(
                kind=ActionKind.DELETE_AND_NOTIFY,
                delete_message=True,
                reason=describe_violations(violations),
            )
            stat_kind = STAT_CONTENT

        stats, persisted = await self._record_stats(event.community_id, stat_kind)

        logger.tree("Message Actioned", [
            ("Community", event.community_id),
            ("Channel", event.channel_id),
            ("Actor", event.actor_id),
            ("Verdict", type(verdict).__name__),
            ("Action", action.kind.value),
            ("Reason", (action.reason or "-")[:LOG_TRUNCATE_SHORT]),
            ("Stats Saved", "yes" if persisted else "no"),
        ], emoji="🛡️")

        return EvaluationResult(
            verdict=verdict,
            action=action,
            updated_stats=stats,
            stats_persisted=persisted,
            followups=followups,
        )

    def _is_exempt(self, event: MessageEvent, config: CommunityConfig) -> bool:
        if event.is_administrator:
            return True
        exempt = config.exempt_roles
        return bool(exempt) and any(str(role) in exempt for role in event.actor_roles)

    def _spam_check(
        self,
        event: MessageEvent,
        config: CommunityConfig,
        now: float,
    ) -> Optional[HeatObservation]:
        if not config.anti_spam.enabled:
            return None
        if not self.rate_limiter.allow(event.actor_id, event.community_id, now):
            logger.debug("Observe Rate Limited", [
                ("Actor", event.actor_id),
                ("Community", event.community_id),
            ])
            return None
        try:
            return self.heat_tracker.observe(
                event.actor_id, event.community_id, event.content, config, now=now
            )
        except Exception as e:
            self._log_check_failure("Spam Check", event.community_id, event.actor_id, e)
            return None

    def _spam_action(self, heat: int) -> ModerationAction:
        if heat > self.severe_heat:
            return ModerationAction(
                kind=ActionKind.MUTE,
                delete_message=True,
                duration_seconds=self.mute_seconds,
                reason=SPAM_MUTE_REASON,
            )
        return ModerationAction(
            kind=ActionKind.WARN,
            delete_message=True,
            reason=SPAM_WARNING,
        )

    def _content_check(self, event: MessageEvent, config: CommunityConfig) -> List[Violation]:
        try:
            return self.classifier.classify(
                event.content,
                config,
                channel_restriction=config.restriction_for(event.channel_id),
                actor_roles=event.actor_roles,
                has_attachments=event.has_attachments,
            )
        except Exception as e:
            self._log_check_failure("Content Check", event.community_id, event.actor_id, e)
            return []

    def _activity_followups(
        self,
        event: MessageEvent,
        config: CommunityConfig,
        now: float,
    ) -> List[ModerationAction]:
        try:
            action = self.activity_monitor.record(
                event.community_id, event.channel_id, config.slow_mode, now=now
            )
        except Exception as e:
            self._log_check_failure("Slow Mode Check", event.community_id, event.actor_id, e)
            return []
        if action is None:
            return []
        logger.tree("Auto Slow Mode Triggered", [
            ("Community", event.community_id),
            ("Channel", event.channel_id),
            ("Messages", str(action.count)),
            ("Duration", f"{action.duration_seconds}s"),
        ], emoji="🐌")
        return [action]

    def _auto_delete_followups(self, event: MessageEvent, config: CommunityConfig) -> List[ModerationAction]:
        try:
            action = auto_delete_action(event, config.auto_delete)
        except Exception as e:
            self._log_check_failure("Auto-Delete Check", event.community_id, event.actor_id, e)
            return []
        if action is None:
            return []
        logger.debug("Auto-Delete Scheduled", [
            ("Community", event.community_id),
            ("Channel", event.channel_id),
            ("Reason", action.reason or "-"),
            ("Delay", f"{action.delay_seconds}s"),
        ])
        return [action]

    # =========================================================================
    # Join Events
    # =========================================================================

    async def evaluate_join(self, event: JoinEvent) -> EvaluationResult:
        """Decide what to do about one member join."""
        if not event.community_id:
            logger.debug("Event Without Community Ignored", [("Actor", str(event.actor_id))])
            return EvaluationResult()

        now = self._clock() if event.timestamp is None else event.timestamp
        config = await self.store.get(event.community_id)

        if not config.raid_control.enabled:
            return EvaluationResult()

        try:
            verdict = self.join_detector.observe_join(
                event.actor_id,
                event.community_id,
                event.account_created_at,
                event.has_avatar,
                config,
                now=now,
            )
        except Exception as e:
            self._log_check_failure("Join Check", event.community_id, event.actor_id, e)
            return EvaluationResult()

        if isinstance(verdict, MassJoinVerdict):
            return await self._handle_mass_join(event, config, verdict, now)

        if isinstance(verdict, JoinGateVerdict):
            action = ModerationAction(
                kind=ActionKind.KICK,
                reason=describe_join_gate(verdict.reason),
            )
            stats, persisted = await self._record_stats(event.community_id, STAT_JOIN_GATE)
            logger.tree("Join Gate Rejected", [
                ("Community", event.community_id),
                ("Actor", event.actor_id),
                ("Reason", verdict.reason),
            ], emoji="🚪")
            return EvaluationResult(
                verdict=verdict,
                action=action,
                updated_stats=stats,
                stats_persisted=persisted,
            )

        return EvaluationResult(verdict=NO_VERDICT, action=NO_ACTION)

    async def _handle_mass_join(
        self,
        event: JoinEvent,
        config: CommunityConfig,
        verdict: MassJoinVerdict,
        now: float,
    ) -> EvaluationResult:
        newly_activated = {"value": not config.raid_control.panic_mode}

        def activate_panic(stored: CommunityConfig) -> None:
            newly_activated["value"] = not stored.raid_control.panic_mode
            if newly_activated["value"]:
                stored.raid_control.panic_mode = True
                stored.raid_control.panic_activated_at = now
            stored.stats.record(STAT_MASS_JOIN)

        stats, persisted = await self._update_and_report(event.community_id, activate_panic)

        action = ModerationAction(
            kind=ActionKind.RAID_ALERT,
            count=verdict.count,
            panic_newly_activated=newly_activated["value"],
            reason=f"Mass join: {verdict.count} joins within {config.raid_control.window_seconds}s",
        )

        logger.tree("RAID DETECTED", [
            ("Community", event.community_id),
            ("Joins In Window", str(verdict.count)),
            ("Window", f"{config.raid_control.window_seconds}s"),
            ("Panic Mode", "activated" if newly_activated["value"] else "already active"),
            ("Stats Saved", "yes" if persisted else "no"),
        ], emoji="🚨")

        return EvaluationResult(
            verdict=verdict,
            action=action,
            updated_stats=stats,
            stats_persisted=persisted,
        )

    # =========================================================================
    # Statistics
    # =========================================================================

    async def _record_stats(self, community_id: str, kind: str) -> Tuple[Optional[dict], bool]:
        return await self._update_and_report(community_id, lambda cfg: cfg.stats.record(kind))

    async def _update_and_report(
        self,
        community_id: str,
        mutator: Callable[[CommunityConfig], None],
    ) -> Tuple[Optional[dict], bool]:
        """
        Apply a mutation under the community lock.

        Returns:
            (stats as a dict or None, whether the write succeeded)
        """
        try:
            result = await self.store.update(community_id, mutator)
        except Exception as e:
            logger.error("Stats Update Failed", [
                ("Community", str(community_id)),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:LOG_TRUNCATE_SHORT]),
            ])
            return None, False

        stats = result.value.stats.model_dump(mode="json") if result.value is not None else None
        return stats, result.success

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _log_check_failure(check: str, community_id: str, actor_id: str, error: Exception) -> None:
        logger.error("Moderation Check Failed", [
            ("Check", check),
            ("Community", str(community_id)),
            ("Actor", str(actor_id)),
            ("Error Type", type(error).__name__),
            ("Error", str(error)[:LOG_TRUNCATE_SHORT]),
            ("Outcome", "no verdict"),
        ])


__all__ = [
    "ModerationCoordinator",
    "STAT_SPAM",
    "STAT_CONTENT",
    "STAT_MASS_JOIN",
    "STAT_JOIN_GATE",
]
