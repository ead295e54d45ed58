"""
EmberGuard - Moderation Engine
==============================

Entry point for the integration layer.

DESIGN:
    The engine wires one ConfigStore, one HeatTracker, one
    ContentClassifier and one JoinPatternDetector into a
    ModerationCoordinator and exposes the operations a bot needs:

    - evaluate_message / evaluate_join for the event path
    - get_config / update_config / set_panic_mode /
      apply_recommended_settings for admin commands
    - tickets_due_for_auto_close for the ticket scheduler
    - run_maintenance_sweep, start and shutdown for the lifecycle

    Nothing here calls Discord. Every returned action is executed by the
    caller.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from emberguard.core.config import EngineConfig, get_config
from emberguard.core.constants import HEAT_SNAPSHOT_NAME
from emberguard.core.logger import logger
from emberguard.models.community import CommunityConfig
from emberguard.models.events import JoinEvent, MessageEvent
from emberguard.models.verdicts import EvaluationResult
from emberguard.services.antispam import HeatTracker
from emberguard.services.content_filter import ContentClassifier
from emberguard.services.maintenance import MaintenanceService
from emberguard.services.moderation import ModerationCoordinator, ObserveRateLimiter
from emberguard.services.panic import (
    activate_panic,
    apply_recommended_settings,
    deactivate_panic,
)
from emberguard.services.raid import JoinPatternDetector
from emberguard.services.slowmode import ChannelActivityMonitor
from emberguard.services.tickets import TicketInfo, tickets_due_for_auto_close
from emberguard.storage.config_store import ConfigStore, StoreResult


# Keys an admin patch may not touch
PROTECTED_KEYS = frozenset({"stats"})


def deep_merge(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge patch into a copy of base; non-dict values replace."""
    merged = dict(base)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ModerationEngine:
    """
    Facade over the moderation core.

    Attributes:
        settings: Engine-wide configuration.
        store: Per-community config and stats.
        heat_tracker: Spam heat state.
        join_detector: Join windows.
        coordinator: Event orchestration.
        maintenance: Periodic background tasks.
    """

    def __init__(
        self,
        settings: Optional[EngineConfig] = None,
        store: Optional[ConfigStore] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings or get_config()
        self.clock = clock

        self.store = store or ConfigStore(
            self.settings.data_dir,
            lock_timeout=self.settings.lock_timeout,
            max_bytes=self.settings.max_config_bytes,
            io_retries=self.settings.io_retries,
        )
        self.heat_tracker = HeatTracker(
            decay_period=self.settings.heat_decay_period,
            heat_cap=self.settings.heat_cap,
            history_size=self.settings.heat_history_size,
            idle_eviction=self.settings.heat_idle_eviction,
            max_tracked=self.settings.max_tracked_actors,
            snapshot_max_age=self.settings.heat_snapshot_max_age,
            clock=clock,
        )
        self.classifier = ContentClassifier()
        self.join_detector = JoinPatternDetector(
            max_tracked=self.settings.max_tracked_communities,
            clock=clock,
        )
        self.coordinator = ModerationCoordinator(
            store=self.store,
            heat_tracker=self.heat_tracker,
            classifier=self.classifier,
            join_detector=self.join_detector,
            rate_limiter=ObserveRateLimiter(
                min_interval=self.settings.observe_min_interval,
                max_tracked=self.settings.max_tracked_actors,
                clock=clock,
            ),
            activity_monitor=ChannelActivityMonitor(clock=clock),
            severe_heat=self.settings.severe_heat,
            mute_seconds=self.settings.spam_mute_seconds,
            clock=clock,
        )
        self.maintenance = MaintenanceService(self)

        if self.settings.error_webhook_url:
            logger.set_webhook(self.settings.error_webhook_url)

        logger.tree("Moderation Engine Initialized", [
            ("Data Dir", str(self.settings.data_dir)),
            ("Heat Cap", str(self.settings.heat_cap)),
            ("Severe Heat", str(self.settings.severe_heat)),
            ("Panic Duration", f"{self.settings.panic_duration // 60} min"),
            ("Lock Timeout", f"{self.settings.lock_timeout}s"),
        ], emoji="🔥")

    # =========================================================================
    # Event Path
    # =========================================================================

    async def evaluate_message(self, event: MessageEvent) -> EvaluationResult:
        return await self.coordinator.evaluate_message(event)

    async def evaluate_join(self, event: JoinEvent) -> EvaluationResult:
        return await self.coordinator.evaluate_join(event)

    # =========================================================================
    # Administration
    # =========================================================================

    async def get_config(self, community_id: str) -> CommunityConfig:
        return await self.store.get(community_id)

    async def update_config(self, community_id: str, patch: Dict[str, Any]) -> StoreResult:
        """
        Merge an admin patch into a community's config.

        Nested dicts merge key by key; values are clamped and validated
        like any stored record. The stats block cannot be patched.

        Returns:
            StoreResult with the saved config, or error="invalid_patch" /
            "lock_timeout" / "io_error".
        """
        if not isinstance(patch, dict):
            return StoreResult(False, error="invalid_patch")

        clean_patch = {k: v for k, v in patch.items() if k not in PROTECTED_KEYS}

        def apply_patch(config: CommunityConfig) -> None:
            merged = CommunityConfig.from_stored(deep_merge(config.to_record(), clean_patch))
            for name in CommunityConfig.model_fields:
                if name not in PROTECTED_KEYS:
                    setattr(config, name, getattr(merged, name))

        result = await self.store.update(community_id, apply_patch)
        if result.success:
            logger.tree("Config Updated", [
                ("Community", str(community_id)),
                ("Sections", ", ".join(sorted(clean_patch)) or "none"),
            ], emoji="⚙️")
        return result

    async def set_panic_mode(self, community_id: str, active: bool) -> StoreResult:
        """Manually enter or leave panic mode."""
        now = self.clock()

        def toggle(config: CommunityConfig) -> bool:
            if active:
                return activate_panic(config, now)
            return deactivate_panic(config)

        result = await self.store.update(community_id, toggle)
        if result.success:
            logger.tree("Panic Mode " + ("Activated" if active else "Deactivated"), [
                ("Community", str(community_id)),
                ("Source", "manual"),
            ], emoji="🚨" if active else "🟢")
        return result

    async def apply_recommended_settings(self, community_id: str) -> StoreResult:
        """Quick setup: switch on the core protections."""
        result = await self.store.update(community_id, apply_recommended_settings)
        if result.success:
            logger.success("Recommended Settings Applied", [("Community", str(community_id))])
        return result

    async def tickets_due_for_auto_close(
        self,
        community_id: str,
        tickets: Iterable[TicketInfo],
        now: Optional[float] = None,
    ) -> List[str]:
        config = await self.store.get(community_id)
        now = self.clock() if now is None else now
        return tickets_due_for_auto_close(tickets, config.tickets, now)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def run_maintenance_sweep(self) -> Dict[str, Dict[str, Any]]:
        return await self.maintenance.run_all_tasks()

    async def start(self, schedule_maintenance: bool = True) -> None:
        """
        Restore the heat snapshot and start background maintenance.

        Args:
            schedule_maintenance: False when an external scheduler calls
                run_maintenance_sweep() instead.
        """
        snapshot = await self.store.load_snapshot(HEAT_SNAPSHOT_NAME)
        restored = self.heat_tracker.restore(snapshot, self.clock()) if snapshot else 0

        if schedule_maintenance:
            self.maintenance.start()

        logger.tree("Moderation Engine Started", [
            ("Heat States Restored", str(restored)),
            ("Maintenance", "scheduled" if schedule_maintenance else "external"),
        ], emoji="🚀")

    async def shutdown(self) -> None:
        """Stop maintenance and write a final heat snapshot."""
        await self.maintenance.stop()
        snapshot = self.heat_tracker.snapshot(self.clock())
        result = await self.store.save_snapshot(HEAT_SNAPSHOT_NAME, snapshot)
        logger.tree("Moderation Engine Stopped", [
            ("Heat States Saved", str(len(snapshot["actors"])) if result.success else "failed"),
        ], emoji="🛑")


__all__ = ["ModerationEngine", "deep_merge"]
