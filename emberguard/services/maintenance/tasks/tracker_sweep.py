"""
EmberGuard - Tracker Sweep Task
===============================

Evicts idle heat state, stale join windows, and quiet channels.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Any, Dict

from emberguard.core.logger import logger
from emberguard.services.maintenance.base import MaintenanceTask


class TrackerSweepTask(MaintenanceTask):
    """Run sweep() on every in-memory tracker."""

    name = "Tracker Sweep"

    async def run(self) -> Dict[str, Any]:
        now = self.engine.clock()
        coordinator = self.engine.coordinator

        heat = self.engine.heat_tracker.sweep(now)
        joins = self.engine.join_detector.sweep(now)
        channels = coordinator.activity_monitor.sweep(now)
        limiter = coordinator.rate_limiter.sweep(now)
        cleaned = heat + joins + channels + limiter

        if cleaned:
            logger.tree("Trackers Swept", [
                ("Heat States", str(heat)),
                ("Join Windows", str(joins)),
                ("Channels", str(channels)),
                ("Rate Limit Keys", str(limiter)),
                ("Still Tracked", str(len(self.engine.heat_tracker))),
            ], emoji="🧹")

        return {"success": True, "cleaned": cleaned}
