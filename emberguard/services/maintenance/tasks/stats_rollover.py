"""
EmberGuard - Stats Rollover Task
================================

Resets the daily and weekly action counters on the Eastern calendar.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict

from emberguard.core.config import NY_TZ
from emberguard.core.logger import logger
from emberguard.models.community import CommunityConfig, CommunityStats
from emberguard.services.maintenance.base import MaintenanceTask


def _local_date(timestamp: float) -> date:
    return datetime.fromtimestamp(timestamp, NY_TZ).date()


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def rollover_stats(stats: CommunityStats, now: float) -> bool:
    """
    Reset counters whose day or week has ended.

    Weeks start on Monday. A record without anchors is anchored at now
    and keeps its counts.

    Returns:
        True if anything changed.
    """
    today = _local_date(now)
    changed = False

    if stats.last_reset_at is None:
        stats.last_reset_at = now
        changed = True
    elif _local_date(stats.last_reset_at) != today:
        stats.actions_today = 0
        stats.last_reset_at = now
        changed = True

    if stats.week_started_at is None:
        stats.week_started_at = now
        changed = True
    elif _week_start(_local_date(stats.week_started_at)) != _week_start(today):
        stats.actions_week = 0
        stats.week_started_at = now
        changed = True

    return changed


class StatsRolloverTask(MaintenanceTask):
    """Apply the daily/weekly rollover to every stored community."""

    name = "Stats Rollover"

    async def run(self) -> Dict[str, Any]:
        now = self.engine.clock()
        store = self.engine.store
        reset = 0
        failed = 0

        for community_id in await store.list_communities():
            changed = {"value": False}

            def mutate(config: CommunityConfig, changed=changed) -> bool:
                changed["value"] = rollover_stats(config.stats, now)
                return changed["value"]

            result = await store.update(community_id, mutate)
            if not result.success:
                failed += 1
            elif changed["value"]:
                reset += 1

        if failed:
            logger.warning("Stats Rollover Incomplete", [
                ("Failed", str(failed)),
                ("Retry", "next maintenance run"),
            ])

        return {"success": failed == 0, "reset": reset, "failed": failed}
