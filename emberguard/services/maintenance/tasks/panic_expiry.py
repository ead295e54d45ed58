"""
EmberGuard - Panic Expiry Task
==============================

Turns panic mode off once it has been active for the configured duration.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Any, Dict, List

from emberguard.core.logger import logger
from emberguard.models.community import CommunityConfig
from emberguard.services.maintenance.base import MaintenanceTask
from emberguard.services.panic import deactivate_panic, panic_expired


class PanicExpiryTask(MaintenanceTask):
    """Deactivate expired panic mode and restore saved thresholds."""

    name = "Panic Expiry"

    async def run(self) -> Dict[str, Any]:
        now = self.engine.clock()
        duration = self.engine.settings.panic_duration
        store = self.engine.store
        expired: List[str] = []
        failed = 0

        for community_id in await store.list_communities():
            def mutate(config: CommunityConfig) -> bool:
                raid = config.raid_control
                if raid.panic_mode and raid.panic_activated_at is None:
                    # No start time on record; start the clock now
                    raid.panic_activated_at = now
                    return True
                if not panic_expired(config, now, duration):
                    return False
                return deactivate_panic(config)

            before = await store.get(community_id)
            if not before.raid_control.panic_mode:
                continue

            result = await store.update(community_id, mutate)
            if not result.success:
                failed += 1
            elif result.value is not None and not result.value.raid_control.panic_mode:
                expired.append(community_id)

        for community_id in expired:
            logger.tree("Panic Mode Expired", [
                ("Community", community_id),
                ("After", f"{duration // 60} min"),
            ], emoji="🟢")

        return {"success": failed == 0, "expired": len(expired), "failed": failed}
