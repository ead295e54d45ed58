"""
EmberGuard - Heat Snapshot Task
===============================

Persists heat state so a restart keeps recent offenders warm.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Any, Dict

from emberguard.core.constants import HEAT_SNAPSHOT_NAME
from emberguard.services.maintenance.base import MaintenanceTask


class HeatSnapshotTask(MaintenanceTask):
    name = "Heat Snapshot"

    async def run(self) -> Dict[str, Any]:
        snapshot = self.engine.heat_tracker.snapshot(self.engine.clock())
        result = await self.engine.store.save_snapshot(HEAT_SNAPSHOT_NAME, snapshot)
        return {"success": result.success, "saved": len(snapshot["actors"])}
