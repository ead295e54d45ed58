"""
EmberGuard - Lock Prune Task
============================

Drops idle per-community locks so the lock table tracks active
communities only.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Any, Dict

from emberguard.services.maintenance.base import MaintenanceTask


class LockPruneTask(MaintenanceTask):
    name = "Lock Prune"

    async def run(self) -> Dict[str, Any]:
        return {"success": True, "pruned": self.engine.store.prune_locks()}
