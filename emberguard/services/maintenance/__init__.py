"""
EmberGuard - Maintenance Service
================================

Periodic scheduler for tracker eviction, stats rollover, panic expiry,
and heat snapshots.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from emberguard.core.constants import LOG_TRUNCATE_SHORT
from emberguard.core.logger import logger
from emberguard.utils.async_utils import create_safe_task

from .base import MaintenanceTask
from .tasks import (
    HeatSnapshotTask,
    LockPruneTask,
    PanicExpiryTask,
    StatsRolloverTask,
    TrackerSweepTask,
)

if TYPE_CHECKING:
    from emberguard.engine import ModerationEngine


class MaintenanceService:
    """
    Runs every maintenance task on a fixed interval.

    Each task is independent; a failing task is logged and the rest still
    run. run_all_tasks() can also be called directly by an external
    scheduler.
    """

    def __init__(self, engine: "ModerationEngine", interval: Optional[int] = None) -> None:
        self.engine = engine
        self.interval = interval if interval is not None else engine.settings.maintenance_interval
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._run_lock = asyncio.Lock()

        self._tasks: List[MaintenanceTask] = [
            TrackerSweepTask(engine),
            StatsRolloverTask(engine),
            PanicExpiryTask(engine),
            HeatSnapshotTask(engine),
            LockPruneTask(engine),  # Last, after every store update
        ]

        logger.tree("Maintenance Service Loaded", [
            ("Schedule", f"Every {self.interval // 60} min"),
            ("Tasks", ", ".join(t.name for t in self._tasks)),
            ("Total", str(len(self._tasks))),
        ], emoji="🔧")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def task_names(self) -> List[str]:
        return [t.name for t in self._tasks]

    def start(self) -> None:
        """Start the maintenance scheduler."""
        if self._running:
            return

        self._running = True
        self._task = create_safe_task(self._scheduler_loop(), "Maintenance Scheduler")
        logger.info("Maintenance Scheduler Started")

    async def stop(self) -> None:
        """Stop the maintenance scheduler."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Maintenance Scheduler Stopped")

    async def _scheduler_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.interval)
            try:
                await self.run_all_tasks()
            except Exception as e:
                logger.error("Maintenance Scheduler Error", [
                    ("Error", str(e)[:LOG_TRUNCATE_SHORT]),
                    ("Retry", f"{self.interval}s"),
                ])

    async def run_all_tasks(self) -> Dict[str, Dict[str, Any]]:
        """
        Run all maintenance tasks once.

        Overlapping calls are serialized so a manual run never interleaves
        with a scheduled one.

        Returns:
            Mapping of task name to its result dict.
        """
        async with self._run_lock:
            results: Dict[str, Dict[str, Any]] = {}
            summary = []

            for task in self._tasks:
                try:
                    if not await task.should_run():
                        logger.debug("Task Skipped", [("Task", task.name), ("Reason", "Conditions not met")])
                        continue
                    result = await task.run()
                except Exception as e:
                    logger.error("Maintenance Task Failed", [
                        ("Task", task.name),
                        ("Error Type", type(e).__name__),
                        ("Error", str(e)[:LOG_TRUNCATE_SHORT]),
                    ])
                    result = {"success": False, "error": str(e)[:LOG_TRUNCATE_SHORT]}

                results[task.name] = result
                summary.append(f"{task.name} ({task.format_result(result)})")

            logger.tree("Maintenance Complete", [
                ("Tasks Run", str(len(results))),
                ("Results", ", ".join(summary) if summary else "None"),
            ], emoji="✅")

            return results


__all__ = ["MaintenanceService", "MaintenanceTask"]
