"""
EmberGuard - Maintenance Tasks
==============================

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .heat_snapshot import HeatSnapshotTask
from .lock_prune import LockPruneTask
from .panic_expiry import PanicExpiryTask
from .stats_rollover import StatsRolloverTask
from .tracker_sweep import TrackerSweepTask

__all__ = [
    "HeatSnapshotTask",
    "LockPruneTask",
    "PanicExpiryTask",
    "StatsRolloverTask",
    "TrackerSweepTask",
]
