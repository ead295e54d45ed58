"""
EmberGuard - Anti-Spam Package
==============================

Heat-based spam detection.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .models import ActorHeatState, HeatObservation
from .service import HeatTracker

__all__ = [
    "ActorHeatState",
    "HeatObservation",
    "HeatTracker",
]
