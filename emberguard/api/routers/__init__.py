"""
EmberGuard - API Routers
========================

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .communities import router as communities_router
from .health import router as health_router
from .maintenance import router as maintenance_router

__all__ = [
    "health_router",
    "communities_router",
    "maintenance_router",
]
