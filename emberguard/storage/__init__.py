"""
EmberGuard - Storage Package
============================

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .config_store import ConfigStore, LockTimeoutError, StoreResult

__all__ = [
    "ConfigStore",
    "LockTimeoutError",
    "StoreResult",
]
