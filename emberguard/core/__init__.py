"""
EmberGuard - Core Package
=========================

Logging, engine settings, and shared constants.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from emberguard.core.logger import logger
from emberguard.core.config import EngineConfig, get_config, NY_TZ

__all__ = [
    "logger",
    "EngineConfig",
    "get_config",
    "NY_TZ",
]
