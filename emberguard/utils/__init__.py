"""
EmberGuard - Utilities Package
==============================

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from emberguard.utils.cache import LRUCache
from emberguard.utils.retry import retry_async
from emberguard.utils.async_utils import create_safe_task

__all__ = [
    "LRUCache",
    "retry_async",
    "create_safe_task",
]
