"""
EmberGuard - Platform Adapters
==============================

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .discord_events import join_event_from_discord, message_event_from_discord

__all__ = [
    "message_event_from_discord",
    "join_event_from_discord",
]
