"""
EmberGuard - Moderation Decision Engine
========================================

Stateful moderation core for Discord communities: heat-based anti-spam,
content filtering, raid detection, and a per-community config store.

The surrounding bot calls into ModerationEngine and executes the returned
actions; nothing here talks to Discord directly.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

__version__ = "1.0.0"
