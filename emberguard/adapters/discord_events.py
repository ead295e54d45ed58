"""
EmberGuard - Discord Event Adapter
==================================

Converts discord.py objects into engine events.

DESIGN:
    The engine never sees discord.py types. Snowflake ids become opaque
    strings and datetimes become epoch seconds, so the same engine can
    serve any platform that fills MessageEvent / JoinEvent.

    Messages outside a guild (DMs) and messages from bots are not
    moderated and map to None.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Optional

import discord

from emberguard.models.events import AttachmentInfo, JoinEvent, MessageEvent


def message_event_from_discord(message: discord.Message) -> Optional[MessageEvent]:
    """
    Build a MessageEvent from a guild message.

    Returns:
        None for DMs and bot authors.
    """
    if message.guild is None or message.author.bot:
        return None

    author = message.author
    # Webhook and system messages carry a User, not a Member
    roles = getattr(author, "roles", None) or []
    permissions = getattr(author, "guild_permissions", None)

    return MessageEvent(
        actor_id=str(author.id),
        community_id=str(message.guild.id),
        channel_id=str(message.channel.id),
        content=message.content or "",
        actor_roles=frozenset(str(role.id) for role in roles),
        is_administrator=bool(permissions and permissions.administrator),
        has_attachments=bool(message.attachments),
        timestamp=message.created_at.timestamp() if message.created_at else None,
        attachments=tuple(
            AttachmentInfo(filename=str(a.filename), content_type=a.content_type)
            for a in message.attachments
        ),
        has_embeds=bool(message.embeds),
    )


def join_event_from_discord(member: discord.Member) -> Optional[JoinEvent]:
    """
    Build a JoinEvent from a member join.

    Returns:
        None for bot accounts.
    """
    if member.bot:
        return None

    return JoinEvent(
        actor_id=str(member.id),
        community_id=str(member.guild.id),
        account_created_at=member.created_at.timestamp(),
        has_avatar=member.avatar is not None,
        timestamp=member.joined_at.timestamp() if member.joined_at else None,
    )


__all__ = ["message_event_from_discord", "join_event_from_discord"]
