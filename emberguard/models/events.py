"""
EmberGuard - Event Models
=========================

Inbound events handed to the engine by the integration layer.

Platform ids are opaque strings; nothing in the engine parses them.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class AttachmentInfo:
    """A file attached to a message. content_type is the MIME type, if known."""
    filename: str
    content_type: Optional[str] = None


@dataclass(frozen=True)
class MessageEvent:
    """A message posted in a community channel."""
    actor_id: str
    community_id: str
    channel_id: str
    content: str
    actor_roles: FrozenSet[str] = field(default_factory=frozenset)
    is_administrator: bool = False
    has_attachments: bool = False
    timestamp: Optional[float] = None
    attachments: Tuple[AttachmentInfo, ...] = ()
    has_embeds: bool = False


@dataclass(frozen=True)
class JoinEvent:
    """A member joining a community."""
    actor_id: str
    community_id: str
    account_created_at: float
    has_avatar: bool
    timestamp: Optional[float] = None


__all__ = ["AttachmentInfo", "MessageEvent", "JoinEvent"]
