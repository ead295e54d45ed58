"""
EmberGuard - Auto-Delete
========================

Decides whether a message should be removed after a delay.

DESIGN:
    Runs only for messages no other check actioned. Rules are checked
    in a fixed order (channel, keyword, image, video, link, embed, file
    extension) and the last one that matches names the reason. The
    result is a SCHEDULE_DELETE follow-up; waiting out the timer and
    deleting is the integration layer's job.

    Nothing is counted in stats; auto-delete is housekeeping, not a
    violation.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import re
from typing import Optional

from emberguard.core.constants import SECONDS_PER_MINUTE
from emberguard.models.community import AutoDeleteSettings
from emberguard.models.events import MessageEvent
from emberguard.models.verdicts import ActionKind, ModerationAction


LINK_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)

REASON_CHANNEL = "channel auto-delete"
REASON_KEYWORD = "keyword trigger"
REASON_IMAGE = "image auto-delete"
REASON_VIDEO = "video auto-delete"
REASON_LINK = "link auto-delete"
REASON_EMBED = "embed auto-delete"


def _has_media(event: MessageEvent, prefix: str) -> bool:
    return any(
        (attachment.content_type or "").lower().startswith(prefix)
        for attachment in event.attachments
    )


def auto_delete_reason(event: MessageEvent, settings: AutoDeleteSettings) -> Optional[str]:
    """
    Reason this message should be auto-deleted, or None.

    Later rules override earlier ones, so a keyword message posted in an
    auto-delete channel reports the keyword.
    """
    if not settings.enabled:
        return None

    reason = None

    if str(event.channel_id) in settings.channels:
        reason = REASON_CHANNEL

    content = event.content.lower()
    if any(keyword in content for keyword in sorted(settings.keyword_triggers)):
        reason = REASON_KEYWORD

    types = settings.message_types
    if types.images and _has_media(event, "image/"):
        reason = REASON_IMAGE
    if types.videos and _has_media(event, "video/"):
        reason = REASON_VIDEO
    if types.links and LINK_PATTERN.search(event.content):
        reason = REASON_LINK
    if types.embeds and event.has_embeds:
        reason = REASON_EMBED

    filenames = [attachment.filename.lower() for attachment in event.attachments]
    for extension in sorted(settings.file_types):
        if any(name.endswith(f".{extension}") for name in filenames):
            reason = f"{extension} file auto-delete"
            break

    return reason


def auto_delete_action(event: MessageEvent, settings: AutoDeleteSettings) -> Optional[ModerationAction]:
    """SCHEDULE_DELETE follow-up for a matching message."""
    reason = auto_delete_reason(event, settings)
    if reason is None:
        return None
    return ModerationAction(
        kind=ActionKind.SCHEDULE_DELETE,
        delete_message=True,
        delay_seconds=settings.timer_minutes * SECONDS_PER_MINUTE,
        reason=reason,
        channel_id=str(event.channel_id),
    )


__all__ = ["auto_delete_action", "auto_delete_reason", "LINK_PATTERN"]
