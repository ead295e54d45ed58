"""
EmberGuard - Verdict & Action Models
====================================

What a detector observed (verdict) and what the coordinator decided to
do about it (action).

DESIGN:
    Verdicts are a closed set of small frozen dataclasses; callers branch
    with isinstance(). Actions carry everything the integration layer
    needs to execute them and nothing platform-specific.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


# =============================================================================
# Violations
# =============================================================================

class ViolationKind(str, Enum):
    BLACKLISTED_LINK = "blacklisted_link"
    NON_WHITELISTED_LINK = "non_whitelisted_link"
    INVALID_LINK = "invalid_link"
    NON_COMMAND_IN_COMMANDS_CHANNEL = "non_command_in_commands_channel"
    NON_MEDIA_IN_MEDIA_CHANNEL = "non_media_in_media_channel"
    MEDIA_IN_TEXT_ONLY_CHANNEL = "media_in_text_only_channel"
    BANNED_PHRASE = "banned_phrase"
    NSFW = "nsfw"
    DISCORD_INVITE = "discord_invite"


@dataclass(frozen=True)
class Violation:
    """One content rule hit. `detail` is the URL, phrase or pattern matched."""
    kind: ViolationKind
    detail: Optional[str] = None


# =============================================================================
# Verdicts
# =============================================================================

@dataclass(frozen=True)
class NoVerdict:
    pass


@dataclass(frozen=True)
class SpamVerdict:
    heat_at_trigger: int


@dataclass(frozen=True)
class ContentVerdict:
    violations: Tuple[Violation, ...]


@dataclass(frozen=True)
class MassJoinVerdict:
    count: int


@dataclass(frozen=True)
class JoinGateVerdict:
    reason: str  # "new_account" | "no_avatar"


Verdict = Union[NoVerdict, SpamVerdict, ContentVerdict, MassJoinVerdict, JoinGateVerdict]

NO_VERDICT = NoVerdict()


# =============================================================================
# Actions
# =============================================================================

class ActionKind(str, Enum):
    NONE = "none"
    WARN = "warn"
    MUTE = "mute"
    DELETE_AND_NOTIFY = "delete_and_notify"
    KICK = "kick"
    RAID_ALERT = "raid_alert"
    ENABLE_SLOWMODE = "enable_slowmode"
    SCHEDULE_DELETE = "schedule_delete"


@dataclass(frozen=True)
class ModerationAction:
    """
    Corrective step for the integration layer to execute.

    Attributes:
        kind: What to do.
        delete_message: Whether the triggering message should be removed.
        duration_seconds: Mute or slow mode length, when relevant.
        reason: Human-readable text for the notice or audit log.
        channel_id: Target channel for channel-level actions.
        revert_after_seconds: When a channel-level action should be undone.
        delay_seconds: Wait before executing (scheduled deletes).
        count: Join count for raid alerts.
        panic_newly_activated: False when the community was already in panic.
    """
    kind: ActionKind
    delete_message: bool = False
    duration_seconds: Optional[int] = None
    reason: Optional[str] = None
    channel_id: Optional[str] = None
    revert_after_seconds: Optional[int] = None
    delay_seconds: Optional[int] = None
    count: Optional[int] = None
    panic_newly_activated: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {k: v for k, v in self.__dict__.items() if v is not None}
        data["kind"] = self.kind.value
        return data


NO_ACTION = ModerationAction(kind=ActionKind.NONE)


# =============================================================================
# Evaluation Result
# =============================================================================

@dataclass
class EvaluationResult:
    """
    Outcome of one evaluate_message / evaluate_join call.

    `updated_stats` is the stats block as persisted, or None when nothing
    was counted. `stats_persisted` is False when the save failed; the
    action is still valid and should be executed.
    """
    verdict: Verdict = NO_VERDICT
    action: ModerationAction = NO_ACTION
    updated_stats: Optional[Dict[str, Any]] = None
    stats_persisted: bool = True
    followups: List[ModerationAction] = field(default_factory=list)


__all__ = [
    "ViolationKind",
    "Violation",
    "NoVerdict",
    "SpamVerdict",
    "ContentVerdict",
    "MassJoinVerdict",
    "JoinGateVerdict",
    "Verdict",
    "NO_VERDICT",
    "ActionKind",
    "ModerationAction",
    "NO_ACTION",
    "EvaluationResult",
]
