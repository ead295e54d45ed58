"""
EmberGuard - Violation Reasons
==============================

Human-readable notice text for content violations.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Iterable, Tuple

from emberguard.models.verdicts import Violation, ViolationKind


# Checked in order; the first kind present picks the message
REASON_PRIORITY: Tuple[Tuple[ViolationKind, str], ...] = (
    (ViolationKind.NON_WHITELISTED_LINK, "Links are not allowed in this channel."),
    (ViolationKind.BLACKLISTED_LINK, "This link is blocked."),
    (ViolationKind.NON_COMMAND_IN_COMMANDS_CHANNEL, "Only commands are allowed in this channel."),
    (ViolationKind.NON_MEDIA_IN_MEDIA_CHANNEL, "Only images/videos/links are allowed in this channel."),
    (ViolationKind.MEDIA_IN_TEXT_ONLY_CHANNEL, "Only text messages are allowed in this channel."),
    (ViolationKind.DISCORD_INVITE, "Discord invites are not allowed."),
)

SPAM_WARNING = "Please slow down! You're sending messages too quickly."
SPAM_MUTE_REASON = "Severe spam"


def describe_violations(violations: Iterable[Violation]) -> str:
    """Pick the notice for a set of violations."""
    violations = list(violations)
    kinds = {v.kind for v in violations}
    for kind, message in REASON_PRIORITY:
        if kind in kinds:
            return message

    seen = []
    for violation in violations:
        if violation.kind.value not in seen:
            seen.append(violation.kind.value)
    return f"Content violation: {', '.join(seen)}"


def describe_join_gate(reason: str) -> str:
    if reason == "new_account":
        return "Account too new to join"
    if reason == "no_avatar":
        return "Accounts without an avatar cannot join"
    return f"Join gate: {reason}"


__all__ = [
    "REASON_PRIORITY",
    "SPAM_WARNING",
    "SPAM_MUTE_REASON",
    "describe_violations",
    "describe_join_gate",
]
