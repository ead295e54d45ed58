"""
EmberGuard - Models Package
===========================

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from emberguard.models.community import CommunityConfig, CommunityStats
from emberguard.models.events import MessageEvent, JoinEvent
from emberguard.models.verdicts import (
    ActionKind,
    ContentVerdict,
    EvaluationResult,
    JoinGateVerdict,
    MassJoinVerdict,
    ModerationAction,
    NoVerdict,
    SpamVerdict,
    Violation,
    ViolationKind,
)

__all__ = [
    "CommunityConfig",
    "CommunityStats",
    "MessageEvent",
    "JoinEvent",
    "ActionKind",
    "ContentVerdict",
    "EvaluationResult",
    "JoinGateVerdict",
    "MassJoinVerdict",
    "ModerationAction",
    "NoVerdict",
    "SpamVerdict",
    "Violation",
    "ViolationKind",
]
