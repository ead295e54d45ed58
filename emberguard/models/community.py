"""
EmberGuard - Community Configuration Models
===========================================

Pydantic schema for the per-community moderation record.

DESIGN:
    A loaded config is always fully populated. Every field falls back to
    its default when the stored value is missing or unusable, one field at
    a time, so a single bad value never resets a whole section. Numeric
    thresholds are clamped on read and on assignment.

    Sets are serialised as sorted lists so that reading a record and
    writing it back produces identical bytes.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Annotated, Any, Dict, List, Optional, Set, Tuple

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from emberguard.core.logger import logger


# =============================================================================
# Restriction Kinds
# =============================================================================

COMMANDS_ONLY = "commands_only"
MEDIA_ONLY = "media_only"
TEXT_ONLY = "text_only"

RESTRICTION_KINDS = frozenset({COMMANDS_ONLY, MEDIA_ONLY, TEXT_ONLY})


# =============================================================================
# Field Helpers
# =============================================================================

def _clamp(value: Any, default: int, lo: int, hi: int) -> int:
    """Coerce to int and clamp into [lo, hi]; unusable input gives default."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return max(lo, min(hi, parsed))


def _clamp_fields(bounds: Dict[str, Tuple[int, int, int]]):
    """Build a before-validator clamping the fields named in bounds."""

    def validator(cls, value: Any, info: ValidationInfo) -> int:
        default, lo, hi = bounds[info.field_name]
        return _clamp(value, default, lo, hi)

    return field_validator(*bounds, mode="before")(classmethod(validator))


def _to_str_set(value: Any) -> Set[str]:
    if value is None:
        return set()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValueError("expected a list of strings")
    return {str(v).strip() for v in value if str(v).strip()}


def _to_domain_set(value: Any) -> Set[str]:
    return {d.lower().removeprefix("www.") for d in _to_str_set(value)}


def _to_phrase_set(value: Any) -> Set[str]:
    return {p.lower() for p in _to_str_set(value)}


def _to_extension_set(value: Any) -> Set[str]:
    return {e.lower().lstrip(".") for e in _to_str_set(value) if e.strip(".")}


def _sorted(values: Set[str]) -> List[str]:
    return sorted(values)


IdSet = Annotated[
    Set[str],
    BeforeValidator(_to_str_set),
    PlainSerializer(_sorted, return_type=List[str]),
]
"""Opaque platform ids (roles), stored as a sorted list."""

DomainSet = Annotated[
    Set[str],
    BeforeValidator(_to_domain_set),
    PlainSerializer(_sorted, return_type=List[str]),
]

PhraseSet = Annotated[
    Set[str],
    BeforeValidator(_to_phrase_set),
    PlainSerializer(_sorted, return_type=List[str]),
]

ExtensionSet = Annotated[
    Set[str],
    BeforeValidator(_to_extension_set),
    PlainSerializer(_sorted, return_type=List[str]),
]
"""File extensions, lower-cased and without the leading dot."""


# =============================================================================
# Base Section
# =============================================================================

class _Section(BaseModel):
    """
    Base for every config section.

    A field that fails validation is replaced by its default instead of
    failing the whole record.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    @field_validator("*", mode="wrap")
    @classmethod
    def _fallback_to_default(
        cls,
        value: Any,
        handler: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
    ) -> Any:
        try:
            return handler(value)
        except ValidationError as e:
            default = cls.model_fields[info.field_name].get_default(call_default_factory=True)
            logger.warning("Config Field Reset", [
                ("Section", cls.__name__),
                ("Field", info.field_name),
                ("Error", str(e.errors()[0].get("msg", "invalid"))[:100]),
            ])
            return default


# =============================================================================
# Anti-Spam
# =============================================================================

ANTI_SPAM_BOUNDS = {
    "heat_threshold": (3, 1, 10),
    "character_limit": (2000, 1, 4000),
    "emoji_limit": (10, 1, 100),
    "mention_limit": (5, 1, 100),
    "newline_limit": (10, 1, 200),
}


class AntiSpamSettings(_Section):
    enabled: bool = False
    heat_threshold: int = 3
    character_limit: int = 2000
    emoji_limit: int = 10
    mention_limit: int = 5
    newline_limit: int = 10

    _clamp = _clamp_fields(ANTI_SPAM_BOUNDS)


# =============================================================================
# Content Filter
# =============================================================================

class LinkRules(_Section):
    enabled: bool = False
    allowlist: DomainSet = Field(default_factory=set)
    denylist: DomainSet = Field(default_factory=set)
    exempt_roles: IdSet = Field(default_factory=set)


class InviteRules(_Section):
    enabled: bool = False
    exempt_roles: IdSet = Field(default_factory=set)


class ContentFilterSettings(_Section):
    enabled: bool = False
    banned_phrases: PhraseSet = Field(default_factory=set)
    nsfw_enabled: bool = False
    links: LinkRules = Field(default_factory=LinkRules)
    invite_links: InviteRules = Field(default_factory=InviteRules)


# =============================================================================
# Raid Control
# =============================================================================

JOIN_GATE_BOUNDS = {
    "min_account_age_days": (7, 0, 365),
}

RAID_BOUNDS = {
    "join_limit": (5, 1, 50),
    "window_seconds": (30, 5, 600),
}


class JoinGateSettings(_Section):
    enabled: bool = False
    min_account_age_days: int = 7
    require_avatar: bool = False

    _clamp = _clamp_fields(JOIN_GATE_BOUNDS)


class SavedProfile(_Section):
    """Thresholds in force before panic mode replaced them."""

    heat_threshold: int = 3
    join_limit: int = 5

    _clamp = _clamp_fields({
        "heat_threshold": ANTI_SPAM_BOUNDS["heat_threshold"],
        "join_limit": RAID_BOUNDS["join_limit"],
    })


class RaidControlSettings(_Section):
    enabled: bool = False
    join_limit: int = 5
    window_seconds: int = 30
    panic_mode: bool = False
    panic_activated_at: Optional[float] = None
    saved_profile: Optional[SavedProfile] = None
    join_gate: JoinGateSettings = Field(default_factory=JoinGateSettings)

    _clamp = _clamp_fields(RAID_BOUNDS)


# =============================================================================
# Tickets & Slow Mode
# =============================================================================

class TicketSettings(_Section):
    enabled: bool = False
    auto_close_hours: int = 24

    _clamp = _clamp_fields({"auto_close_hours": (24, 0, 168)})


class SlowModeSettings(_Section):
    auto_enable: bool = False
    threshold: int = 10
    duration_seconds: int = 5

    _clamp = _clamp_fields({
        "threshold": (10, 2, 500),
        "duration_seconds": (5, 1, 21600),
    })


# =============================================================================
# Auto-Delete
# =============================================================================

class AutoDeleteTypes(_Section):
    images: bool = False
    videos: bool = False
    links: bool = False
    embeds: bool = False


class AutoDeleteSettings(_Section):
    """
    Delayed removal of matching messages.

    timer_minutes of 0 deletes right away.
    """

    enabled: bool = False
    timer_minutes: int = 5
    channels: IdSet = Field(default_factory=set)
    keyword_triggers: PhraseSet = Field(default_factory=set)
    message_types: AutoDeleteTypes = Field(default_factory=AutoDeleteTypes)
    file_types: ExtensionSet = Field(default_factory=set)

    _clamp = _clamp_fields({"timer_minutes": (5, 0, 1440)})


# =============================================================================
# Statistics
# =============================================================================

class CommunityStats(_Section):
    actions_today: int = 0
    actions_week: int = 0
    actions_total: int = 0
    violation_counts: Dict[str, int] = Field(default_factory=dict)
    last_reset_at: Optional[float] = None
    week_started_at: Optional[float] = None

    @field_validator("actions_today", "actions_week", "actions_total", mode="before")
    @classmethod
    def _non_negative(cls, value: Any) -> int:
        return _clamp(value, 0, 0, 2 ** 53)

    @field_validator("violation_counts", mode="before")
    @classmethod
    def _clean_counts(cls, value: Any) -> Dict[str, int]:
        if not isinstance(value, dict):
            return {}
        return {str(k): _clamp(v, 0, 0, 2 ** 53) for k, v in value.items()}

    def record(self, kind: str) -> None:
        """Count one automated action of the given violation kind."""
        self.actions_today += 1
        self.actions_week += 1
        self.actions_total += 1
        counts = dict(self.violation_counts)
        counts[kind] = counts.get(kind, 0) + 1
        self.violation_counts = counts


# =============================================================================
# Community Config
# =============================================================================

class CommunityConfig(_Section):
    """
    Complete moderation record for one community.

    DESIGN:
        Same fallback rules as every section, applied at the top level,
        so `CommunityConfig.from_stored(anything)` always succeeds.
    """

    anti_spam: AntiSpamSettings = Field(default_factory=AntiSpamSettings)
    content_filter: ContentFilterSettings = Field(default_factory=ContentFilterSettings)
    raid_control: RaidControlSettings = Field(default_factory=RaidControlSettings)
    tickets: TicketSettings = Field(default_factory=TicketSettings)
    slow_mode: SlowModeSettings = Field(default_factory=SlowModeSettings)
    auto_delete: AutoDeleteSettings = Field(default_factory=AutoDeleteSettings)
    channel_restrictions: Dict[str, str] = Field(default_factory=dict)
    exempt_roles: IdSet = Field(default_factory=set)
    stats: CommunityStats = Field(default_factory=CommunityStats)

    @field_validator("channel_restrictions", mode="before")
    @classmethod
    def _known_restrictions(cls, value: Any) -> Dict[str, str]:
        if not isinstance(value, dict):
            return {}
        return {
            str(channel): kind
            for channel, kind in value.items()
            if kind in RESTRICTION_KINDS
        }

    @classmethod
    def from_stored(cls, data: Any) -> "CommunityConfig":
        """Build a fully populated config from whatever was on disk."""
        if not isinstance(data, dict):
            return cls()
        return cls.model_validate(data)

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready dict with sets as sorted lists."""
        return self.model_dump(mode="json")

    def restriction_for(self, channel_id: str) -> Optional[str]:
        return self.channel_restrictions.get(str(channel_id))


__all__ = [
    "COMMANDS_ONLY",
    "MEDIA_ONLY",
    "TEXT_ONLY",
    "RESTRICTION_KINDS",
    "AntiSpamSettings",
    "LinkRules",
    "InviteRules",
    "ContentFilterSettings",
    "JoinGateSettings",
    "SavedProfile",
    "RaidControlSettings",
    "TicketSettings",
    "SlowModeSettings",
    "AutoDeleteTypes",
    "AutoDeleteSettings",
    "CommunityStats",
    "CommunityConfig",
]
