"""
EmberGuard - Panic Mode & Presets
=================================

Config transformations for panic mode and the recommended setup.

DESIGN:
    Panic mode is a community-wide elevated alert. Turned on by hand it
    also swaps in the panic profile (maximum spam sensitivity, near-zero
    join tolerance) and remembers the previous thresholds; turning it off
    (by hand or by expiry) puts them back. A raid only flips the flag and
    stamps the time, the profile stays as configured.

    Every function here mutates a CommunityConfig in place and is meant
    to run inside ConfigStore.update().

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Optional

from emberguard.core.constants import PANIC_HEAT_THRESHOLD, PANIC_JOIN_LIMIT
from emberguard.models.community import CommunityConfig, SavedProfile


# =============================================================================
# Panic Mode
# =============================================================================

def activate_panic(config: CommunityConfig, now: float) -> bool:
    """
    Enter panic mode with the panic profile.

    Returns:
        False if the community was already in panic mode with a saved
        profile (nothing changed).
    """
    raid = config.raid_control
    if raid.panic_mode and raid.saved_profile is not None:
        return False

    if raid.saved_profile is None:
        raid.saved_profile = SavedProfile(
            heat_threshold=config.anti_spam.heat_threshold,
            join_limit=raid.join_limit,
        )
    if not raid.panic_mode:
        raid.panic_mode = True
        raid.panic_activated_at = now
    config.anti_spam.heat_threshold = PANIC_HEAT_THRESHOLD
    raid.join_limit = PANIC_JOIN_LIMIT
    return True


def deactivate_panic(config: CommunityConfig) -> bool:
    """
    Leave panic mode, restoring any saved profile.

    Returns:
        False if the community was not in panic mode.
    """
    raid = config.raid_control
    if not raid.panic_mode and raid.saved_profile is None:
        return False

    raid.panic_mode = False
    raid.panic_activated_at = None
    if raid.saved_profile is not None:
        config.anti_spam.heat_threshold = raid.saved_profile.heat_threshold
        raid.join_limit = raid.saved_profile.join_limit
        raid.saved_profile = None
    return True


def panic_expired(config: CommunityConfig, now: float, duration: float) -> bool:
    """True when panic mode has been on for at least duration seconds."""
    raid = config.raid_control
    if not raid.panic_mode:
        return False
    activated: Optional[float] = raid.panic_activated_at
    return activated is not None and now - activated >= duration


# =============================================================================
# Recommended Settings
# =============================================================================

def apply_recommended_settings(config: CommunityConfig) -> None:
    """
    Switch on the core protections with sensible thresholds.

    Anti-spam at level 3, the content filter, anti-raid at 5 joins per
    30 seconds, and tickets with a 24 hour auto-close.
    """
    config.anti_spam.enabled = True
    config.anti_spam.heat_threshold = 3
    config.content_filter.enabled = True
    config.raid_control.enabled = True
    config.raid_control.join_limit = 5
    config.raid_control.window_seconds = 30
    config.tickets.enabled = True
    config.tickets.auto_close_hours = 24


__all__ = [
    "activate_panic",
    "deactivate_panic",
    "panic_expired",
    "apply_recommended_settings",
]
