"""
EmberGuard - Configuration Module
=================================

Engine-wide settings loaded from environment variables.

DESIGN:
    Per-community moderation settings live in ConfigStore. This module
    only covers the process-level knobs: where data is stored, how long
    to wait for a lock, decay and escalation constants, and optional
    integrations. Every value has a default, so an empty environment
    produces a working engine.

    Key patterns:
    - Singleton pattern via get_config() ensures one EngineConfig instance
    - Out-of-range values are clamped with a warning instead of failing
    - python-dotenv loads a local .env before reading the environment

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

from emberguard.core.constants import (
    API_HOST,
    API_PORT,
    HEAT_CAP,
    HEAT_DECAY_PERIOD,
    HEAT_HISTORY_SIZE,
    HEAT_IDLE_EVICTION,
    HEAT_SNAPSHOT_MAX_AGE,
    IO_RETRIES,
    LOCK_TIMEOUT,
    MAINTENANCE_INTERVAL,
    MAX_CONFIG_BYTES,
    MAX_TRACKED_ACTORS,
    MAX_TRACKED_COMMUNITIES,
    OBSERVE_MIN_INTERVAL,
    PANIC_DURATION,
    SEVERE_HEAT,
    SPAM_MUTE_SECONDS,
)


# =============================================================================
# Timezone Configuration
# =============================================================================

NY_TZ = ZoneInfo("America/New_York")
"""
Eastern timezone for daily/weekly stats rollover.

DESIGN:
    America/New_York handles EST/EDT transitions automatically, so the
    "today" counter resets at local midnight all year round.
"""


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class EngineConfig:
    """
    Engine configuration loaded from environment variables.

    Attributes:
        data_dir: Root directory for community records and snapshots.
        lock_timeout: Seconds to wait for a community lock.
        heat_decay_period: Seconds of idle time per heat point lost.
        heat_cap: Upper bound on an actor's heat.
        severe_heat: Heat above this escalates a warning to a mute.
        panic_duration: Seconds before panic mode expires on its own.
    """

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    data_dir: Path = Path("data")
    lock_timeout: float = LOCK_TIMEOUT
    max_config_bytes: int = MAX_CONFIG_BYTES
    io_retries: int = IO_RETRIES

    # -------------------------------------------------------------------------
    # Heat Tracker
    # -------------------------------------------------------------------------

    heat_decay_period: int = HEAT_DECAY_PERIOD
    heat_cap: int = HEAT_CAP
    heat_history_size: int = HEAT_HISTORY_SIZE
    heat_idle_eviction: int = HEAT_IDLE_EVICTION
    heat_snapshot_max_age: int = HEAT_SNAPSHOT_MAX_AGE
    max_tracked_actors: int = MAX_TRACKED_ACTORS
    observe_min_interval: float = OBSERVE_MIN_INTERVAL

    # -------------------------------------------------------------------------
    # Escalation
    # -------------------------------------------------------------------------

    severe_heat: int = SEVERE_HEAT
    spam_mute_seconds: int = SPAM_MUTE_SECONDS

    # -------------------------------------------------------------------------
    # Raid
    # -------------------------------------------------------------------------

    max_tracked_communities: int = MAX_TRACKED_COMMUNITIES
    panic_duration: int = PANIC_DURATION

    # -------------------------------------------------------------------------
    # Background
    # -------------------------------------------------------------------------

    maintenance_interval: int = MAINTENANCE_INTERVAL

    # -------------------------------------------------------------------------
    # Optional: Integrations
    # -------------------------------------------------------------------------

    api_host: str = API_HOST
    api_port: int = API_PORT
    api_key: Optional[str] = None
    error_webhook_url: Optional[str] = None


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """
    Raised when configuration is invalid beyond repair.

    DESIGN:
        Custom exception type allows callers to distinguish config
        errors from other startup failures.
    """

    pass


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: int = None,
    max_val: int = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    from emberguard.core.logger import logger
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _parse_float_with_default(
    value: Optional[str],
    default: float,
    name: str,
    min_val: float = None,
    max_val: float = None,
) -> float:
    """Float counterpart of _parse_int_with_default."""
    if not value:
        return default
    from emberguard.core.logger import logger
    try:
        parsed = float(value)
    except ValueError:
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """
    Validate URL format for webhooks.

    Returns:
        URL if valid, None if invalid or empty.
    """
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from emberguard.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> EngineConfig:
    """
    Load configuration from the environment (and .env, if present).

    Raises:
        ConfigValidationError: If the data directory path points at a file.
    """
    load_dotenv()

    data_dir = Path(os.getenv("EMBERGUARD_DATA_DIR", "data"))
    if data_dir.exists() and not data_dir.is_dir():
        raise ConfigValidationError(f"EMBERGUARD_DATA_DIR is not a directory: {data_dir}")

    env = os.getenv
    return EngineConfig(
        data_dir=data_dir,
        lock_timeout=_parse_float_with_default(env("LOCK_TIMEOUT"), LOCK_TIMEOUT, "LOCK_TIMEOUT", 0.1, 120.0),
        max_config_bytes=_parse_int_with_default(env("MAX_CONFIG_BYTES"), MAX_CONFIG_BYTES, "MAX_CONFIG_BYTES", 1024, 16 * MAX_CONFIG_BYTES),
        io_retries=_parse_int_with_default(env("IO_RETRIES"), IO_RETRIES, "IO_RETRIES", 0, 10),
        heat_decay_period=_parse_int_with_default(env("HEAT_DECAY_PERIOD"), HEAT_DECAY_PERIOD, "HEAT_DECAY_PERIOD", 1, 3600),
        heat_cap=_parse_int_with_default(env("HEAT_CAP"), HEAT_CAP, "HEAT_CAP", 10, 1000),
        heat_history_size=_parse_int_with_default(env("HEAT_HISTORY_SIZE"), HEAT_HISTORY_SIZE, "HEAT_HISTORY_SIZE", 1, 100),
        heat_idle_eviction=_parse_int_with_default(env("HEAT_IDLE_EVICTION"), HEAT_IDLE_EVICTION, "HEAT_IDLE_EVICTION", 10, 86400),
        heat_snapshot_max_age=_parse_int_with_default(env("HEAT_SNAPSHOT_MAX_AGE"), HEAT_SNAPSHOT_MAX_AGE, "HEAT_SNAPSHOT_MAX_AGE", 0, 86400),
        max_tracked_actors=_parse_int_with_default(env("MAX_TRACKED_ACTORS"), MAX_TRACKED_ACTORS, "MAX_TRACKED_ACTORS", 10, 1000000),
        observe_min_interval=_parse_float_with_default(env("OBSERVE_MIN_INTERVAL"), OBSERVE_MIN_INTERVAL, "OBSERVE_MIN_INTERVAL", 0.0, 10.0),
        severe_heat=_parse_int_with_default(env("SEVERE_HEAT"), SEVERE_HEAT, "SEVERE_HEAT", 1, 1000),
        spam_mute_seconds=_parse_int_with_default(env("SPAM_MUTE_SECONDS"), SPAM_MUTE_SECONDS, "SPAM_MUTE_SECONDS", 1, 2419200),
        max_tracked_communities=_parse_int_with_default(env("MAX_TRACKED_COMMUNITIES"), MAX_TRACKED_COMMUNITIES, "MAX_TRACKED_COMMUNITIES", 1, 1000000),
        panic_duration=_parse_int_with_default(env("PANIC_DURATION"), PANIC_DURATION, "PANIC_DURATION", 60, 7 * 86400),
        maintenance_interval=_parse_int_with_default(env("MAINTENANCE_INTERVAL"), MAINTENANCE_INTERVAL, "MAINTENANCE_INTERVAL", 10, 86400),
        api_host=env("EMBERGUARD_API_HOST") or API_HOST,
        api_port=_parse_int_with_default(env("EMBERGUARD_API_PORT"), API_PORT, "EMBERGUARD_API_PORT", 1, 65535),
        api_key=env("EMBERGUARD_API_KEY") or None,
        error_webhook_url=_validate_url(env("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """
    Get the global configuration instance, loading if needed.

    Returns:
        The global EngineConfig instance.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached instance so the next get_config() re-reads the env."""
    global _config
    _config = None


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "EngineConfig",
    "ConfigValidationError",
    "load_config",
    "get_config",
    "reset_config",
    "NY_TZ",
]
