"""
EmberGuard - Centralized Constants
==================================

All magic numbers and constants are defined here for maintainability.
Import from this module instead of hardcoding values.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# =============================================================================
# Time Constants (in seconds)
# =============================================================================

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# =============================================================================
# Heat Tracker Defaults
# =============================================================================

HEAT_DECAY_PERIOD = 10                # 1 heat point lost per 10s idle
HEAT_CAP = 50                         # Upper bound for a single actor
HEAT_HISTORY_SIZE = 10                # Recent contents kept per actor
HEAT_IDLE_EVICTION = 300              # 5 minutes - idle actor eviction
HEAT_SNAPSHOT_MAX_AGE = SECONDS_PER_HOUR  # Older state dropped on restore
MAX_TRACKED_ACTORS = 10000            # Capacity before LRU eviction

# =============================================================================
# Escalation Defaults
# =============================================================================

SEVERE_HEAT = 15                      # Heat above this mutes instead of warns
SPAM_MUTE_SECONDS = 600               # 10 minutes
OBSERVE_MIN_INTERVAL = 0.5            # Per (actor, community) observe rate

# =============================================================================
# Raid Defaults
# =============================================================================

MAX_TRACKED_COMMUNITIES = 1000        # Join windows kept before LRU eviction
PANIC_DURATION = 2 * SECONDS_PER_HOUR  # Auto-expiry for panic mode
PANIC_HEAT_THRESHOLD = 10             # Panic profile: maximum sensitivity
PANIC_JOIN_LIMIT = 1                  # Panic profile: block almost all joins

# =============================================================================
# Storage Defaults
# =============================================================================

MAX_CONFIG_BYTES = 1024 * 1024        # 1 MiB - larger payloads are quarantined
LOCK_TIMEOUT = 10.0                   # Per-community lock wait
IO_RETRIES = 3                        # Transient I/O retry attempts
IO_RETRY_BASE_DELAY = 0.05            # First backoff step
HEAT_SNAPSHOT_NAME = "heat"
SNAPSHOT_MAX_BYTES = 64 * MAX_CONFIG_BYTES  # Heat snapshots can be large

# =============================================================================
# Slow Mode
# =============================================================================

SLOWMODE_WINDOW = SECONDS_PER_MINUTE  # Activity counted over the last minute
SLOWMODE_COOLDOWN = 5 * SECONDS_PER_MINUTE  # Re-trigger cooldown per channel
SLOWMODE_REVERT_AFTER = 5 * SECONDS_PER_MINUTE  # Auto-disable delay
MAX_TRACKED_CHANNELS = 5000

# =============================================================================
# Maintenance
# =============================================================================

MAINTENANCE_INTERVAL = SECONDS_PER_HOUR

# =============================================================================
# Admin API
# =============================================================================

API_HOST = "127.0.0.1"
API_PORT = 8088
API_STOP_TIMEOUT = 5.0

# =============================================================================
# Logging
# =============================================================================

LOG_TRUNCATE_SHORT = 100
LOG_TRUNCATE_LENGTH = 50


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "SECONDS_PER_MINUTE",
    "SECONDS_PER_HOUR",
    "SECONDS_PER_DAY",
    "HEAT_DECAY_PERIOD",
    "HEAT_CAP",
    "HEAT_HISTORY_SIZE",
    "HEAT_IDLE_EVICTION",
    "HEAT_SNAPSHOT_MAX_AGE",
    "MAX_TRACKED_ACTORS",
    "SEVERE_HEAT",
    "SPAM_MUTE_SECONDS",
    "OBSERVE_MIN_INTERVAL",
    "MAX_TRACKED_COMMUNITIES",
    "PANIC_DURATION",
    "PANIC_HEAT_THRESHOLD",
    "PANIC_JOIN_LIMIT",
    "MAX_CONFIG_BYTES",
    "LOCK_TIMEOUT",
    "IO_RETRIES",
    "IO_RETRY_BASE_DELAY",
    "HEAT_SNAPSHOT_NAME",
    "SNAPSHOT_MAX_BYTES",
    "SLOWMODE_WINDOW",
    "SLOWMODE_COOLDOWN",
    "SLOWMODE_REVERT_AFTER",
    "MAX_TRACKED_CHANNELS",
    "MAINTENANCE_INTERVAL",
    "API_HOST",
    "API_PORT",
    "API_STOP_TIMEOUT",
    "LOG_TRUNCATE_SHORT",
    "LOG_TRUNCATE_LENGTH",
]
