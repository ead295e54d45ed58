"""
EmberGuard - Content Filter Constants
=====================================

Patterns and markers used by the content classifier.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# =============================================================================
# Links & Invites
# =============================================================================

LINK_PATTERN = r'https?://[^\s<>"{}|\\^`\[\]]+'

DISCORD_INVITE_PATTERN = (
    r'(?:https?://)?(?:www\.)?'
    r'(?:discord\.gg|discord\.com/invite|discordapp\.com/invite)/([a-zA-Z0-9\-]+)'
)

VALID_HOSTNAME_PATTERN = r'^[a-z0-9](?:[a-z0-9\-]*[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9\-]*[a-z0-9])?)*$'

# =============================================================================
# Channel Restrictions
# =============================================================================

COMMAND_PREFIXES = ("/", "!")

# Any of these in a message counts as media for media-only channels
MEDIA_MARKERS = ("http", "discord.gg", "tenor.com", "giphy.com")

# =============================================================================
# NSFW Heuristics
# =============================================================================

NSFW_PATTERNS = (
    r'n[s5][f4][w\\/]',
    r'p[o0]rn',
    r'[s5][e3][x\\/]',
)
