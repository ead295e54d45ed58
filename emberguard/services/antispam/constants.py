"""
EmberGuard - Anti-Spam Constants
================================

Rule weights and patterns for heat scoring.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# =============================================================================
# Rule Names
# =============================================================================

RULE_DUPLICATE = "duplicate"
RULE_RAPID = "rapid"
RULE_LENGTH = "length"
RULE_EMOJIS = "emojis"
RULE_MENTIONS = "mentions"
RULE_NEWLINES = "newlines"

# =============================================================================
# Rule Weights
# =============================================================================

RULE_WEIGHTS = {
    RULE_DUPLICATE: 3,
    RULE_RAPID: 2,
    RULE_LENGTH: 2,
    RULE_EMOJIS: 2,
    RULE_MENTIONS: 3,
    RULE_NEWLINES: 2,
}

RAPID_REPOST_SECONDS = 2.0  # Under this since the last message counts as rapid

# =============================================================================
# Patterns
# =============================================================================

# Custom (<:name:id>, <a:name:id>) and common unicode emoji blocks
EMOJI_PATTERN = r'<a?:\w+:\d+>|[\U0001F300-\U0001F9FF]'

# User (<@id>, <@!id>) and role (<@&id>) mentions
MENTION_PATTERN = r'<@[!&]?\d+>'
