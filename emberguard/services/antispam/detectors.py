"""
EmberGuard - Anti-Spam Detection Helpers
========================================

Pure functions measuring a message for heat scoring.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import re
from typing import Pattern

from .constants import EMOJI_PATTERN, MENTION_PATTERN


# =============================================================================
# Compiled Regex Patterns
# =============================================================================

EMOJI_REGEX: Pattern = re.compile(EMOJI_PATTERN)
MENTION_REGEX: Pattern = re.compile(MENTION_PATTERN)
WHITESPACE_REGEX: Pattern = re.compile(r'\s+')


# =============================================================================
# Basic Content Analysis
# =============================================================================

def count_emojis(content: str) -> int:
    """Count emojis in message content."""
    return len(EMOJI_REGEX.findall(content))


def count_mentions(content: str) -> int:
    """Count user and role mentions in message content."""
    return len(MENTION_REGEX.findall(content))


def count_newlines(content: str) -> int:
    """Count newlines in message content."""
    return content.count('\n')


def normalize_content(content: str) -> str:
    """
    Normalize content for duplicate comparison.

    Lower-cased with whitespace runs collapsed, so "Buy  NOW" and
    "buy now" are the same message.
    """
    return WHITESPACE_REGEX.sub(" ", content).strip().lower()


__all__ = [
    "count_emojis",
    "count_mentions",
    "count_newlines",
    "normalize_content",
]
