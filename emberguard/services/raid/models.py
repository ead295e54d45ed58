"""
Raid Detection Data Models
==========================

Dataclasses for join records and per-community join windows.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque


@dataclass(frozen=True)
class JoinRecord:
    """Record of a member join for raid detection."""
    actor_id: str
    joined_at: float
    account_age_at_join: float  # seconds


@dataclass
class JoinWindow:
    """Joins seen in one community within the last window_seconds."""
    window_seconds: int
    entries: Deque[JoinRecord] = field(default_factory=deque)

    def prune(self, now: float) -> int:
        """Drop joins older than the window. Returns number dropped."""
        cutoff = now - self.window_seconds
        dropped = 0
        while self.entries and self.entries[0].joined_at <= cutoff:
            self.entries.popleft()
            dropped += 1
        return dropped
