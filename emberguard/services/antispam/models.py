"""
Anti-Spam Data Models
=====================

Dataclasses for per-actor heat state and observation results.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Tuple


@dataclass
class ActorHeatState:
    """Heat and recent message history for one actor in one community."""
    heat: int = 0
    last_message_at: float = 0.0
    recent_contents: Deque[str] = field(default_factory=deque)


@dataclass(frozen=True)
class HeatObservation:
    """Result of observing one message."""
    heat: int
    triggered: bool
    score: int = 0
    rules: Tuple[str, ...] = ()
