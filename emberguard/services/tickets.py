"""
EmberGuard - Ticket Auto-Close Policy
=====================================

Decides which support tickets are due for automatic closing.

Channel lifecycle (creating, archiving, transcripts) belongs to the
integration layer; this module only answers "which ones, now?".

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass
from typing import Iterable, List

from emberguard.core.constants import SECONDS_PER_HOUR
from emberguard.models.community import TicketSettings


@dataclass(frozen=True)
class TicketInfo:
    """What the policy needs to know about an open ticket."""
    ticket_id: str
    opened_at: float
    claimed: bool = False
    closed: bool = False


def tickets_due_for_auto_close(
    tickets: Iterable[TicketInfo],
    settings: TicketSettings,
    now: float,
) -> List[str]:
    """
    Ids of unclaimed, open tickets older than auto_close_hours.

    Returns an empty list when tickets are disabled or auto_close_hours
    is 0.
    """
    if not settings.enabled or settings.auto_close_hours <= 0:
        return []

    max_age = settings.auto_close_hours * SECONDS_PER_HOUR
    return [
        ticket.ticket_id
        for ticket in tickets
        if not ticket.closed and not ticket.claimed and now - ticket.opened_at >= max_age
    ]


__all__ = ["TicketInfo", "tickets_due_for_auto_close"]
