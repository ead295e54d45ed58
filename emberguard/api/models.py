"""
EmberGuard - API Models
=======================

Response wrappers and request bodies.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field


# =============================================================================
# Generic Type Variables
# =============================================================================

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Base Response Models
# =============================================================================

class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class SystemHealth(BaseModel):
    """Process and engine health."""

    status: str = "healthy"
    uptime_seconds: int = Field(ge=0)
    memory_mb: float
    cpu_percent: float
    tracked_actors: int = Field(ge=0)
    tracked_communities: int = Field(ge=0)
    maintenance_running: bool


# =============================================================================
# Request Bodies
# =============================================================================

class PanicRequest(BaseModel):
    """Body for POST /communities/{id}/panic."""

    active: bool


__all__ = ["APIResponse", "SystemHealth", "PanicRequest"]
