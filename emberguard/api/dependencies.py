"""
EmberGuard - API Dependencies
=============================

FastAPI dependency injection utilities.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import secrets
from typing import TYPE_CHECKING, Optional

from fastapi import Depends, Header

from emberguard.api.errors import APIError, ErrorCode

if TYPE_CHECKING:
    from emberguard.engine import ModerationEngine


# =============================================================================
# Engine Reference
# =============================================================================

_engine_instance: Optional["ModerationEngine"] = None


def set_engine(engine: Optional["ModerationEngine"]) -> None:
    """Set the engine instance for dependency injection."""
    global _engine_instance
    _engine_instance = engine


def get_engine() -> "ModerationEngine":
    """Get the engine instance."""
    if _engine_instance is None:
        raise APIError(ErrorCode.ENGINE_NOT_INITIALIZED)
    return _engine_instance


# =============================================================================
# Authentication Dependencies
# =============================================================================

async def require_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    engine: "ModerationEngine" = Depends(get_engine),
) -> None:
    """
    Check the X-API-Key header.

    Open access when no EMBERGUARD_API_KEY is configured.
    """
    expected = engine.settings.api_key
    if not expected:
        return
    if not x_api_key:
        raise APIError(ErrorCode.AUTH_MISSING_KEY, headers={"WWW-Authenticate": "ApiKey"})
    if not secrets.compare_digest(x_api_key, expected):
        raise APIError(ErrorCode.AUTH_INVALID_KEY, headers={"WWW-Authenticate": "ApiKey"})


__all__ = ["set_engine", "get_engine", "require_api_key"]
