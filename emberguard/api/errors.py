"""
EmberGuard - API Error System
=============================

Error codes and exception helpers for consistent API responses.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """
    Error codes for the admin API.

    Format: CATEGORY_SPECIFIC_ERROR
    """

    # Authentication errors (401)
    AUTH_MISSING_KEY = "AUTH_MISSING_KEY"
    AUTH_INVALID_KEY = "AUTH_INVALID_KEY"

    # Community config errors
    CONFIG_INVALID_PATCH = "CONFIG_INVALID_PATCH"
    CONFIG_TOO_LARGE = "CONFIG_TOO_LARGE"
    CONFIG_LOCKED = "CONFIG_LOCKED"
    CONFIG_SAVE_FAILED = "CONFIG_SAVE_FAILED"

    # Engine errors (503)
    ENGINE_NOT_INITIALIZED = "ENGINE_NOT_INITIALIZED"

    # Server errors (500)
    SERVER_ERROR = "SERVER_ERROR"


# =============================================================================
# Error Messages
# =============================================================================

ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.AUTH_MISSING_KEY: "X-API-Key header is required",
    ErrorCode.AUTH_INVALID_KEY: "Invalid API key",
    ErrorCode.CONFIG_INVALID_PATCH: "Config patch must be a JSON object",
    ErrorCode.CONFIG_TOO_LARGE: "Config exceeds the maximum stored size",
    ErrorCode.CONFIG_LOCKED: "Community config is busy, retry shortly",
    ErrorCode.CONFIG_SAVE_FAILED: "Community config could not be saved",
    ErrorCode.ENGINE_NOT_INITIALIZED: "Moderation engine not initialized",
    ErrorCode.SERVER_ERROR: "An unexpected error occurred",
}


ERROR_STATUS_CODES: Dict[ErrorCode, int] = {
    ErrorCode.AUTH_MISSING_KEY: HTTP_401_UNAUTHORIZED,
    ErrorCode.AUTH_INVALID_KEY: HTTP_401_UNAUTHORIZED,
    ErrorCode.CONFIG_INVALID_PATCH: HTTP_400_BAD_REQUEST,
    ErrorCode.CONFIG_TOO_LARGE: HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ErrorCode.CONFIG_LOCKED: HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.CONFIG_SAVE_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.ENGINE_NOT_INITIALIZED: HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.SERVER_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
}


# Store failure codes (StoreResult.error) to API error codes
STORE_ERROR_CODES: Dict[str, ErrorCode] = {
    "invalid_patch": ErrorCode.CONFIG_INVALID_PATCH,
    "invalid_id": ErrorCode.CONFIG_INVALID_PATCH,
    "oversized": ErrorCode.CONFIG_TOO_LARGE,
    "lock_timeout": ErrorCode.CONFIG_LOCKED,
    "io_error": ErrorCode.CONFIG_SAVE_FAILED,
}


# =============================================================================
# API Exception
# =============================================================================

class APIError(HTTPException):
    """
    API exception carrying an error code.

    Usage:
        raise APIError(ErrorCode.CONFIG_LOCKED)
        raise APIError(ErrorCode.AUTH_MISSING_KEY, headers={"WWW-Authenticate": "ApiKey"})
    """

    def __init__(
        self,
        code: ErrorCode,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = code
        self.error_message = message or ERROR_MESSAGES.get(code, "An error occurred")
        self.error_details = details

        if status_code is None:
            status_code = ERROR_STATUS_CODES.get(code, HTTP_400_BAD_REQUEST)

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error_code": code.value,
                "message": self.error_message,
                "details": details,
            },
            headers=headers,
        )


# =============================================================================
# Helper Functions
# =============================================================================

def error_response(
    code: ErrorCode,
    status_code: Optional[int] = None,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Create a JSON error response without raising an exception."""
    if status_code is None:
        status_code = ERROR_STATUS_CODES.get(code, HTTP_400_BAD_REQUEST)

    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error_code": code.value,
            "message": message or ERROR_MESSAGES.get(code, "An error occurred"),
            "details": details,
        },
    )


def store_failure(error: Optional[str], community_id: str) -> APIError:
    """Map a failed StoreResult to an APIError."""
    code = STORE_ERROR_CODES.get(error or "", ErrorCode.CONFIG_SAVE_FAILED)
    return APIError(code, details={"community_id": community_id})


__all__ = [
    "ErrorCode",
    "ERROR_MESSAGES",
    "ERROR_STATUS_CODES",
    "APIError",
    "error_response",
    "store_failure",
]
