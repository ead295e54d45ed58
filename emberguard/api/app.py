"""
EmberGuard - FastAPI Application
================================

Admin API application factory.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from emberguard import __version__
from emberguard.api.dependencies import get_engine, set_engine
from emberguard.api.errors import APIError, ErrorCode, error_response
from emberguard.api.routers import communities_router, health_router, maintenance_router
from emberguard.core.constants import LOG_TRUNCATE_LENGTH, LOG_TRUNCATE_SHORT
from emberguard.core.logger import logger

if TYPE_CHECKING:
    from emberguard.engine import ModerationEngine


# =============================================================================
# OpenAPI Documentation
# =============================================================================

API_DESCRIPTION = """
## EmberGuard Admin API

Read and edit per-community moderation settings, toggle panic mode, and
trigger maintenance.

### Authentication

When `EMBERGUARD_API_KEY` is set, every endpoint except `/health` requires:
```
X-API-Key: <key>
```

### Error Responses

```json
{
    "success": false,
    "error_code": "CONFIG_LOCKED",
    "message": "Community config is busy, retry shortly",
    "details": {"community_id": "123"}
}
```
"""

OPENAPI_TAGS = [
    {"name": "Health", "description": "Health check and status endpoints"},
    {"name": "Communities", "description": "Per-community config, stats and panic mode"},
    {"name": "Maintenance", "description": "Background maintenance control"},
]


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    engine: Optional["ModerationEngine"] = None,
    manage_lifecycle: bool = False,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        engine: Engine instance for dependency injection.
        manage_lifecycle: Start and shut down the engine with the app.
            Leave False when the bot process owns the engine.

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.tree("API Starting", [
            ("Version", __version__),
            ("Engine", "attached" if engine else "not attached"),
            ("Lifecycle", "managed" if manage_lifecycle else "external"),
        ], emoji="🚀")

        if manage_lifecycle:
            await get_engine().start()

        yield

        logger.tree("API Stopping", [], emoji="🛑")
        if manage_lifecycle:
            await get_engine().shutdown()

    app = FastAPI(
        title="EmberGuard API",
        description=API_DESCRIPTION,
        version=__version__,
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )

    if engine:
        set_engine(engine)

    # ==========================================================================
    # Exception Handlers
    # ==========================================================================

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        """Return APIError details at the top level of the body."""
        if exc.status_code >= 500:
            logger.warning("API Request Failed", [
                ("Path", str(request.url.path)[:LOG_TRUNCATE_LENGTH]),
                ("Code", exc.error_code.value),
            ])
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions with consistent error format."""
        logger.error("Unhandled API Error", [
            ("Path", str(request.url.path)[:LOG_TRUNCATE_LENGTH]),
            ("Method", request.method),
            ("Error Type", type(exc).__name__),
            ("Error", str(exc)[:LOG_TRUNCATE_SHORT]),
        ])
        return error_response(ErrorCode.SERVER_ERROR)

    # ==========================================================================
    # Routers
    # ==========================================================================

    app.include_router(health_router)
    app.include_router(communities_router)
    app.include_router(maintenance_router)

    return app


__all__ = ["create_app"]
