"""
EmberGuard - Admin API Package
==============================

FastAPI admin API for per-community config, panic mode and maintenance.

Author: حَـــــنَّـــــا
Server: discord.gg/syria

Usage with a bot:
    from emberguard.api import APIService

    api_service = APIService(engine)
    await api_service.start()

    # On shutdown
    await api_service.stop()

Standalone:
    python -m emberguard
"""

import asyncio
from typing import TYPE_CHECKING, Optional

import uvicorn

from emberguard.core.constants import API_STOP_TIMEOUT, LOG_TRUNCATE_SHORT
from emberguard.core.logger import logger
from emberguard.utils.async_utils import create_safe_task

from .app import create_app
from .dependencies import get_engine, set_engine

if TYPE_CHECKING:
    from emberguard.engine import ModerationEngine


# =============================================================================
# API Service
# =============================================================================

class APIService:
    """
    Runs the admin API inside the bot's event loop.

    The engine's own lifecycle stays with the caller; this service only
    starts and stops the HTTP server.
    """

    def __init__(self, engine: "ModerationEngine") -> None:
        self._engine = engine
        self._app = create_app(engine)
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def app(self):
        return self._app

    async def start(self) -> None:
        """Start the API server in a background task."""
        if self.is_running:
            logger.warning("API Already Running", [])
            return

        settings = self._engine.settings
        config = uvicorn.Config(
            app=self._app,
            host=settings.api_host,
            port=settings.api_port,
            log_level="warning",
            access_log=False,
        )
        self._server = uvicorn.Server(config)
        self._task = create_safe_task(self._run_server(), "API Server")

        logger.tree("API Service Started", [
            ("Host", settings.api_host),
            ("Port", str(settings.api_port)),
            ("Auth", "api key" if settings.api_key else "open"),
        ], emoji="🌐")

    async def _run_server(self) -> None:
        try:
            await self._server.serve()
        except asyncio.CancelledError:
            logger.debug("API Server Cancelled", [])
        except Exception as e:
            logger.error("API Server Error", [
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:LOG_TRUNCATE_SHORT]),
            ])

    async def stop(self) -> None:
        """Stop the API server gracefully."""
        if not self.is_running:
            return

        logger.tree("API Service Stopping", [], emoji="🛑")

        if self._server:
            self._server.should_exit = True

        if self._task:
            try:
                await asyncio.wait_for(self._task, timeout=API_STOP_TIMEOUT)
            except asyncio.TimeoutError:
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass

        self._server = None
        self._task = None

        logger.tree("API Service Stopped", [], emoji="✅")


__all__ = ["APIService", "create_app", "get_engine", "set_engine"]
