"""
EmberGuard - Standalone Entry Point
===================================

Runs the engine's background maintenance with the admin API in the
foreground. A bot process embeds ModerationEngine and APIService
instead.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import sys

import uvicorn

from emberguard import __version__
from emberguard.api import create_app
from emberguard.core.config import ConfigValidationError, get_config
from emberguard.core.logger import logger
from emberguard.engine import ModerationEngine


async def main() -> None:
    """
    Start the engine, serve the API until interrupted, then shut down.

    Raises:
        SystemExit: If the configuration is unusable.
    """
    try:
        settings = get_config()
    except ConfigValidationError as e:
        logger.error("Invalid Configuration", [("Error", str(e))])
        sys.exit(1)

    logger.tree("EMBERGUARD STARTING", [
        ("Version", __version__),
        ("Data Dir", str(settings.data_dir)),
        ("API", f"{settings.api_host}:{settings.api_port}"),
    ], emoji="🔥")

    engine = ModerationEngine(settings)
    server = uvicorn.Server(uvicorn.Config(
        app=create_app(engine, manage_lifecycle=True),
        host=settings.api_host,
        port=settings.api_port,
        log_level="warning",
        access_log=False,
    ))
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("EmberGuard Stopped", [("Reason", "Ctrl+C")])
