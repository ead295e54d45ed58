"""
EmberGuard - Health Router
==========================

Health check and process status endpoints.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import os
import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, Depends

from emberguard.api.dependencies import get_engine
from emberguard.api.models import APIResponse, SystemHealth
from emberguard.core.logger import logger


router = APIRouter(prefix="/health", tags=["Health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=APIResponse[dict])
async def health_check() -> APIResponse[dict]:
    """
    Basic health check endpoint.

    Returns simple status for load balancers and monitoring.
    """
    return APIResponse(
        success=True,
        data={
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.get("/detailed", response_model=APIResponse[SystemHealth])
async def detailed_health(engine=Depends(get_engine)) -> APIResponse[SystemHealth]:
    """Process metrics plus tracker sizes."""
    process = psutil.Process(os.getpid())

    uptime = int(time.time() - _start_time)
    memory_mb = process.memory_info().rss / (1024 * 1024)
    cpu_percent = process.cpu_percent(interval=0.1)

    maintenance_running = engine.maintenance.running

    health = SystemHealth(
        status="healthy" if maintenance_running else "degraded",
        uptime_seconds=uptime,
        memory_mb=round(memory_mb, 2),
        cpu_percent=round(cpu_percent, 2),
        tracked_actors=len(engine.heat_tracker),
        tracked_communities=len(engine.join_detector),
        maintenance_running=maintenance_running,
    )

    logger.debug("Health Check (Detailed)", [
        ("Status", health.status),
        ("Memory", f"{health.memory_mb}MB"),
        ("CPU", f"{health.cpu_percent}%"),
        ("Actors", str(health.tracked_actors)),
    ])

    return APIResponse(success=True, data=health)


__all__ = ["router"]
