"""
EmberGuard - Maintenance Router
===============================

Manual trigger and status for background maintenance.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from fastapi import APIRouter, Depends

from emberguard.api.dependencies import get_engine, require_api_key
from emberguard.api.models import APIResponse


router = APIRouter(
    prefix="/maintenance",
    tags=["Maintenance"],
    dependencies=[Depends(require_api_key)],
)


@router.get("", response_model=APIResponse[dict])
async def maintenance_status(engine=Depends(get_engine)) -> APIResponse[dict]:
    service = engine.maintenance
    return APIResponse(
        success=True,
        data={
            "running": service.running,
            "interval_seconds": service.interval,
            "tasks": service.task_names,
        },
    )


@router.post("/run", response_model=APIResponse[dict])
async def run_maintenance(engine=Depends(get_engine)) -> APIResponse[dict]:
    """Run every maintenance task once and return the per-task results."""
    results = await engine.run_maintenance_sweep()
    failed = [name for name, result in results.items() if not result.get("success", False)]
    return APIResponse(
        success=not failed,
        message="Maintenance complete" if not failed else f"Failed: {', '.join(failed)}",
        data=results,
    )


__all__ = ["router"]
