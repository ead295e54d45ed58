"""
EmberGuard - Communities Router
===============================

Per-community config, stats and panic controls.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Body, Depends, Path

from emberguard.api.dependencies import get_engine, require_api_key
from emberguard.api.errors import APIError, ErrorCode, store_failure
from emberguard.api.models import APIResponse, PanicRequest
from emberguard.core.logger import logger


router = APIRouter(
    prefix="/communities",
    tags=["Communities"],
    dependencies=[Depends(require_api_key)],
)

# Upper bound on ids accepted over HTTP
CommunityId = Annotated[str, Path(min_length=1, max_length=512)]


@router.get("", response_model=APIResponse[List[str]])
async def list_communities(engine=Depends(get_engine)) -> APIResponse[List[str]]:
    """Ids of every community with a stored config."""
    return APIResponse(success=True, data=await engine.store.list_communities())


@router.get("/{community_id}/config", response_model=APIResponse[dict])
async def get_community_config(
    community_id: CommunityId,
    engine=Depends(get_engine),
) -> APIResponse[dict]:
    config = await engine.get_config(community_id)
    return APIResponse(success=True, data=config.to_record())


@router.patch("/{community_id}/config", response_model=APIResponse[dict])
async def patch_community_config(
    community_id: CommunityId,
    patch: Any = Body(...),
    engine=Depends(get_engine),
) -> APIResponse[dict]:
    """
    Merge a partial config into the stored one.

    Nested sections merge key by key. Out-of-range values are clamped;
    the stats block is read-only.
    """
    if not isinstance(patch, dict):
        raise APIError(ErrorCode.CONFIG_INVALID_PATCH)

    result = await engine.update_config(community_id, patch)
    if not result:
        raise store_failure(result.error, community_id)

    return APIResponse(success=True, message="Config updated", data=result.value.to_record())


@router.get("/{community_id}/stats", response_model=APIResponse[dict])
async def get_community_stats(
    community_id: CommunityId,
    engine=Depends(get_engine),
) -> APIResponse[dict]:
    config = await engine.get_config(community_id)
    return APIResponse(success=True, data=config.stats.model_dump(mode="json"))


@router.post("/{community_id}/panic", response_model=APIResponse[dict])
async def set_panic_mode(
    community_id: CommunityId,
    body: PanicRequest,
    engine=Depends(get_engine),
) -> APIResponse[dict]:
    result = await engine.set_panic_mode(community_id, body.active)
    if not result:
        raise store_failure(result.error, community_id)

    raid: Dict[str, Any] = result.value.raid_control.model_dump(mode="json")
    logger.info("Panic Toggled Via API", [
        ("Community", community_id),
        ("Active", str(body.active)),
    ])
    return APIResponse(
        success=True,
        message="Panic mode on" if body.active else "Panic mode off",
        data=raid,
    )


@router.post("/{community_id}/setup", response_model=APIResponse[dict])
async def apply_recommended_setup(
    community_id: CommunityId,
    engine=Depends(get_engine),
) -> APIResponse[dict]:
    result = await engine.apply_recommended_settings(community_id)
    if not result:
        raise store_failure(result.error, community_id)
    return APIResponse(success=True, message="Recommended settings applied", data=result.value.to_record())


__all__ = ["router"]
