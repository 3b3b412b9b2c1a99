"""User preference tracking endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query

from toolhub.dependencies import get_services, require_user_id
from toolhub.schemas.catalog import Tool
from toolhub.schemas.preferences import (
    PreferencesPatchRequest, TrackRatingRequest, TrackSearchRequest, TrackViewRequest, UserPreferences
)
from toolhub.startup import Services

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


def _require_tool(services: Services, tool_id: int) -> Tool:
    tool = services.catalog.get_tool(tool_id)
    if tool is None:
        raise HTTPException(status_code=404, detail="Tool not found")
    return tool


@router.get("/me", response_model=UserPreferences)
async def get_my_preferences(
    user_id: str = Depends(require_user_id),
    services: Services = Depends(get_services),
):
    """Current user's tracked preferences."""
    return services.preferences.get(user_id)


@router.patch("/me", response_model=UserPreferences)
async def update_my_preferences(
    update: PreferencesPatchRequest,
    user_id: str = Depends(require_user_id),
    services: Services = Depends(get_services),
):
    """Replace the fields present in the body, e.g. favorite categories."""
    return services.preferences.update(user_id, update)


@router.post("/views", response_model=UserPreferences)
async def track_view(
    request: TrackViewRequest,
    user_id: str = Depends(require_user_id),
    services: Services = Depends(get_services),
):
    """Record that the user viewed a tool."""
    _require_tool(services, request.tool_id)
    return services.preferences.track_view(user_id, request.tool_id)


@router.post("/ratings", response_model=UserPreferences)
async def track_rating(
    request: TrackRatingRequest,
    user_id: str = Depends(require_user_id),
    services: Services = Depends(get_services),
):
    """Record or overwrite the user's rating of a tool."""
    _require_tool(services, request.tool_id)
    return services.preferences.track_rating(user_id, request.tool_id, request.rating)


@router.post("/searches", response_model=UserPreferences)
async def track_search(
    request: TrackSearchRequest,
    user_id: str = Depends(require_user_id),
    services: Services = Depends(get_services),
):
    """Record a search query."""
    return services.preferences.track_search(user_id, request.query)


@router.get("/recent", response_model=list[Tool])
async def recently_viewed(
    limit: int = Query(5, ge=1, le=50),
    user_id: str = Depends(require_user_id),
    services: Services = Depends(get_services),
):
    """The user's most recently viewed tools."""
    return services.preferences.recently_viewed(user_id, services.catalog, limit)
