"""Tool listing, detail and similar-tool routes."""
import logging
import math
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from toolhub.dependencies import get_current_user_id, get_services
from toolhub.schemas.catalog import CategorySummary, SortBy, Tool, ToolListResponse
from toolhub.schemas.recommendation import ToolListBlock
from toolhub.services.similarity import DEFAULT_LIMIT as SIMILAR_LIMIT
from toolhub.startup import Services

logger = logging.getLogger(__name__)

# Page size of the directory search results
ITEMS_PER_PAGE = 9

router = APIRouter(prefix="/api/tools", tags=["tools"])


@router.get("", response_model=ToolListResponse)
async def list_tools(
    q: Optional[str] = Query(None, description="Free-text search"),
    category: Optional[list[str]] = Query(None, description="Categories to include"),
    pricing: Optional[list[str]] = Query(None, description="Pricing tiers to include"),
    tag: Optional[list[str]] = Query(None, description="Tags, any of which must match"),
    min_rating: float = Query(0.0, ge=0, le=5),
    max_rating: float = Query(5.0, ge=0, le=5),
    sort_by: SortBy = Query(SortBy.RATING),
    page: int = Query(1, ge=1),
    per_page: int = Query(ITEMS_PER_PAGE, ge=1, le=50),
    services: Services = Depends(get_services),
):
    """Search, filter, sort and paginate the directory."""
    if min_rating > max_rating:
        raise HTTPException(status_code=422, detail="min_rating cannot exceed max_rating")

    results = services.catalog.search(
        query=q,
        categories=category,
        pricing=pricing,
        tags=tag,
        min_rating=min_rating,
        max_rating=max_rating,
        sort_by=sort_by,
    )

    start = (page - 1) * per_page
    return ToolListResponse(
        tools=results[start:start + per_page],
        total=len(results),
        page=page,
        per_page=per_page,
        total_pages=math.ceil(len(results) / per_page),
    )


@router.get("/categories", response_model=list[CategorySummary])
async def list_categories(services: Services = Depends(get_services)):
    """Categories with icons and tool counts."""
    return services.catalog.categories()


@router.get("/tags", response_model=list[str])
async def list_tags(services: Services = Depends(get_services)):
    """All tags, sorted."""
    return services.catalog.all_tags()


@router.get("/pricing", response_model=list[str])
async def list_pricing(services: Services = Depends(get_services)):
    """Pricing tiers offered as filters."""
    return services.catalog.pricing_options()


@router.get("/featured", response_model=list[Tool])
async def list_featured(services: Services = Depends(get_services)):
    """Tools featured on the home page."""
    return services.catalog.featured_tools()


@router.get("/{tool_id}", response_model=Tool)
async def get_tool_detail(
    tool_id: int,
    user_id: Optional[str] = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Tool detail. Records a view for signed-in users."""
    tool = services.catalog.get_tool(tool_id)
    if tool is None:
        raise HTTPException(status_code=404, detail="Tool not found")

    if user_id:
        services.preferences.track_view(user_id, tool.id)

    return tool


@router.get("/{tool_id}/similar", response_model=ToolListBlock)
async def get_similar_tools(
    tool_id: int,
    limit: int = Query(SIMILAR_LIMIT, ge=0, le=50),
    services: Services = Depends(get_services),
):
    """Tools most similar to the given one. Empty for unknown ids."""
    tools = services.similarity.similar(tool_id, limit)
    return ToolListBlock(tools=tools, total_count=len(tools), tool_id=tool_id)
