"""Personalized recommendations and fallback ranking endpoints."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query

from toolhub.dependencies import get_current_user_id, get_services, require_user_id
from toolhub.schemas.recommendation import (
    RecommendationsResponse, SuggestedBlockResponse, ToolListBlock
)
from toolhub.services.recommendation import DEFAULT_LIMIT
from toolhub.startup import Services

logger = logging.getLogger(__name__)

MAX_LIMIT = 50

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])


@router.get("/for-me", response_model=RecommendationsResponse)
async def get_recommendations_for_me(
    limit: int = Query(DEFAULT_LIMIT, ge=0, le=MAX_LIMIT, description="Maximum recommendations"),
    user_id: str = Depends(require_user_id),
    services: Services = Depends(get_services),
):
    """Get personalized tool recommendations based on tracked preferences.

    Each recommendation carries the reasons that contributed to its score.
    The user's most recently viewed tools are left out.
    """
    recommendations = services.recommendations.recommend(user_id, limit)
    logger.info(f"Got {len(recommendations)} recommendations for user {user_id}")

    return RecommendationsResponse(
        user_id=user_id,
        recommendations=recommendations,
        total_count=len(recommendations),
    )


@router.get("/trending", response_model=ToolListBlock)
async def get_trending(
    limit: int = Query(DEFAULT_LIMIT, ge=0, le=MAX_LIMIT),
    services: Services = Depends(get_services),
):
    """Popular or top-rated tools, most reviewed first."""
    tools = services.trending.trending(limit)
    return ToolListBlock(tools=tools, total_count=len(tools))


@router.get("/category/{category}", response_model=ToolListBlock)
async def get_by_category(
    category: str,
    limit: int = Query(DEFAULT_LIMIT, ge=0, le=MAX_LIMIT),
    services: Services = Depends(get_services),
):
    """Best tools in a category. Empty for unknown categories."""
    tools = services.categories.by_category(category, limit)
    return ToolListBlock(tools=tools, total_count=len(tools), category=category)


@router.get("/suggested", response_model=SuggestedBlockResponse)
async def get_suggested_block(
    location: str = Query("home", description="UI location: home, dashboard, tool_detail, search"),
    user_id: Optional[str] = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Get suggested tools block for a UI location.

    Signed-in users get personalized recommendations; anonymous visitors
    get trending tools instead.
    """
    limit_map = {
        "home": 6,
        "dashboard": 6,
        "tool_detail": 4,
        "search": 3,
    }
    limit = limit_map.get(location, DEFAULT_LIMIT)

    if not user_id:
        tools = services.trending.trending(limit)
        return SuggestedBlockResponse(
            location=location,
            title="Trending AI Tools",
            subtitle="Popular tools in the AI community",
            personalized=False,
            tools=tools,
            show_block=len(tools) > 0,
        )

    recommendations = services.recommendations.recommend(user_id, limit)

    titles = {
        "home": "Recommended for You",
        "dashboard": "Picked for You",
        "tool_detail": "You Might Also Like",
        "search": "Based on Your Interests",
    }

    return SuggestedBlockResponse(
        location=location,
        title=titles.get(location, "Recommended for You"),
        subtitle="Personalized AI tools based on your interests",
        personalized=True,
        recommendations=recommendations,
        tools=[r.tool for r in recommendations],
        show_block=len(recommendations) > 0,
    )
