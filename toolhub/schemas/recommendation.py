"""Recommendation Pydantic schemas."""
from pydantic import BaseModel, Field
from typing import Optional

from toolhub.schemas.catalog import Tool


class RecommendationScore(BaseModel):
    """A tool with its relevance score and the reasons behind it.

    The score is only meaningful for ordering within a single call.
    """
    tool: Tool
    score: float
    reasons: list[str] = Field(default_factory=list)


class RecommendationsResponse(BaseModel):
    """Personalized recommendations for the current user."""
    user_id: str
    recommendations: list[RecommendationScore]
    total_count: int


class ToolListBlock(BaseModel):
    """Unscored list of tools (trending, category, similar)."""
    tools: list[Tool]
    total_count: int
    category: Optional[str] = None
    tool_id: Optional[int] = None


class SuggestedBlockResponse(BaseModel):
    """Suggested tools block for a UI location."""
    location: str
    title: str
    subtitle: str
    personalized: bool
    recommendations: list[RecommendationScore] = Field(default_factory=list)
    tools: list[Tool] = Field(default_factory=list)
    show_block: bool
