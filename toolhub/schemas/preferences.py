"""User preference Pydantic schemas."""
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from toolhub.schemas.catalog import CATEGORY_NAMES


class UserPreferences(BaseModel):
    """One user's interaction history.

    ``viewed_tools`` and ``search_history`` are most-recent first and
    deduplicated. ``rated_tools`` maps tool id to the user's rating; a
    re-rating overwrites the value in place.
    """
    favorite_categories: list[str] = Field(default_factory=list)
    viewed_tools: list[int] = Field(default_factory=list)
    rated_tools: dict[int, float] = Field(default_factory=dict)
    search_history: list[str] = Field(default_factory=list)


class PreferencesUpdate(BaseModel):
    """Partial update; only fields that are explicitly set are merged."""
    favorite_categories: Optional[list[str]] = None
    viewed_tools: Optional[list[int]] = None
    rated_tools: Optional[dict[int, float]] = None
    search_history: Optional[list[str]] = None

    @field_validator('favorite_categories')
    @classmethod
    def validate_categories(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Only known categories can be marked as favorites."""
        if v is None:
            return v
        unknown = [c for c in v if c not in CATEGORY_NAMES]
        if unknown:
            raise ValueError(f"Unknown categories: {', '.join(unknown)}")
        return v


class PreferencesPatchRequest(PreferencesUpdate):
    """Body of PATCH /api/preferences/me. Ratings get the same 0-5 check as POST /ratings."""

    @field_validator('rated_tools')
    @classmethod
    def validate_ratings(cls, v: Optional[dict[int, float]]) -> Optional[dict[int, float]]:
        if v is None:
            return v
        out_of_range = [tool_id for tool_id, rating in v.items() if not 0 <= rating <= 5]
        if out_of_range:
            raise ValueError(f"Ratings must be between 0 and 5 (tools {out_of_range})")
        return v


# Request Schemas
class TrackViewRequest(BaseModel):
    """Schema for recording a tool view."""
    tool_id: int


class TrackRatingRequest(BaseModel):
    """Schema for recording a rating."""
    tool_id: int
    rating: float = Field(..., ge=0, le=5, description="Rating from 0 to 5 stars")


class TrackSearchRequest(BaseModel):
    """Schema for recording a search query."""
    query: str = Field(..., min_length=1, max_length=200)
