"""Pydantic schemas."""
from toolhub.schemas.catalog import Tool, Pricing, CategorySummary, SortBy
from toolhub.schemas.preferences import UserPreferences, PreferencesUpdate
from toolhub.schemas.recommendation import RecommendationScore

__all__ = [
    "Tool",
    "Pricing",
    "CategorySummary",
    "SortBy",
    "UserPreferences",
    "PreferencesUpdate",
    "RecommendationScore",
]
