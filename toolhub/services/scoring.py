"""Scoring policy for recommendations, similarity and fallback rankings.

All weights are plain data so they can be overridden from settings
(e.g. ``SCORING__CATEGORY_AFFINITY=40``) and tuned in tests without
touching the ranking code.
"""
from pydantic import BaseModel, Field


class ScoringWeights(BaseModel):
    """Weights for personalized recommendation scoring.

    Base quality is ``rating * rating_multiplier + ln(reviews + 1) * review_log_multiplier``.
    Every other weight is a flat bonus applied when its signal fires.
    """

    rating_multiplier: float = 10.0
    review_log_multiplier: float = 2.0

    category_affinity: float = 30.0  # tool category in favorite_categories
    rated_category: float = 20.0  # same category as a tool the user rated highly
    search_match: float = 15.0  # a past search query appears in the tool text
    trending: float = 10.0
    verified: float = 5.0
    free_pricing: float = 8.0  # silent bias, no reason string

    high_rating_threshold: float = 4.0
    recent_view_exclusion: int = Field(10, ge=0)
    free_pricing_tiers: list[str] = Field(default_factory=lambda: ["Free", "Freemium"])

    class Config:
        extra = "forbid"


class SimilarityWeights(BaseModel):
    """Weights for tool-to-tool similarity scoring."""

    same_category: float = 50.0
    shared_tag: float = 10.0  # per shared tag, uncapped
    same_pricing: float = 15.0
    close_rating: float = 20.0
    close_rating_band: float = 0.5
    near_rating: float = 10.0
    near_rating_band: float = 1.0
    popular: float = 10.0

    class Config:
        extra = "forbid"


class SelectorPolicy(BaseModel):
    """Thresholds for the context-free trending and category rankings."""

    trending_min_rating: float = 4.5
    category_rating_tie: float = 0.1

    class Config:
        extra = "forbid"
