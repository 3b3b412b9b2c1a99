"""Personalized tool recommendation service.

Ranks catalog tools for one user from their tracked preferences. Scores are
a sum of independent, explainable contributions:

- Base quality: rating and (log) review count, always applied
- Category affinity: tool category is one of the user's favorites
- Rated-category similarity: same category as a tool the user rated highly
- Search relevance: a past search query appears in the tool's text
- Trending and verified flags
- Free/freemium pricing (silent bias, no reason given)

Tools the user viewed most recently are excluded so the list surfaces
something new. The engine only reads the catalog and the preference store.
"""
import logging
import math
from typing import Optional

from toolhub.schemas.catalog import Tool
from toolhub.schemas.preferences import UserPreferences
from toolhub.schemas.recommendation import RecommendationScore
from toolhub.services.catalog import CatalogStore
from toolhub.services.preferences import PreferenceStore
from toolhub.services.scoring import ScoringWeights

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 6

REASON_FALLBACK = "Highly rated"
REASON_RATED_CATEGORY = "Similar to tools you rated highly"
REASON_SEARCH_MATCH = "Matches your search interests"
REASON_TRENDING = "Trending now"
REASON_VERIFIED = "Verified tool"


def base_quality(tool: Tool, weights: ScoringWeights) -> float:
    """Score from rating and review volume alone."""
    return (
        tool.rating * weights.rating_multiplier
        + math.log(tool.reviews + 1) * weights.review_log_multiplier
    )


def matches_search(tool: Tool, queries: list[str]) -> bool:
    """Whether any query is a case-insensitive substring of the tool's name, description or tags."""
    name = tool.name.lower()
    description = tool.description.lower()
    tags = [tag.lower() for tag in tool.tags]

    for query in queries:
        q = query.lower()
        if q in name or q in description or any(q in tag for tag in tags):
            return True
    return False


class RecommendationEngine:
    """Scores and ranks tools for a user."""

    def __init__(
        self,
        catalog: CatalogStore,
        preferences: PreferenceStore,
        weights: Optional[ScoringWeights] = None,
    ):
        self.catalog = catalog
        self.preferences = preferences
        self.weights = weights or ScoringWeights()

    def highly_rated_categories(self, prefs: UserPreferences) -> set[str]:
        """Categories of catalog tools the user rated at or above the threshold.

        Ratings for ids no longer in the catalog are ignored.
        """
        categories = set()
        for tool_id, rating in prefs.rated_tools.items():
            if rating < self.weights.high_rating_threshold:
                continue
            tool = self.catalog.get_tool(tool_id)
            if tool:
                categories.add(tool.category)
        return categories

    def score_tool(
        self,
        tool: Tool,
        prefs: UserPreferences,
        rated_categories: set[str],
    ) -> RecommendationScore:
        """
        Score one tool against a preference snapshot.

        Reasons are appended in contribution priority order; when no signal
        produced a reason the fallback "Highly rated" is used.

        Args:
            tool: Candidate tool
            prefs: The user's preferences
            rated_categories: Output of ``highly_rated_categories`` for prefs

        Returns:
            RecommendationScore with total score and reasons
        """
        w = self.weights
        score = base_quality(tool, w)
        reasons = []

        if tool.category in prefs.favorite_categories:
            score += w.category_affinity
            reasons.append(f"Popular in {tool.category}")

        if tool.category in rated_categories:
            score += w.rated_category
            reasons.append(REASON_RATED_CATEGORY)

        if matches_search(tool, prefs.search_history):
            score += w.search_match
            reasons.append(REASON_SEARCH_MATCH)

        if tool.popular:
            score += w.trending
            reasons.append(REASON_TRENDING)

        if tool.verified:
            score += w.verified
            reasons.append(REASON_VERIFIED)

        if tool.pricing.value in w.free_pricing_tiers:
            score += w.free_pricing

        if not reasons:
            reasons.append(REASON_FALLBACK)

        return RecommendationScore(tool=tool, score=score, reasons=reasons)

    def recommend(self, user_id: str, limit: int = DEFAULT_LIMIT) -> list[RecommendationScore]:
        """
        Get personalized recommendations for a user.

        Args:
            user_id: User identifier; unknown users get default preferences
            limit: Maximum number of results

        Returns:
            Up to ``limit`` scored tools, best first. Equal scores keep
            catalog order.
        """
        if limit <= 0:
            return []

        prefs = self.preferences.get(user_id)
        recently_viewed = set(prefs.viewed_tools[:self.weights.recent_view_exclusion])
        rated_categories = self.highly_rated_categories(prefs)

        scored = [
            self.score_tool(tool, prefs, rated_categories)
            for tool in self.catalog
            if tool.id not in recently_viewed
        ]

        # list.sort is stable, so catalog order breaks ties
        scored.sort(key=lambda r: r.score, reverse=True)

        logger.debug(
            f"Scored {len(scored)} tools for user {user_id}, "
            f"excluded {len(recently_viewed)} recently viewed"
        )
        return scored[:limit]
