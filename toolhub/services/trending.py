"""Context-free rankings for visitors without tracked preferences."""
from functools import cmp_to_key
from typing import Optional

from toolhub.schemas.catalog import Tool
from toolhub.services.catalog import CatalogStore
from toolhub.services.scoring import SelectorPolicy

DEFAULT_LIMIT = 6


class TrendingSelector:
    """Popular or top-rated tools, most reviewed first."""

    def __init__(self, catalog: CatalogStore, policy: Optional[SelectorPolicy] = None):
        self.catalog = catalog
        self.policy = policy or SelectorPolicy()

    def trending(self, limit: int = DEFAULT_LIMIT) -> list[Tool]:
        """Tools flagged popular or rated at least ``trending_min_rating``, by review count."""
        if limit <= 0:
            return []

        tools = [
            t for t in self.catalog
            if t.popular or t.rating >= self.policy.trending_min_rating
        ]
        tools.sort(key=lambda t: t.reviews, reverse=True)
        return tools[:limit]


class CategorySelector:
    """Best tools within one category."""

    def __init__(self, catalog: CatalogStore, policy: Optional[SelectorPolicy] = None):
        self.catalog = catalog
        self.policy = policy or SelectorPolicy()

    def _compare(self, a: Tool, b: Tool) -> int:
        # Ratings within the tie band count as equal; review count decides
        if abs(a.rating - b.rating) > self.policy.category_rating_tie:
            return -1 if a.rating > b.rating else 1
        return b.reviews - a.reviews

    def by_category(self, category: str, limit: int = DEFAULT_LIMIT) -> list[Tool]:
        """
        Tools in a category, highest rated first.

        Args:
            category: Category name; unknown categories give an empty list
            limit: Maximum number of results

        Returns:
            Up to ``limit`` tools of that category
        """
        if limit <= 0:
            return []

        tools = [t for t in self.catalog if t.category == category]
        tools.sort(key=cmp_to_key(self._compare))
        return tools[:limit]
