"""Similar-tool lookup.

Finds the catalog tools closest to a reference tool by shared attributes.
Independent of any user.
"""
import logging
from typing import Optional

from toolhub.schemas.catalog import Tool
from toolhub.services.catalog import CatalogStore
from toolhub.services.scoring import SimilarityWeights

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 4


class SimilarityEngine:
    """Ranks other tools by attribute overlap with a reference tool."""

    def __init__(self, catalog: CatalogStore, weights: Optional[SimilarityWeights] = None):
        self.catalog = catalog
        self.weights = weights or SimilarityWeights()

    def score(self, reference: Tool, candidate: Tool) -> float:
        """
        Similarity of a candidate to the reference tool.

        Sum of: same category, shared tags (per tag, uncapped), same pricing,
        rating proximity (the tighter band is checked first) and the
        candidate's popularity.
        """
        w = self.weights
        score = 0.0

        if candidate.category == reference.category:
            score += w.same_category

        shared_tags = set(candidate.tags) & set(reference.tags)
        score += len(shared_tags) * w.shared_tag

        if candidate.pricing == reference.pricing:
            score += w.same_pricing

        rating_diff = abs(candidate.rating - reference.rating)
        if rating_diff <= w.close_rating_band:
            score += w.close_rating
        elif rating_diff <= w.near_rating_band:
            score += w.near_rating

        if candidate.popular:
            score += w.popular

        return score

    def similar(self, tool_id: int, limit: int = DEFAULT_LIMIT) -> list[Tool]:
        """
        Get the tools most similar to a given tool.

        Args:
            tool_id: Reference tool id
            limit: Maximum number of results

        Returns:
            Up to ``limit`` tools, most similar first, never including the
            reference tool. Empty if the id is not in the catalog.
        """
        reference = self.catalog.get_tool(tool_id)
        if reference is None:
            logger.debug(f"Similar tools requested for unknown tool {tool_id}")
            return []
        if limit <= 0:
            return []

        scored = [
            (self.score(reference, tool), tool)
            for tool in self.catalog
            if tool.id != reference.id
        ]
        scored.sort(key=lambda pair: pair[0], reverse=True)

        return [tool for _, tool in scored[:limit]]
