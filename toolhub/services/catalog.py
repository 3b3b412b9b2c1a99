"""Catalog store: the static list of tools in the directory.

Loaded once at startup from a JSON file and never mutated afterwards.
Everything that ranks or filters tools reads from here.
"""
import json
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import TypeAdapter, ValidationError

from toolhub.schemas.catalog import (
    CATEGORY_ICONS, CategorySummary, Pricing, SortBy, Tool
)

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "tools.json"

_tool_list = TypeAdapter(list[Tool])


class CatalogLoadError(ValueError):
    """Raised when the catalog file is missing or invalid."""


class CatalogStore:
    """Read-only accessor over the directory's tools.

    Iteration order is the file order; rankers rely on it to break ties.
    """

    def __init__(self, tools: Iterable[Tool]):
        self._tools: tuple[Tool, ...] = tuple(tools)
        self._by_id: dict[int, Tool] = {}
        for tool in self._tools:
            if tool.id in self._by_id:
                raise CatalogLoadError(f"Duplicate tool id {tool.id} ({tool.name})")
            self._by_id[tool.id] = tool

    @classmethod
    def from_file(cls, path: Optional[Union[str, Path]] = None) -> "CatalogStore":
        """Load the catalog from a JSON file.

        Args:
            path: JSON file holding a list of tool records. Defaults to the
                packaged catalog.

        Returns:
            Loaded CatalogStore

        Raises:
            CatalogLoadError: If the file cannot be read or a record is invalid
        """
        path = Path(path) if path else DEFAULT_CATALOG_PATH

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise CatalogLoadError(f"Cannot read catalog file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise CatalogLoadError(f"Catalog file {path} is not valid JSON: {e}") from e

        try:
            tools = _tool_list.validate_python(raw)
        except ValidationError as e:
            raise CatalogLoadError(f"Catalog file {path} has invalid tool records:\n{e}") from e

        store = cls(tools)
        logger.info(f"Loaded {len(store)} tools from {path}")
        return store

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self):
        return iter(self._tools)

    def all_tools(self) -> list[Tool]:
        """All tools in catalog order."""
        return list(self._tools)

    def get_tool(self, tool_id: int) -> Optional[Tool]:
        """Look up a tool by id, None if unknown."""
        return self._by_id.get(tool_id)

    def categories(self) -> list[CategorySummary]:
        """Every directory category with its icon and tool count."""
        counts = {name: 0 for name in CATEGORY_ICONS}
        for tool in self._tools:
            counts[tool.category] += 1
        return [
            CategorySummary(name=name, icon=icon, count=counts[name])
            for name, icon in CATEGORY_ICONS.items()
        ]

    def featured_tools(self) -> list[Tool]:
        return [t for t in self._tools if t.featured]

    @staticmethod
    def pricing_options() -> list[str]:
        return [p.value for p in Pricing]

    def all_tags(self) -> list[str]:
        """Unique tags across the catalog, sorted alphabetically."""
        return sorted({tag for tool in self._tools for tag in tool.tags})

    def search(
        self,
        query: Optional[str] = None,
        categories: Optional[list[str]] = None,
        pricing: Optional[list[str]] = None,
        tags: Optional[list[str]] = None,
        min_rating: float = 0.0,
        max_rating: float = 5.0,
        sort_by: SortBy = SortBy.RATING,
    ) -> list[Tool]:
        """
        Filter and sort the catalog.

        Args:
            query: Case-insensitive substring matched against name, description,
                category, tags and developer
            categories: Keep tools in any of these categories
            pricing: Keep tools with any of these pricing tiers
            tags: Keep tools carrying at least one of these tags
            min_rating: Inclusive lower rating bound
            max_rating: Inclusive upper rating bound
            sort_by: Sort order; ties keep catalog order

        Returns:
            Matching tools
        """
        needle = query.lower() if query else None

        results = []
        for tool in self._tools:
            if needle and not _matches_text(tool, needle):
                continue
            if categories and tool.category not in categories:
                continue
            if pricing and tool.pricing.value not in pricing:
                continue
            if tags and not any(tag in tool.tags for tag in tags):
                continue
            if tool.rating < min_rating or tool.rating > max_rating:
                continue
            results.append(tool)

        if sort_by == SortBy.RATING:
            results.sort(key=lambda t: t.rating, reverse=True)
        elif sort_by == SortBy.REVIEWS:
            results.sort(key=lambda t: t.reviews, reverse=True)
        elif sort_by == SortBy.NAME:
            results.sort(key=lambda t: t.name.casefold())
        elif sort_by == SortBy.NEWEST:
            results.sort(key=lambda t: t.last_updated or date.min, reverse=True)

        return results


def _matches_text(tool: Tool, needle: str) -> bool:
    """Whether a lowercase search string appears anywhere in the tool's text."""
    if needle in tool.name.lower() or needle in tool.description.lower():
        return True
    if needle in tool.category.lower():
        return True
    if any(needle in tag.lower() for tag in tool.tags):
        return True
    return bool(tool.developer and needle in tool.developer.lower())
