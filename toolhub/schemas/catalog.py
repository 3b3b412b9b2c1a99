"""Catalog Pydantic schemas."""
from pydantic import BaseModel, Field, field_validator
from datetime import date
from enum import Enum
from typing import Optional


class Pricing(str, Enum):
    """Pricing tiers a tool can be listed under."""
    FREE = "Free"
    FREEMIUM = "Freemium"
    SUBSCRIPTION = "Subscription"
    PAY_PER_USE = "Pay-per-use"
    ADD_ON = "Add-on"


# Category name -> icon name shown next to it in the directory
CATEGORY_ICONS = {
    "Language Models": "Brain",
    "Image Generation": "Palette",
    "Development": "Code",
    "Content Creation": "BookOpen",
    "Video Generation": "Video",
    "Productivity": "Zap",
}

CATEGORY_NAMES = list(CATEGORY_ICONS)


class SortBy(str, Enum):
    """Sort orders offered by catalog search."""
    RATING = "rating"
    REVIEWS = "reviews"
    NAME = "name"
    NEWEST = "newest"


class Tool(BaseModel):
    """A directory entry. Immutable once loaded."""
    id: int
    name: str = Field(..., min_length=1)
    description: str
    long_description: Optional[str] = None
    category: str
    rating: float = Field(..., ge=0.0, le=5.0)
    reviews: int = Field(..., ge=0)
    pricing: Pricing
    image: Optional[str] = None
    tags: tuple[str, ...] = ()
    website: Optional[str] = None
    developer: Optional[str] = None
    last_updated: Optional[date] = None
    featured: bool = False
    popular: bool = False
    verified: bool = False

    class Config:
        frozen = True

    @field_validator('category')
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Category must be one of the directory's categories."""
        if v not in CATEGORY_ICONS:
            raise ValueError(f"Unknown category {v!r}; expected one of {CATEGORY_NAMES}")
        return v


class CategorySummary(BaseModel):
    """Category with its icon and number of tools."""
    name: str
    icon: str
    count: int


class ToolListResponse(BaseModel):
    """Paginated catalog search result."""
    tools: list[Tool]
    total: int
    page: int
    per_page: int
    total_pages: int
