"""Database models."""
from toolhub.models.preferences import UserPreferenceRecord

__all__ = [
    "UserPreferenceRecord",
]
