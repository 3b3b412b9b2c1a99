"""Persisted user preference blobs."""
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func
from toolhub.db import Base


class UserPreferenceRecord(Base):
    """Raw key-value row backing the preference store.

    One row per user key. The payload is the JSON serialisation of
    ``UserPreferences``; it is parsed by the preference store, never by SQL,
    so a corrupt payload is only detected (and replaced) on read.
    """

    __tablename__ = "user_preferences"

    key = Column(String(255), primary_key=True)
    payload = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
