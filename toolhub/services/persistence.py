"""Key-value backends for the preference store.

The store only needs ``get(key)`` and ``set(key, value)`` on raw strings.
Each ``set`` is its own write; there is no batching and no locking, so two
concurrent writes for the same key are last-write-wins.
"""
import logging
from typing import Callable, Optional, Protocol

from sqlalchemy.orm import Session

from toolhub.models.preferences import UserPreferenceRecord

logger = logging.getLogger(__name__)


class KeyValueBackend(Protocol):
    """Minimal persistence contract used by the preference store."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryBackend:
    """Process-local backend for development and tests."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class DatabaseBackend:
    """Backend storing one ``user_preferences`` row per key.

    Opens a short-lived session per call so it can be shared across requests.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        db = self.session_factory()
        try:
            record = db.get(UserPreferenceRecord, key)
            return record.payload if record else None
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self.session_factory()
        try:
            record = db.get(UserPreferenceRecord, key)
            if record:
                record.payload = value
            else:
                db.add(UserPreferenceRecord(key=key, payload=value))
            db.commit()
        except Exception:
            db.rollback()
            logger.error(f"Failed to persist preferences for key {key}", exc_info=True)
            raise
        finally:
            db.close()
