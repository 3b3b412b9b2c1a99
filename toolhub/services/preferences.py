"""Preference store: per-user interaction history.

Sole owner of ``UserPreferences``. Every mutation writes the full record
through to the key-value backend before returning. Loaded records are kept
in a per-store cache keyed by user id for reads; mutations re-read the
backend so stores sharing one backend do not overwrite each other's writes.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from pydantic import ValidationError

from toolhub.schemas.catalog import Tool
from toolhub.schemas.preferences import PreferencesUpdate, UserPreferences
from toolhub.services.catalog import CatalogStore
from toolhub.services.persistence import KeyValueBackend

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "ai-tools-preferences-"
MAX_VIEWED_TOOLS = 50
MAX_SEARCH_HISTORY = 20

FallbackHook = Callable[[str, Exception], None]


@dataclass
class PreferencesLoad:
    """Outcome of reading a user's preferences.

    ``fallback_used`` is True when a stored record existed but could not be
    parsed and defaults were used in its place.
    """

    preferences: UserPreferences
    fallback_used: bool = False
    error: Optional[str] = None


def _move_to_front(items: list, item) -> list:
    """Return a copy of items with item first and no other occurrence of it."""
    return [item] + [existing for existing in items if existing != item]


def _dedupe(items: list) -> list:
    """Drop repeated entries, keeping the first (most recent) occurrence."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


class PreferenceStore:
    """Reads and mutates user preferences through a key-value backend."""

    def __init__(
        self,
        backend: KeyValueBackend,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        max_viewed: int = MAX_VIEWED_TOOLS,
        max_searches: int = MAX_SEARCH_HISTORY,
        on_fallback: Optional[FallbackHook] = None,
    ):
        self.backend = backend
        self.key_prefix = key_prefix
        self.max_viewed = max_viewed
        self.max_searches = max_searches
        self.on_fallback = on_fallback
        self._cache: dict[str, PreferencesLoad] = {}

    def key_for(self, user_id: str) -> str:
        """Backend key holding a user's preferences."""
        return f"{self.key_prefix}{user_id}"

    def load(self, user_id: str) -> PreferencesLoad:
        """
        Read a user's preferences, reporting whether defaults replaced a corrupt record.

        Unknown users get empty defaults. A stored record that fails to parse is
        treated as absent: no exception reaches the caller, but the fallback is
        logged, passed to ``on_fallback`` and flagged on the result.

        Args:
            user_id: User identifier

        Returns:
            PreferencesLoad with a copy of the preferences
        """
        cached = self._cache.get(user_id)
        if cached is None:
            cached = self._read(user_id)
            self._cache[user_id] = cached

        return PreferencesLoad(
            preferences=cached.preferences.model_copy(deep=True),
            fallback_used=cached.fallback_used,
            error=cached.error,
        )

    def _read(self, user_id: str) -> PreferencesLoad:
        key = self.key_for(user_id)
        raw = self.backend.get(key)
        if raw is None:
            return PreferencesLoad(preferences=UserPreferences())

        try:
            return PreferencesLoad(preferences=UserPreferences.model_validate_json(raw))
        except ValidationError as e:
            logger.warning(
                f"Stored preferences for user {user_id} are unreadable, using defaults",
                extra={'extra_fields': {'user_id': user_id, 'key': key, 'error_count': e.error_count()}},
            )
            if self.on_fallback:
                try:
                    self.on_fallback(user_id, e)
                except Exception:
                    logger.exception(f"Preference fallback hook failed for user {user_id}")
            return PreferencesLoad(
                preferences=UserPreferences(),
                fallback_used=True,
                error=str(e),
            )

    def get(self, user_id: str) -> UserPreferences:
        """Current preferences for a user, initialised to defaults if none exist."""
        return self.load(user_id).preferences

    def _current(self, user_id: str) -> UserPreferences:
        """Latest stored preferences, bypassing and refreshing the cache."""
        loaded = self._read(user_id)
        self._cache[user_id] = loaded
        return loaded.preferences.model_copy(deep=True)

    def update(
        self,
        user_id: str,
        partial: Union[PreferencesUpdate, dict],
    ) -> UserPreferences:
        """
        Merge explicitly provided fields into the user's preferences and persist.

        Ordering invariants are re-applied after the merge: viewed tools and
        search history are deduplicated (first occurrence wins) and capped.

        Args:
            user_id: User identifier
            partial: Fields to replace; unset fields are left untouched

        Returns:
            The updated preferences
        """
        if not isinstance(partial, PreferencesUpdate):
            partial = PreferencesUpdate.model_validate(partial)

        return self._merge(user_id, self._current(user_id), partial)

    def _merge(
        self,
        user_id: str,
        current: UserPreferences,
        partial: PreferencesUpdate,
    ) -> UserPreferences:
        merged = current.model_copy(update=partial.model_dump(exclude_unset=True, exclude_none=True))

        updated = UserPreferences(
            favorite_categories=_dedupe(merged.favorite_categories),
            viewed_tools=_dedupe(merged.viewed_tools)[:self.max_viewed],
            rated_tools=dict(merged.rated_tools),
            search_history=_dedupe(merged.search_history)[:self.max_searches],
        )

        self.backend.set(self.key_for(user_id), updated.model_dump_json())
        self._cache[user_id] = PreferencesLoad(preferences=updated)

        return updated.model_copy(deep=True)

    def track_view(self, user_id: str, tool_id: int) -> UserPreferences:
        """Move a tool to the front of the user's viewed list."""
        preferences = self._current(user_id)
        viewed_tools = _move_to_front(preferences.viewed_tools, tool_id)
        logger.debug(f"Tracked view of tool {tool_id} for user {user_id}")
        return self._merge(user_id, preferences, PreferencesUpdate(viewed_tools=viewed_tools))

    def track_rating(self, user_id: str, tool_id: int, rating: float) -> UserPreferences:
        """Set or overwrite the user's rating for a tool.

        The range is not checked here; callers validate ratings.
        """
        preferences = self._current(user_id)
        rated_tools = dict(preferences.rated_tools)
        rated_tools[tool_id] = rating
        logger.debug(f"Tracked rating {rating} of tool {tool_id} for user {user_id}")
        return self._merge(user_id, preferences, PreferencesUpdate(rated_tools=rated_tools))

    def track_search(self, user_id: str, query: str) -> UserPreferences:
        """Move a query (exact, case-sensitive match) to the front of search history."""
        preferences = self._current(user_id)
        search_history = _move_to_front(preferences.search_history, query)
        logger.debug(f"Tracked search {query!r} for user {user_id}")
        return self._merge(user_id, preferences, PreferencesUpdate(search_history=search_history))

    def recently_viewed(self, user_id: str, catalog: CatalogStore, limit: int = 5) -> list[Tool]:
        """Most recently viewed tools that still exist in the catalog."""
        if limit <= 0:
            return []

        tools = []
        for tool_id in self.get(user_id).viewed_tools:
            tool = catalog.get_tool(tool_id)
            if tool:
                tools.append(tool)
                if len(tools) == limit:
                    break
        return tools
