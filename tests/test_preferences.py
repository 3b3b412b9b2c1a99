"""Preference store tests."""
import logging

import pytest
from pydantic import ValidationError

from toolhub.schemas.preferences import PreferencesUpdate, UserPreferences
from toolhub.services.preferences import PreferenceStore


class TestDefaults:
    """Test first access for a user."""

    def test_unknown_user_gets_empty_defaults(self, store):
        """Test an unknown user is initialised with empty preferences."""
        prefs = store.get("new-user")
        assert prefs == UserPreferences()
        assert prefs.viewed_tools == []
        assert prefs.rated_tools == {}

    def test_get_returns_a_copy(self, store):
        """Test mutating a returned record does not change the store."""
        prefs = store.get("u")
        prefs.viewed_tools.append(42)
        assert store.get("u").viewed_tools == []


class TestTrackView:
    """Test viewed tool tracking."""

    def test_view_moves_to_front(self, store):
        """Test the latest view is first."""
        store.track_view("u", 1)
        store.track_view("u", 2)
        assert store.get("u").viewed_tools == [2, 1]

    def test_repeated_view_not_duplicated(self, store):
        """Test viewing the same tool twice keeps one entry at the front."""
        store.track_view("u", 5)
        store.track_view("u", 5)
        assert store.get("u").viewed_tools == [5]

    def test_reviewed_tool_moves_back_to_front(self, store):
        """Test a re-viewed tool is moved, not duplicated."""
        for tool_id in (1, 2, 3):
            store.track_view("u", tool_id)
        store.track_view("u", 1)
        assert store.get("u").viewed_tools == [1, 3, 2]

    def test_viewed_tools_capped_at_50(self, store):
        """Test the oldest views are evicted beyond 50."""
        for tool_id in range(1, 61):
            store.track_view("u", tool_id)
        viewed = store.get("u").viewed_tools
        assert len(viewed) == 50
        assert viewed[0] == 60
        assert viewed[-1] == 11

    def test_custom_cap(self, backend):
        """Test the cap is configurable."""
        store = PreferenceStore(backend, max_viewed=3)
        for tool_id in range(1, 6):
            store.track_view("u", tool_id)
        assert store.get("u").viewed_tools == [5, 4, 3]


class TestTrackRating:
    """Test rating tracking."""

    def test_rating_recorded(self, store):
        """Test a rating is stored once for the tool."""
        store.track_rating("u", 7, 5)
        assert store.get("u").rated_tools == {7: 5}

    def test_rerating_overwrites(self, store):
        """Test rating a tool again overwrites without a second entry."""
        store.track_rating("u", 7, 5)
        store.track_rating("u", 3, 4)
        store.track_rating("u", 7, 3)
        rated = store.get("u").rated_tools
        assert rated == {7: 3, 3: 4}
        assert list(rated) == [7, 3]

    def test_store_does_not_validate_range(self, store):
        """Test range checks are left to callers."""
        store.track_rating("u", 1, 9)
        assert store.get("u").rated_tools[1] == 9


class TestTrackSearch:
    """Test search history tracking."""

    def test_search_moves_to_front(self, store):
        """Test repeated queries move to the front."""
        store.track_search("u", "video")
        store.track_search("u", "code")
        store.track_search("u", "video")
        assert store.get("u").search_history == ["video", "code"]

    def test_search_match_is_case_sensitive(self, store):
        """Test queries differing only in case are kept separately."""
        store.track_search("u", "AI")
        store.track_search("u", "ai")
        assert store.get("u").search_history == ["ai", "AI"]

    def test_search_history_capped_at_20(self, store):
        """Test the oldest searches are evicted beyond 20."""
        for i in range(25):
            store.track_search("u", f"query {i}")
        history = store.get("u").search_history
        assert len(history) == 20
        assert history[0] == "query 24"
        assert history[-1] == "query 5"


class TestUpdate:
    """Test partial updates."""

    def test_update_merges_only_given_fields(self, store):
        """Test unset fields are left untouched."""
        store.track_view("u", 3)
        store.update("u", {"favorite_categories": ["Development"]})
        prefs = store.get("u")
        assert prefs.favorite_categories == ["Development"]
        assert prefs.viewed_tools == [3]

    def test_update_accepts_schema(self, store):
        """Test updates can be passed as a PreferencesUpdate."""
        store.update("u", PreferencesUpdate(search_history=["chat"]))
        assert store.get("u").search_history == ["chat"]

    def test_update_reapplies_caps_and_dedupe(self, store):
        """Test an update cannot break the ordering invariants."""
        store.update("u", {"viewed_tools": [1, 1, 2] + list(range(3, 70))})
        viewed = store.get("u").viewed_tools
        assert len(viewed) == 50
        assert viewed[:3] == [1, 2, 3]

    def test_update_rejects_unknown_category(self, store):
        """Test favorite categories must exist."""
        with pytest.raises(ValidationError):
            store.update("u", {"favorite_categories": ["Robotics"]})


class TestPersistence:
    """Test write-through persistence."""

    def test_every_mutation_is_persisted(self, backend, store):
        """Test a fresh store over the same backend sees the data."""
        store.track_view("u", 4)
        store.track_rating("u", 4, 5)
        store.track_search("u", "art")

        reloaded = PreferenceStore(backend).get("u")
        assert reloaded.viewed_tools == [4]
        assert reloaded.rated_tools == {4: 5}
        assert reloaded.search_history == ["art"]

    def test_users_are_isolated(self, store):
        """Test one user's activity does not leak to another."""
        store.track_view("alice", 1)
        assert store.get("bob").viewed_tools == []

    def test_key_prefix(self, backend):
        """Test records are stored under the per-user namespace."""
        store = PreferenceStore(backend)
        store.track_view("u", 1)
        assert backend.get("ai-tools-preferences-u") is not None

    def test_database_backend_round_trip(self, db_backend):
        """Test preferences survive through the database backend."""
        store = PreferenceStore(db_backend)
        store.track_rating("u", 2, 4.5)
        store.track_rating("u", 2, 3)

        reloaded = PreferenceStore(db_backend).get("u")
        assert reloaded.rated_tools == {2: 3}

    def test_database_backend_overwrites_row(self, db_backend, db_session):
        """Test repeated writes update a single row."""
        from toolhub.models import UserPreferenceRecord

        store = PreferenceStore(db_backend)
        store.track_view("u", 1)
        store.track_view("u", 2)
        assert db_session.query(UserPreferenceRecord).count() == 1


class TestCorruptRecords:
    """Test the silent fallback for unreadable stored records."""

    def test_corrupt_record_falls_back_to_defaults(self, backend):
        """Test malformed JSON yields defaults without raising."""
        backend.set("ai-tools-preferences-u", "{not json")
        store = PreferenceStore(backend)
        assert store.get("u") == UserPreferences()

    def test_fallback_is_observable(self, backend, caplog):
        """Test the fallback is flagged, logged and reported to the hook."""
        backend.set("ai-tools-preferences-u", '{"viewed_tools": "abc"}')
        seen = []
        store = PreferenceStore(backend, on_fallback=lambda user_id, error: seen.append(user_id))

        with caplog.at_level(logging.WARNING, logger="toolhub.services.preferences"):
            result = store.load("u")

        assert result.fallback_used is True
        assert result.error
        assert result.preferences == UserPreferences()
        assert seen == ["u"]
        assert "unreadable" in caplog.text

    def test_clean_record_not_flagged(self, store):
        """Test a normal load is not reported as a fallback."""
        store.track_view("u", 1)
        assert store.load("u").fallback_used is False

    def test_failing_hook_does_not_escape(self, backend, caplog):
        """Test an exception raised by the fallback hook is logged, not propagated."""
        backend.set("ai-tools-preferences-u", "garbage")

        def hook(user_id, error):
            raise RuntimeError("hook failed")

        store = PreferenceStore(backend, on_fallback=hook)

        with caplog.at_level(logging.ERROR, logger="toolhub.services.preferences"):
            assert store.get("u") == UserPreferences()
            assert store.track_view("u", 3).viewed_tools == [3]

        assert "fallback hook failed" in caplog.text

    def test_write_replaces_corrupt_record(self, backend):
        """Test the next mutation overwrites the corrupt record."""
        backend.set("ai-tools-preferences-u", "garbage")
        store = PreferenceStore(backend)
        store.track_view("u", 9)

        assert store.load("u").fallback_used is False
        assert PreferenceStore(backend).get("u").viewed_tools == [9]


class TestRecentlyViewed:
    """Test resolving viewed ids to tools."""

    def test_recent_tools_resolved_in_order(self, store, catalog):
        """Test recent tools are returned most recent first."""
        for tool_id in (1, 2, 3):
            store.track_view("u", tool_id)
        assert [t.id for t in store.recently_viewed("u", catalog, limit=2)] == [3, 2]

    def test_unknown_ids_skipped(self, store, catalog):
        """Test ids missing from the catalog are skipped."""
        store.track_view("u", 1)
        store.track_view("u", 999)
        assert [t.id for t in store.recently_viewed("u", catalog)] == [1]


class TestSharedBackend:
    """Test several stores writing through one backend."""

    def test_interleaved_views_are_not_lost(self, db_backend):
        """Test a store with a cached record does not overwrite newer writes."""
        first = PreferenceStore(db_backend)
        second = PreferenceStore(db_backend)

        first.track_view("u", 1)
        second.track_view("u", 2)
        first.track_view("u", 3)

        assert PreferenceStore(db_backend).get("u").viewed_tools == [3, 2, 1]

    def test_interleaved_mutation_kinds(self, db_backend):
        """Test ratings, searches and updates from different stores all survive."""
        first = PreferenceStore(db_backend)
        second = PreferenceStore(db_backend)

        first.get("u")
        second.track_rating("u", 4, 5)
        first.track_search("u", "video")
        second.update("u", {"favorite_categories": ["Productivity"]})
        first.track_view("u", 6)

        prefs = PreferenceStore(db_backend).get("u")
        assert prefs.rated_tools == {4: 5}
        assert prefs.search_history == ["video"]
        assert prefs.favorite_categories == ["Productivity"]
        assert prefs.viewed_tools == [6]

    def test_own_writes_visible_through_cache(self, db_backend):
        """Test reads after a mutation reflect it."""
        store = PreferenceStore(db_backend)
        store.track_view("u", 5)
        assert store.get("u").viewed_tools == [5]
