# tests/test_challenges.py
import json
from unittest.mock import patch

from conftest import FakeBackend
from rooty.challenges import CHALLENGE_STORAGE_KEY, ChallengeTracker, ThemeCache
from rooty.db import get_item, init_db, set_item


def test_get_completed_empty_by_default(tmp_db):
    init_db(tmp_db)
    assert ChallengeTracker(tmp_db).get_completed() == set()


def test_get_completed_without_storage_table(tmp_db):
    """Storage that was never initialized reads as empty."""
    assert ChallengeTracker(tmp_db).get_completed() == set()


def test_get_completed_malformed_data(tmp_db):
    init_db(tmp_db)
    set_item(tmp_db, CHALLENGE_STORAGE_KEY, "not json at all")
    assert ChallengeTracker(tmp_db).get_completed() == set()


def test_mark_complete_persists_set_and_date(tmp_db):
    init_db(tmp_db)
    tracker = ChallengeTracker(tmp_db)
    tracker.mark_complete(2)
    tracker.mark_complete(1)
    stored = json.loads(get_item(tmp_db, CHALLENGE_STORAGE_KEY))
    assert stored["completed"] == [1, 2]
    assert "date" in stored
    assert tracker.get_completed() == {1, 2}


def test_mark_complete_is_idempotent(tmp_db):
    init_db(tmp_db)
    tracker = ChallengeTracker(tmp_db)
    tracker.mark_complete(3)
    before = get_item(tmp_db, CHALLENGE_STORAGE_KEY)
    tracker.mark_complete(3)
    assert get_item(tmp_db, CHALLENGE_STORAGE_KEY) == before
    assert tracker.get_completed() == {3}


def test_mark_complete_swallows_write_errors(tmp_db):
    init_db(tmp_db)
    tracker = ChallengeTracker(tmp_db)
    with patch("rooty.challenges.db.set_item", side_effect=OSError("disk full")):
        tracker.mark_complete(1)
    assert tracker.get_completed() == set()


def test_all_complete(tmp_db):
    init_db(tmp_db)
    tracker = ChallengeTracker(tmp_db, total=4)
    for n in (1, 2, 3):
        tracker.mark_complete(n)
    assert tracker.all_complete() is False
    assert tracker.all_complete(3) is True
    tracker.mark_complete(4)
    assert tracker.all_complete() is True


def test_all_complete_superset(tmp_db):
    init_db(tmp_db)
    tracker = ChallengeTracker(tmp_db, total=4)
    for n in (1, 2, 3, 4, 5):
        tracker.mark_complete(n)
    assert tracker.all_complete() is True


def test_reset(tmp_db):
    init_db(tmp_db)
    tracker = ChallengeTracker(tmp_db)
    tracker.mark_complete(1)
    tracker.reset()
    assert get_item(tmp_db, CHALLENGE_STORAGE_KEY) is None
    assert tracker.get_completed() == set()


def test_is_valid(tmp_db):
    tracker = ChallengeTracker(tmp_db, total=4)
    assert tracker.is_valid(1)
    assert tracker.is_valid(4)
    assert not tracker.is_valid(0)
    assert not tracker.is_valid(5)
    assert not tracker.is_valid(None)


THEMES = [
    {"id": 1, "name": "Week 1", "week_start": "2025-12-01"},
    {"id": 7, "name": "Christmas Special", "week_start": "2025-12-22"},
]


def test_theme_cache_looks_up_once():
    backend = FakeBackend({"rpc_get_themes": THEMES})
    cache = ThemeCache("Christmas Special")
    assert cache.get_theme_id(backend) == 7
    assert cache.get_theme_id(backend) == 7
    assert backend.names() == ["rpc_get_themes"]


def test_theme_cache_missing_theme_not_cached():
    backend = FakeBackend({"rpc_get_themes": THEMES[:1]})
    cache = ThemeCache("Christmas Special")
    assert cache.get_theme_id(backend) is None
    assert cache.get_theme_id(backend) is None
    assert len(backend.calls) == 2


def test_theme_cache_error_returns_none():
    from rooty.errors import TransportError
    backend = FakeBackend({"rpc_get_themes": TransportError("offline")})
    assert ThemeCache("Christmas Special").get_theme_id(backend) is None


def test_theme_caches_are_independent():
    backend = FakeBackend({"rpc_get_themes": THEMES})
    ThemeCache("Christmas Special").get_theme_id(backend)
    ThemeCache("Christmas Special").get_theme_id(backend)
    assert len(backend.calls) == 2
