import random
from types import SimpleNamespace

import pytest

from rooty.challenges import ChallengeTracker, ThemeCache
from rooty.config import Settings
from rooty.context import AppContext
from rooty.db import init_db
from rooty.models import User
from rooty.navigation import Navigator


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_rooty.db")
    return db_path


class FakeBackend:
    """Stands in for BackendClient: canned RPC responses, every call recorded."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.access_token = None

    def rpc(self, name, params=None):
        self.calls.append((name, params))
        response = self.responses.get(name)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params)
        return response

    def names(self):
        return [name for name, _ in self.calls]

    def select(self, table, **filters):
        return []

    def insert(self, table, rows, token=None):
        pass


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def settings(tmp_db):
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon-key",
        db_path=tmp_db,
        advance_delay=0,
        completion_delay=0,
        load_timeout=1.0,
    )


@pytest.fixture
def signed_in():
    return SimpleNamespace(user=User(id="user-123", email="test@example.com"), profile=None)


@pytest.fixture
def ctx(settings, fake_backend, signed_in):
    init_db(settings.db_path)
    return AppContext(
        settings=settings,
        client=fake_backend,
        auth=signed_in,
        challenges=ChallengeTracker(settings.db_path, total=settings.challenge_count),
        theme_cache=ThemeCache(settings.challenge_theme),
        navigator=Navigator(),
        rng=random.Random(7),
    )


def root_row(id, meaning, root_text=None, **extra):
    row = {
        "id": id,
        "root_text": root_text or f"root{id}",
        "origin_lang": "Latin",
        "meaning": meaning,
        "examples": ["example"],
        "source_title": "Etymonline",
        "source_url": "https://www.etymonline.com",
    }
    row.update(extra)
    return row


def word_row(id, english_word, correct, options):
    row = {
        "id": id,
        "english_word": english_word,
        "component_roots": "ad + venire",
        "correct_meaning": correct,
        "origin_lang": "Latin",
        "source_title": "Etymonline",
        "source_url": "https://www.etymonline.com",
    }
    for n, option in enumerate(options, 1):
        row[f"option_{n}"] = option
    return row


ADVENT = word_row(
    2, "Advent", "to come toward",
    ["to come toward", "to shine from within", "to cry out loudly", "to give thanks secretly"],
)
CHRISTMAS = word_row(
    1, "Christmas", "anointed one's mass",
    ["jesuss party", "santa's birth", "anointed one's mass", "Turk bath"],
)
