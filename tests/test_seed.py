# tests/test_seed.py
from unittest.mock import patch

import pytest

from rooty.errors import ConfigError
from rooty.seed import load_seed_roots, seed_roots


def test_bundled_roots_are_complete():
    roots = load_seed_roots()
    assert len(roots) >= 10
    for r in roots:
        assert r["root_text"]
        assert r["meaning"]
        assert isinstance(r["examples"], list)


def test_seed_requires_service_key(settings):
    with pytest.raises(ConfigError):
        seed_roots(settings)


def test_seed_inserts_when_empty(settings):
    settings.supabase_service_key = "service"
    with patch("rooty.seed.BackendClient") as client_cls:
        client = client_cls.return_value
        client.select.return_value = []
        count = seed_roots(settings)
    client_cls.assert_called_once_with(settings.supabase_url, "service", timeout=settings.http_timeout)
    table, rows = client.insert.call_args.args
    assert table == "roots"
    assert count == len(rows)


def test_seed_skips_when_already_seeded(settings):
    settings.supabase_service_key = "service"
    with patch("rooty.seed.BackendClient") as client_cls:
        client_cls.return_value.select.return_value = [{"id": 1}]
        assert seed_roots(settings) == 0
        client_cls.return_value.insert.assert_not_called()
