"""Unit tests for core/keys.py -- cache key naming."""

import pytest

from core.keys import KEY_FORMAT, cache_key, client_key, token_key, user_key


def test_templates():
    assert client_key("abc") == "clients:abc"
    assert token_key("t-1") == "tokens:t-1"
    assert user_key(42) == "users:42"


def test_cache_key_matches_helpers():
    for category in KEY_FORMAT:
        assert cache_key(category, "x").endswith(":x")


def test_unknown_category_rejected():
    with pytest.raises(ValueError):
        cache_key("session", "x")


@pytest.mark.parametrize("identifier", ["", None])
def test_empty_identifier_rejected(identifier):
    with pytest.raises(ValueError):
        user_key(identifier)
