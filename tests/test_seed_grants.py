"""Tests for bin/seed_grants.py -- grant catalog bootstrap."""

import importlib.util
from pathlib import Path

import pytest

from models.grant import Grant

_SCRIPT = Path(__file__).resolve().parent.parent / "bin" / "seed_grants.py"


@pytest.fixture
def seed_module(session_factory, monkeypatch):
    spec = importlib.util.spec_from_file_location("seed_grants", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    monkeypatch.setattr(module, "SessionLocal", session_factory)
    return module


def test_seed_inserts_defaults_and_extras(seed_module, db, monkeypatch):
    monkeypatch.setattr(seed_module.settings, "default_grants", ["read", "write"])

    found = seed_module.seed(["admin"])

    assert len(found) == 3
    assert sorted(n for (n,) in db.query(Grant.name).all()) == ["admin", "read", "write"]


def test_seed_is_rerunnable(seed_module, db, monkeypatch):
    monkeypatch.setattr(seed_module.settings, "default_grants", ["read"])

    seed_module.seed()
    seed_module.seed(["read"])

    assert db.query(Grant).count() == 1


def test_seed_with_nothing_to_do(seed_module, monkeypatch):
    monkeypatch.setattr(seed_module.settings, "default_grants", [])
    assert seed_module.seed() == []
