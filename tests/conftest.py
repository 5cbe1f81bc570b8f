"""
tests/conftest.py -- Shared fixtures for the device/grant store tests.

This module provides:
  - engine: a fresh in-memory SQLite database per test, schema created from
    the ORM metadata
  - db: a Session bound to that engine
  - make_user / make_device: helpers that insert rows through the DAOs
  - client: FastAPI TestClient with get_db overridden to use the test engine

Design: StaticPool keeps a single connection, so the in-memory database
survives across sessions and across the TestClient's worker threads.

DATABASE_URL must be set before any backend import because core.config
builds the Settings singleton (and database.py the engine) at import time.
"""

from __future__ import annotations

import os

# CRITICAL: Settings() requires DATABASE_URL at import time.
os.environ.setdefault("DATABASE_URL", "sqlite://")
# Fewer PBKDF2 rounds keep device registration fast under test.
os.environ.setdefault("DEVICE_SECRET_ROUNDS", "1000")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  (registers every table on Base.metadata)
from database import Base, get_db
from device.dao import DeviceDao
from device.schemas import DeviceCreate
from main import app
from user.dao import UserDao
from user.schemas import RegisterRequest

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def device_dao(db):
    return DeviceDao(db)


@pytest.fixture
def user_dao(db):
    return UserDao(db)


# ---------------------------------------------------------------------------
# Row helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def make_user(user_dao):
    def _make(username="alice", password="hashed-pw", email="a@x.com"):
        return user_dao.user_register(
            RegisterRequest(username=username, password=password, email=email)
        )["id"]

    return _make


@pytest.fixture
def make_device(device_dao):
    def _make(device_id="dev-001", name="Living room TV", **kwargs):
        kwargs.setdefault("os", "android")
        kwargs.setdefault("type", "tv")
        kwargs.setdefault("engine", "webview")
        return device_dao.save_device(DeviceCreate(device_id=device_id, name=name, **kwargs))

    return _make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
