"""Unit tests for user/dao.py -- the user account store."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from core.errors import TransactionFailure, UniqueConstraintViolation
from models.enums import UserLock
from models.scope import Scope, UserScope
from models.user import User
from user.schemas import RegisterRequest


def _register(dao, username="alice"):
    return dao.user_register(RegisterRequest(username=username, password="p", email="a@x.com"))


def test_register_creates_locked_user_with_web_scope(user_dao):
    result = _register(user_dao)

    user = user_dao.find_user_by_name("alice")
    assert user.id == result["id"]
    assert user.is_locked == UserLock.LOCKED
    assert [link.scope.name for link in user.scopes] == ["web"]


def test_register_duplicate_username(db, user_dao):
    _register(user_dao)
    with pytest.raises(UniqueConstraintViolation) as exc_info:
        _register(user_dao)

    assert exc_info.value.field == "username"
    assert db.query(User).count() == 1
    assert db.query(UserScope).count() == 1


def test_default_scope_row_is_shared(db, user_dao):
    _register(user_dao, "alice")
    _register(user_dao, "bob")

    assert db.query(Scope).count() == 1
    assert db.query(UserScope).count() == 2


def test_find_user_by_name_miss(user_dao):
    assert user_dao.find_user_by_name("nobody") is None


def test_register_rolls_back_on_commit_failure(db, user_dao, monkeypatch):
    def _fail():
        raise OperationalError("COMMIT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "commit", _fail)
    with pytest.raises(TransactionFailure):
        _register(user_dao)

    assert db.query(User).count() == 0
    assert db.query(UserScope).count() == 0


def test_register_integrity_error_other_than_username(db, user_dao, monkeypatch):
    def _fail():
        raise IntegrityError("COMMIT", {}, Exception("FOREIGN KEY constraint failed"))

    monkeypatch.setattr(db, "commit", _fail)
    with pytest.raises(TransactionFailure):
        _register(user_dao)

    assert db.query(User).count() == 0
    assert db.query(UserScope).count() == 0
