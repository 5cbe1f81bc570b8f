# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
User account store.

Registration creates the user LOCKED and links it to the default scope in
the same transaction – either both rows exist afterwards or neither does.
Passwords arrive already hashed; this module never sees plaintext.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.errors import TransactionFailure, UniqueConstraintViolation
from core.logger import get_logger
from database import insert_ignore
from models.enums import UserLock
from models.scope import Scope, UserScope
from models.user import User
from user.schemas import RegisterRequest


class UserDao:
    def __init__(self, db: Session, log: Optional[logging.Logger] = None):
        self.db = db
        self.logger = log or get_logger(UserDao.__name__)

    def find_user_by_name(self, username: str) -> Optional[User]:
        """Return the user with its scopes loaded, or None."""
        self.logger.info("[find_user_by_name] username=%s", username)
        return (
            self.db.query(User)
            .options(selectinload(User.scopes).selectinload(UserScope.scope))
            .filter(User.username == username)
            .first()
        )

    def user_register(self, params: RegisterRequest) -> dict:
        """
        Create a LOCKED user and link the default scope to it.

        Raises ``UniqueConstraintViolation`` if the username is taken and
        ``TransactionFailure`` if the combined write could not commit.
        """
        self.logger.info("[user_register] username=%s", params.username)
        scope_name = settings.default_user_scope
        user = User(
            username=params.username,
            password=params.password,
            email=params.email,
            is_locked=UserLock.LOCKED,
        )
        try:
            self.db.add(user)
            self.db.flush()  # get user.id before linking the scope
            user_id = user.id

            # Scopes are shared rows: create "web" once, reuse afterwards
            self.db.execute(insert_ignore(self.db, Scope, [{"name": scope_name}]))
            scope_id = self.db.query(Scope.id).filter(Scope.name == scope_name).scalar()
            self.db.execute(
                insert_ignore(self.db, UserScope, [{"user_id": user_id, "scope_id": scope_id}])
            )
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            # Only a committed row with this name makes it a username conflict
            taken = self.db.query(User.id).filter(User.username == params.username).first()
            if taken is None:
                self.logger.error("[user_register] rolled back: %s", exc)
                raise TransactionFailure("User registration failed and was rolled back") from exc
            self.logger.warning("[user_register] duplicate username=%s", params.username)
            raise UniqueConstraintViolation("User", "username", params.username) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.logger.error("[user_register] rolled back: %s", exc)
            raise TransactionFailure("User registration failed and was rolled back") from exc

        self.logger.info("[user_register] created id=%s", user_id)
        return {"id": user_id}
