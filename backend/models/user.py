# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""User ORM model."""

from sqlalchemy import Column, Integer, String, Enum, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base
from models.enums import UserLock


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    # Already hashed by the caller (core.security.hash_password)
    password = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    is_locked = Column(
        Enum(UserLock, name="user_lock"),
        nullable=False,
        default=UserLock.LOCKED,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    scopes = relationship("UserScope", back_populates="user")
    devices = relationship("UserOnDevice", back_populates="user")
