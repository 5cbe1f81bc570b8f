# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Device and UserOnDevice ORM models."""

from sqlalchemy import Column, Integer, String, Enum, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base
from models.enums import DeviceLineStatus, DeviceLock


class Device(Base):
    __tablename__ = "devices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Caller-supplied, stable external identifier (not the primary key)
    device_id = Column(String(128), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    os = Column(String(64), nullable=True)
    type = Column(String(64), nullable=True)
    engine = Column(String(64), nullable=True)
    is_online = Column(
        Enum(DeviceLineStatus, name="device_line_status"),
        nullable=False,
        default=DeviceLineStatus.ONLINE,
    )
    is_locked = Column(
        Enum(DeviceLock, name="device_lock"),
        nullable=False,
        default=DeviceLock.UNLOCKED,
    )
    # Derived once from device_id at creation; never recomputed, never listed.
    device_secret = Column(String(255), nullable=False)
    access_token_validate_seconds = Column(Integer, nullable=False)
    refresh_token_validate_seconds = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    grants = relationship("GrantOnDevice", back_populates="device")
    users = relationship("UserOnDevice", back_populates="device")


class UserOnDevice(Base):
    __tablename__ = "user_on_device"
    __table_args__ = (
        UniqueConstraint("user_id", "device_id", name="uq_user_on_device_user_device"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    device_id = Column(Integer, ForeignKey("devices.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    # Touched by DeviceDao.upsert_device on every repeated link
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    user = relationship("User", back_populates="devices")
    device = relationship("Device", back_populates="users")
