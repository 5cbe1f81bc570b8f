# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Grant and GrantOnDevice ORM models."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class Grant(Base):
    """A named permission.  Inserted idempotently, never updated."""

    __tablename__ = "grants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class GrantOnDevice(Base):
    __tablename__ = "grant_on_device"
    __table_args__ = (
        UniqueConstraint("device_id", "grant_id", name="uq_grant_on_device_device_grant"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Rows are removed explicitly by DeviceDao.batch_delete_device, in the
    # same transaction as the device itself.
    device_id = Column(Integer, ForeignKey("devices.id"), nullable=False, index=True)
    grant_id = Column(Integer, ForeignKey("grants.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    device = relationship("Device", back_populates="grants")
    grant = relationship("Grant")
