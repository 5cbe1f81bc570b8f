# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the device endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from core.pagination import PageQuery
from models.enums import DeviceLineStatus, DeviceLock


# -- Requests --------------------------------------------------------------
# device_secret is never accepted from the client; it is derived server-side.


class DeviceCreate(BaseModel):
    device_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    os: Optional[str] = None
    type: Optional[str] = None
    engine: Optional[str] = None
    grants: List[str] = []
    user_id: Optional[int] = None  # link the device to this user on creation


class DeviceUpdate(BaseModel):
    # Only the fields actually sent are written; device_id and device_secret
    # are deliberately absent.
    id: int
    is_online: Optional[DeviceLineStatus] = None
    os: Optional[str] = None
    engine: Optional[str] = None
    is_locked: Optional[DeviceLock] = None
    access_token_validate_seconds: Optional[int] = None
    refresh_token_validate_seconds: Optional[int] = None


class DeviceQuery(PageQuery):
    name: Optional[str] = None  # substring match
    device_id: Optional[str] = None
    os: Optional[str] = None
    type: Optional[str] = None
    engine: Optional[str] = None
    is_online: Optional[DeviceLineStatus] = None
    is_locked: Optional[DeviceLock] = None


class BatchDeleteRequest(BaseModel):
    ids: List[int]


# -- Responses -------------------------------------------------------------
# Only DeviceSecret carries the secret, and only once – at registration.


class DeviceSecret(BaseModel):
    id: int
    device_secret: str

    model_config = {"from_attributes": True}


class DeviceRow(BaseModel):
    id: int
    device_id: str
    name: str
    os: Optional[str] = None
    type: Optional[str] = None
    engine: Optional[str] = None
    is_online: DeviceLineStatus
    is_locked: DeviceLock
    access_token_validate_seconds: int
    refresh_token_validate_seconds: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DeviceDetail(DeviceRow):
    grants: List[str] = []
