# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the user endpoints."""

from datetime import datetime
from typing import List

from pydantic import BaseModel

from models.enums import UserLock


# -- Requests --------------------------------------------------------------


class RegisterRequest(BaseModel):
    username: str
    password: str  # plaintext from the client, hashed by the router
    email: str


# -- Responses -------------------------------------------------------------


class RegisterResponse(BaseModel):
    id: int


class UserInfoResponse(BaseModel):
    id: int
    username: str
    email: str
    is_locked: UserLock
    scopes: List[str] = []
    created_at: datetime
