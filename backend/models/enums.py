# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Two-state flags shared by the ORM models and the request schemas."""

import enum


class DeviceLineStatus(str, enum.Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class DeviceLock(str, enum.Enum):
    """A LOCKED device may not authenticate."""

    LOCKED = "LOCKED"
    UNLOCKED = "UNLOCKED"


class UserLock(str, enum.Enum):
    """Accounts start LOCKED until verified outside this service."""

    LOCKED = "LOCKED"
    UNLOCKED = "UNLOCKED"
