"""
Import every ORM model so that ``Base.metadata`` and the relationship
registry know about all tables as soon as any one of them is used.
"""

from models.user import User  # noqa: F401
from models.scope import Scope, UserScope  # noqa: F401
from models.grant import Grant, GrantOnDevice  # noqa: F401
from models.device import Device, UserOnDevice  # noqa: F401
