# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Store-level exceptions.

Lookups never raise for absence – they return ``None`` or an empty list.
Only mutations raise, and only the kinds below, so the routers can map each
one onto a single HTTP status:

    UniqueConstraintViolation  → 409
    InvalidArgument            → 400
    TransactionFailure         → 500
"""


class StoreError(Exception):
    """Base class for every error raised by the data-access layer."""


class UniqueConstraintViolation(StoreError):
    """A create collided with an existing ``device_id`` or ``username``."""

    def __init__(self, entity: str, field: str, value):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} with {field}={value!r} already exists")


class InvalidArgument(StoreError):
    """Malformed paging or filter parameters."""


class TransactionFailure(StoreError):
    """A multi-statement write could not commit and was rolled back."""
