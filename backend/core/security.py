# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Central security module.  All cryptographic primitives live here.  No other
module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing                         (passlib pbkdf2_sha256)
2. Device secret derivation                 (passlib PBKDF2-HMAC-SHA512)
"""

from passlib.crypto.digest import pbkdf2_hmac
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps

from core.config import settings

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------
# The user store receives the password already hashed; the router calls
# hash_password() before handing the registration payload over.
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with PBKDF2-SHA256 (600 000 rounds).

    Returns the full passlib hash string  e.g. "$pbkdf2-sha256$...".  The
    salt is embedded inside the hash string (passlib convention).
    """
    return _pbkdf2.using(rounds=600_000).hash(plain)


# ---------------------------------------------------------------------------
# 2.  PBKDF2-HMAC-SHA512 – device secrets
# ---------------------------------------------------------------------------
# Unlike passwords the salt is application-wide: the same device id always
# yields the same secret for a given configuration.  Output is hex, so its
# length is 2 * DEVICE_SECRET_LENGTH characters.
# ---------------------------------------------------------------------------


def derive_device_secret(device_id: str) -> str:
    """Derive the per-device secret from *device_id*."""
    if not device_id:
        raise ValueError("device_id must not be empty")
    raw = pbkdf2_hmac(
        "sha512",
        device_id.encode("utf-8"),
        settings.device_secret_salt.encode("utf-8"),
        settings.device_secret_rounds,
        settings.device_secret_length,
    )
    return raw.hex()
