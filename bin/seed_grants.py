# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – fills the grant catalog.

Run after the initial migration (and again whenever DEFAULT_GRANTS grows):
    python bin/seed_grants.py [extra-grant ...]

Names already in the catalog are skipped, so the script is safe to re-run.
"""

import os
import sys

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable from a plain checkout
# ---------------------------------------------------------------------------
# bin/seed_grants.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from core.config import settings    # noqa: E402
from database import SessionLocal   # noqa: E402
from device.dao import DeviceDao    # noqa: E402


def seed(extra=()):
    names = list(dict.fromkeys([*settings.default_grants, *extra]))
    if not names:
        print("[seed_grants] DEFAULT_GRANTS is empty and no names given – nothing to do.")
        return []

    db = SessionLocal()
    try:
        dao = DeviceDao(db)
        dao.save_grant(*names)
        found = dao.find_grants_by_name(*names)
        print(f"[seed_grants] {len(found)} of {len(names)} grants present: {', '.join(names)}")
        return found
    finally:
        db.close()


if __name__ == "__main__":
    seed(sys.argv[1:])
