# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first admin user.

Run once after the initial migration:
    python bin/seed_admin.py

Reads FIRST_ADMIN_NAME, FIRST_ADMIN_EMAIL and FIRST_ADMIN_PASSWORD from
etc/app.conf (or the environment).  The row goes through the user directory,
so the password is hashed and email uniqueness is checked the same way as for
POST /users.  Further accounts are created by this admin through the API.
"""

import os
import sys

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/seed_admin.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from core.config import settings         # noqa: E402
from database import SessionLocal        # noqa: E402
from models.user import UserRole         # noqa: E402
from users import service as users       # noqa: E402


def seed(db=None) -> bool:
    """
    Create the configured admin.  Returns True if a row was inserted, False
    when the settings are empty or the email already exists.
    """
    if not settings.first_admin_email or not settings.first_admin_password:
        print("[seed_admin] FIRST_ADMIN_EMAIL or FIRST_ADMIN_PASSWORD not set in etc/app.conf – nothing to do.")
        return False

    own_session = db is None
    if own_session:
        db = SessionLocal()
    try:
        if users.find_by_email(db, settings.first_admin_email) is not None:
            print(f"[seed_admin] Admin '{settings.first_admin_email}' already exists – skipping.")
            return False

        users.create_user(db, {
            "name": settings.first_admin_name,
            "email": settings.first_admin_email,
            "password": settings.first_admin_password,
            "role": UserRole.ADMIN,
        })
        print(f"[seed_admin] Admin '{settings.first_admin_email}' created successfully.")
        return True
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    seed()
