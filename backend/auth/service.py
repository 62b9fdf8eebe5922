# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Credential check, token issue and token revocation.

Each user holds at most one active token (``users.access_token``).  A login
overwrites it, which makes every earlier token stale at the session gate;
logout clears it, which makes every token for that user revoked.
"""

from typing import Tuple

from sqlalchemy.orm import Session

from core.errors import AuthenticationError
from core.logger import logger
from core.security import create_access_token, verify_password
from models.user import User
from users import service as users

# Generic message used for both "no such email" and "wrong password"
_LOGIN_FAIL = "Invalid credentials"


def validate_user(db: Session, email: str, password: str) -> User:
    """
    Return the full user row (hash and token included) for a matching
    email/password pair.  Internal only: never hand the result to a
    response model other than ``UserResponse``.
    """
    user = users.find_by_email(db, email)

    # Unified failure path – no information leaks about whether the email exists
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Login failed for email=%s", email)
        raise AuthenticationError(_LOGIN_FAIL)

    return user


def login(db: Session, email: str, password: str) -> Tuple[str, User]:
    """
    Issue a token and make it the user's only active one.

    The token write is committed before the user is re-read, so the returned
    row already carries the new token.
    """
    user = validate_user(db, email, password)

    token = create_access_token({"sub": user.id, "email": user.email})
    users.set_access_token(db, user.id, token)

    fresh = users.get_user(db, user.id)
    logger.info("User logged in: id=%s", fresh.id)
    return token, fresh


def logout(db: Session, user_id: str) -> None:
    """Clear the active token.  Calling it with no active token is fine."""
    users.set_access_token(db, user_id, None)
    logger.info("User logged out: id=%s", user_id)
