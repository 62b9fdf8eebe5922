# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Central security module.  All cryptographic primitives and the session gate
live here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. JWT creation / decoding                  (PyJWT / HS256)
3. Session gate                             (authenticate_token, get_current_user)

Session gate
------------
A signature check alone is not enough: a token stays cryptographically valid
until ``exp`` even after logout or after a newer login.  The gate therefore
runs in two stages:

    NoToken ──extract──▶ TokenPresent ──verify──▶ IdentityResolved
            ──reload user──▶ TokenCrossChecked ──compare──▶ Accepted

and rejects at each step with a distinct ``AuthorizationError`` kind.  The
persisted ``users.access_token`` column is consulted on every request and is
never cached in process, so revocation takes effect immediately.
"""

import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import AuthorizationError, ErrorKind
from core.logger import logger
from database import get_db

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------
# Pure Python, so it loads on old glibc hosts where bcrypt wheels do not.
# The iteration count comes from settings (600 000 by default).
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with PBKDF2-SHA256.

    Returns the full passlib hash string, e.g. "$pbkdf2-sha256$600000$...".
    The salt is embedded inside it.
    """
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.
    """
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        # malformed hash in the row; treat as a non-match
        logger.warning("Stored password hash is not a valid pbkdf2_sha256 string")
        return False


# ---------------------------------------------------------------------------
# 2.  JWT – access tokens
# ---------------------------------------------------------------------------


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a JWT with the configured algorithm (HS256).

    *data* should contain at minimum: sub (user id) and email.
    ``exp`` and ``iat`` are added automatically, plus a random ``jti`` so two
    logins inside the same second still produce different tokens.
    """
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode["iat"] = now
    to_encode["exp"] = now + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode["jti"] = secrets.token_hex(16)
    return _jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT.  Raises ``AuthorizationError(INVALID_TOKEN)`` on
    any failure (expired, bad signature, malformed, no subject).
    """
    try:
        return _jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except _jwt.InvalidTokenError as exc:
        # ExpiredSignatureError is a subclass
        raise AuthorizationError(ErrorKind.INVALID_TOKEN, "Invalid or expired token") from exc


# ---------------------------------------------------------------------------
# 3.  Session gate
# ---------------------------------------------------------------------------

# The tokenUrl here is only used by the auto-generated OpenAPI docs.
# auto_error is off so a missing header surfaces as our own MISSING_TOKEN.
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.api_prefix}/auth/login",
    auto_error=False,
)


def _reject(kind: ErrorKind, message: str, user_id: Optional[str] = None) -> AuthorizationError:
    logger.warning("Session rejected: %s (user_id=%s)", kind.value, user_id or "-")
    return AuthorizationError(kind, message)


def authenticate_token(db: Session, token: str):
    """
    Run the gate on an already-extracted bearer token and return the fresh
    User row it belongs to.

    The returned row is re-read from the database, not rebuilt from claims,
    so role changes made since the token was issued are visible to callers.
    """
    try:
        payload = decode_access_token(token)
    except AuthorizationError as exc:
        raise _reject(exc.kind, exc.message) from exc

    # Lazy import: users.service imports hash_password from this module
    from users.service import find_by_id  # noqa: E402

    user_id = payload["sub"]
    user = find_by_id(db, user_id)
    if user is None:
        raise _reject(ErrorKind.UNKNOWN_USER, "User not found", user_id)

    if not user.access_token:
        raise _reject(ErrorKind.SESSION_REVOKED, "User has been logged out", user_id)

    if not hmac.compare_digest(user.access_token.encode("utf-8"), token.encode("utf-8")):
        raise _reject(ErrorKind.STALE_TOKEN, "Token has been superseded by a newer login", user_id)

    return user


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    """
    Dependency: extract the bearer token, then run :func:`authenticate_token`.
    Returns the User ORM instance.
    """
    if not token:
        raise _reject(ErrorKind.MISSING_TOKEN, "No token provided")
    return authenticate_token(db, token)


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Client address for the request log.

    X-Forwarded-For is client-controlled, so it is read only when
    ``settings.trust_forwarded_for`` says a proxy in front of us rewrites it.
    """
    forwarded = request.headers.get("X-Forwarded-For") if settings.trust_forwarded_for else None
    if forwarded:
        # leftmost entry is the client the proxy saw
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
