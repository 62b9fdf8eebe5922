# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Domain error taxonomy and its mapping to HTTP responses.

Services, guards and the authorization policy raise the exceptions below and
never touch ``HTTPException``.  ``register_exception_handlers`` is the single
place where an error kind becomes a status code.

Unauthenticated kinds
---------------------
MISSING_TOKEN, INVALID_TOKEN, UNKNOWN_USER, SESSION_REVOKED and STALE_TOKEN
are kept apart for logs and tests only.  Over HTTP they all render as the
same 401 so a client cannot tell a revoked session from a forged token.
"""

import enum

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from core.logger import logger


class ErrorKind(str, enum.Enum):
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    MISSING_TOKEN = "MISSING_TOKEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    UNKNOWN_USER = "UNKNOWN_USER"
    SESSION_REVOKED = "SESSION_REVOKED"
    STALE_TOKEN = "STALE_TOKEN"

    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"


UNAUTHENTICATED_KINDS = frozenset({
    ErrorKind.MISSING_TOKEN,
    ErrorKind.INVALID_TOKEN,
    ErrorKind.UNKNOWN_USER,
    ErrorKind.SESSION_REVOKED,
    ErrorKind.STALE_TOKEN,
})


class AppError(Exception):
    """Base class: every domain error carries a kind and a readable message."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value}: {self.message})"


class AuthenticationError(AppError):
    """Login failed.  Unknown email and wrong password look the same."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(ErrorKind.INVALID_CREDENTIALS, message)


class AuthorizationError(AppError):
    """Token gate rejection (unauthenticated kinds) or policy denial (FORBIDDEN)."""

    @property
    def reason(self) -> str:
        return self.message


class NotFoundError(AppError):
    def __init__(self, message: str):
        super().__init__(ErrorKind.NOT_FOUND, message)


class ConflictError(AppError):
    def __init__(self, message: str = "Email already exists"):
        super().__init__(ErrorKind.DUPLICATE_EMAIL, message)


# ---------------------------------------------------------------------------
# HTTP mapping
# ---------------------------------------------------------------------------

_NOT_AUTHENTICATED = "Not authenticated"

_STATUS_BY_KIND = {
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    **{kind: status.HTTP_401_UNAUTHORIZED for kind in UNAUTHENTICATED_KINDS},
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.DUPLICATE_EMAIL: status.HTTP_409_CONFLICT,
}


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code = _STATUS_BY_KIND[exc.kind]
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    detail = _NOT_AUTHENTICATED if exc.kind in UNAUTHENTICATED_KINDS else exc.message
    logger.info(
        "%s %s -> %d (%s)",
        request.method,
        request.url.path,
        status_code,
        exc.kind.value,
    )
    return JSONResponse(status_code=status_code, content={"detail": detail}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the AppError → JSON response mapping on *app*."""
    app.add_exception_handler(AppError, _app_error_handler)
