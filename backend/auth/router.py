# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – login, logout, current-user info.

Security notes
--------------
* Login returns the *same* error whether the email doesn't exist or the
  password is wrong.  This prevents user-enumeration attacks.
* A successful login replaces the caller's previous token; logout clears it.
  Both take effect on the very next request, before the JWT expires.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from auth import service as auth_service
from auth.schemas import LoginRequest, LoginResponse
from core.security import get_current_user
from database import get_db
from models.user import User
from users.schemas import UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate and return a signed JWT plus the user's public profile."""
    token, user = auth_service.login(db, body.email, body.password)
    return LoginResponse(access_token=token, user=UserResponse.model_validate(user))


# ---------------------------------------------------------------------------
# POST /auth/logout
# ---------------------------------------------------------------------------


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Revoke the caller's active token."""
    auth_service.logout(db, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# GET /auth/me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's public profile (no secrets)."""
    return current_user
