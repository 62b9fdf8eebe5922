# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
User endpoints – role-scoped CRUD over the ``users`` table.

Every endpoint runs behind ``get_current_user`` (valid, current session),
then asks ``auth.policy`` before touching the directory.  Checks that only
need the caller run first; checks that depend on the target's role run on
the row loaded right before the mutation, never on client data.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from auth import policy
from core.config import settings
from core.security import get_current_user
from database import get_db
from models.user import User, UserRole
from users import service as users
from users.schemas import (
    CreateUserRequest,
    PaginatedUsersResponse,
    UpdateUserRequest,
    UserResponse,
)

router = APIRouter(prefix="/users", tags=["users"])


# ---------------------------------------------------------------------------
# POST /users  – create a new user (admin)
# ---------------------------------------------------------------------------


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: CreateUserRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a user account.  Role defaults to USER."""
    policy.authorize_create(current_user)
    return users.create_user(db, body.model_dump())


# ---------------------------------------------------------------------------
# GET /users  – paginated, filterable listing (admin)
# ---------------------------------------------------------------------------


@router.get("", response_model=PaginatedUsersResponse)
def list_users(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    name: Optional[str] = Query(None, description="Substring of the user's name"),
    email: Optional[str] = Query(None, description="Substring of the user's email"),
    role: Optional[UserRole] = Query(None, description="Exact role"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Return one page of users, newest first (no password data – handled by the schema)."""
    policy.authorize_list(current_user)
    result = users.find_paginated(
        db, users.UserFilters(name=name, email=email, role=role), page, limit
    )
    return PaginatedUsersResponse.model_validate(result)


# ---------------------------------------------------------------------------
# GET /users/{id}  – self or admin
# ---------------------------------------------------------------------------


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    policy.authorize_read(current_user, user_id)
    return users.get_user(db, user_id)


# ---------------------------------------------------------------------------
# PATCH /users/{id}  – self or admin, with role-change guards
# ---------------------------------------------------------------------------


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    body: UpdateUserRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Partial update.  Guards:
    * Non-admins may only update themselves.
    * Non-admins may not send a role at all, not even their current one.
    * Nobody may demote an admin to USER.
    """
    changes = body.model_dump(exclude_unset=True, exclude_none=True)

    policy.authorize_update(current_user, user_id, changes)
    target = users.get_user(db, user_id)
    policy.authorize_role_change(current_user, target, changes)

    return users.update_user(db, user_id, changes)


# ---------------------------------------------------------------------------
# DELETE /users/{id}  – admin, not self, not another admin
# ---------------------------------------------------------------------------


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    policy.authorize_delete(current_user, user_id)
    target = users.get_user(db, user_id)
    policy.authorize_delete_target(current_user, target)

    users.remove_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
