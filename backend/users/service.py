# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
User directory – the only code that reads or writes ``users`` rows.

Every function takes the request's SQLAlchemy session first and commits its
own write.  Authorization is *not* checked here; callers run the policy in
``auth.policy`` before reaching a mutating function.

Invariants kept by this module
------------------------------
* Email is unique.  Checked before the write; the unique index backs it up
  when two requests race.
* Passwords are hashed before they reach the row, on create and on update.
* ``access_token`` is written only by :func:`set_access_token`.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import ConflictError, NotFoundError
from core.logger import logger
from core.security import hash_password
from models.user import User, UserRole

# Fields a profile update may touch.  access_token is deliberately absent.
_UPDATABLE_FIELDS = frozenset({"name", "email", "password", "role"})


@dataclass
class UserFilters:
    name: Optional[str] = None    # substring
    email: Optional[str] = None   # substring
    role: Optional[UserRole] = None  # exact


@dataclass
class UserPage:
    data: List[User] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0
    has_next_page: bool = False
    has_previous_page: bool = False


def page_meta(total: int, page: int, limit: int) -> dict:
    """Page arithmetic shared by every paginated listing."""
    total_pages = math.ceil(total / limit)
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_previous_page": page > 1,
    }


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def find_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_user(db: Session, user_id: str) -> User:
    """Like :func:`find_by_id` but raises ``NotFoundError`` when absent."""
    user = find_by_id(db, user_id)
    if user is None:
        raise NotFoundError(f'User with ID "{user_id}" not found')
    return user


def find_paginated(db: Session, filters: UserFilters, page: int, limit: int) -> UserPage:
    """
    Filtered listing, newest first.  *page* is 1-based.  Bounds on *page*
    and *limit* are the query validator's job; this function trusts them.
    """
    q = db.query(User)
    if filters.name:
        q = q.filter(User.name.contains(filters.name, autoescape=True))
    if filters.email:
        q = q.filter(User.email.contains(filters.email, autoescape=True))
    if filters.role:
        q = q.filter(User.role == filters.role)

    total = q.count()
    rows = (
        q.order_by(User.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return UserPage(data=rows, **page_meta(total, page, limit))


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def _commit(db: Session, email: str) -> None:
    """Commit, turning a unique-index race on email into a conflict."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Unique constraint hit for email %s", email)
        raise ConflictError() from exc


def create_user(db: Session, fields: dict) -> User:
    """
    Insert a user.  *fields* holds name, email, password (plaintext) and
    optionally role (defaults to USER).
    """
    email = fields["email"]
    if find_by_email(db, email) is not None:
        logger.warning("Create rejected: email %s already exists", email)
        raise ConflictError()

    user = User(
        name=fields["name"],
        email=email,
        password_hash=hash_password(fields["password"]),
        role=UserRole(fields.get("role") or UserRole.USER),
    )
    db.add(user)
    _commit(db, email)
    db.refresh(user)
    logger.info("User created: id=%s email=%s role=%s", user.id, user.email, user.role.value)
    return user


def update_user(db: Session, user_id: str, fields: dict) -> User:
    """
    Apply a partial update.  Only name, email, password and role are
    accepted; anything else is a programming error.
    """
    unknown = set(fields) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields not updatable: {', '.join(sorted(unknown))}")

    user = get_user(db, user_id)

    email = fields.get("email")
    if email is not None and email != user.email:
        other = find_by_email(db, email)
        if other is not None and other.id != user_id:
            logger.warning("Update rejected: email %s already exists", email)
            raise ConflictError()
        user.email = email

    if fields.get("name") is not None:
        user.name = fields["name"]
    if fields.get("password") is not None:
        user.password_hash = hash_password(fields["password"])
    if fields.get("role") is not None:
        user.role = UserRole(fields["role"])

    _commit(db, user.email)
    db.refresh(user)
    logger.info("User updated: id=%s fields=%s", user.id, ",".join(sorted(fields)))
    return user


def set_access_token(db: Session, user_id: str, token: Optional[str]) -> None:
    """
    Overwrite the user's single active token (``None`` clears it).  A plain
    UPDATE, so concurrent logins resolve as last-write-wins in the database.
    """
    db.query(User).filter(User.id == user_id).update(
        {User.access_token: token}, synchronize_session=False
    )
    db.commit()


def remove_user(db: Session, user_id: str) -> None:
    user = get_user(db, user_id)
    db.delete(user)
    db.commit()
    logger.info("User deleted: id=%s", user_id)
