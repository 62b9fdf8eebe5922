# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Authorization policy – who may do what to which user record.

Every role decision in the API is made here and nowhere else.  The functions
are pure: they take the caller (the fresh row from the session gate), the
target (an id, or the row loaded immediately before the call) and the
proposed changes, and either return ``None`` or raise
``AuthorizationError(FORBIDDEN)`` with the reason.

    operation   rule
    ---------   ----------------------------------------------------------
    list        ADMIN
    create      ADMIN
    read        ADMIN, or self
    update      ADMIN, or self; only ADMIN may send a role;
                nobody may set role USER on a current ADMIN
    delete      ADMIN; never self; never an ADMIN target
"""

from typing import Mapping, Optional

from core.errors import AuthorizationError, ErrorKind
from core.logger import logger
from models.user import User, UserRole


def _deny(caller: User, reason: str) -> AuthorizationError:
    logger.warning("Forbidden for user_id=%s: %s", caller.id, reason)
    return AuthorizationError(ErrorKind.FORBIDDEN, reason)


def _is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


def _requested_role(changes: Mapping) -> Optional[UserRole]:
    role = changes.get("role")
    return UserRole(role) if role is not None else None


def authorize_list(caller: User) -> None:
    if not _is_admin(caller):
        raise _deny(caller, "Only admins can list users")


def authorize_create(caller: User) -> None:
    if not _is_admin(caller):
        raise _deny(caller, "Only admins can create users")


def authorize_read(caller: User, target_id: str) -> None:
    if not _is_admin(caller) and caller.id != target_id:
        raise _deny(caller, "Only admins can access other user details")


def authorize_update(caller: User, target_id: str, changes: Mapping) -> None:
    """
    Checks that need only the caller and the payload.  Run before the target
    is loaded; :func:`authorize_role_change` runs after.
    """
    if not _is_admin(caller) and caller.id != target_id:
        raise _deny(caller, "Only admins can update other user details")

    if not _is_admin(caller) and _requested_role(changes) is not None:
        raise _deny(caller, "Only admins can update user roles")


def authorize_role_change(caller: User, target: User, changes: Mapping) -> None:
    """
    Demotion guard, evaluated on the target row as currently persisted.
    There is no override: not even another admin may demote an admin.
    """
    if target.role == UserRole.ADMIN and _requested_role(changes) == UserRole.USER:
        raise _deny(caller, "Cannot demote an admin user to regular user")


def authorize_delete(caller: User, target_id: str) -> None:
    """Run before the target is loaded; :func:`authorize_delete_target` runs after."""
    if not _is_admin(caller):
        raise _deny(caller, "Only admins can delete users")
    if target_id == caller.id:
        raise _deny(caller, "Cannot delete your own account")


def authorize_delete_target(caller: User, target: User) -> None:
    if target.role == UserRole.ADMIN:
        raise _deny(caller, "Cannot delete an admin user")
