"""Credential check, token issue/revoke, and the session gate."""

import pytest

from auth import service as auth_service
from conftest import USER_PASSWORD, make_user
from core.errors import AuthenticationError, AuthorizationError, ErrorKind
from core.security import authenticate_token, create_access_token, get_current_user
from models.user import User
from users import service as users


def _gate_kind(db, token):
    with pytest.raises(AuthorizationError) as exc:
        authenticate_token(db, token)
    return exc.value.kind


# -- validate_user -------------------------------------------------------------


def test_validate_user_returns_full_row(db):
    ann = make_user(db, "ann@example.com")
    found = auth_service.validate_user(db, "ann@example.com", USER_PASSWORD)
    assert found.id == ann.id
    assert found.password_hash


def test_unknown_email_and_wrong_password_look_the_same(db):
    make_user(db, "ann@example.com")

    with pytest.raises(AuthenticationError) as unknown:
        auth_service.validate_user(db, "nobody@example.com", USER_PASSWORD)
    with pytest.raises(AuthenticationError) as wrong:
        auth_service.validate_user(db, "ann@example.com", "not-the-password")

    assert unknown.value.kind is wrong.value.kind is ErrorKind.INVALID_CREDENTIALS
    assert unknown.value.message == wrong.value.message == "Invalid credentials"


# -- login / logout ------------------------------------------------------------


def test_login_persists_token_and_returns_fresh_row(db):
    make_user(db, "ann@example.com")
    token, user = auth_service.login(db, "ann@example.com", USER_PASSWORD)
    assert token
    assert user.access_token == token
    assert authenticate_token(db, token).id == user.id


def test_login_failure_writes_nothing(db):
    ann = make_user(db, "ann@example.com")
    with pytest.raises(AuthenticationError):
        auth_service.login(db, "ann@example.com", "wrong-password")
    db.expire_all()
    assert users.get_user(db, ann.id).access_token is None


def test_only_most_recent_login_validates(db):
    make_user(db, "ann@example.com")
    tokens = [auth_service.login(db, "ann@example.com", USER_PASSWORD)[0] for _ in range(3)]

    assert len(set(tokens)) == 3
    for old in tokens[:-1]:
        assert _gate_kind(db, old) is ErrorKind.STALE_TOKEN
    assert authenticate_token(db, tokens[-1]).email == "ann@example.com"


def test_logout_revokes_token(db):
    ann = make_user(db, "ann@example.com")
    token, _ = auth_service.login(db, "ann@example.com", USER_PASSWORD)

    auth_service.logout(db, ann.id)

    assert _gate_kind(db, token) is ErrorKind.SESSION_REVOKED


def test_logout_is_idempotent(db):
    ann = make_user(db, "ann@example.com")
    auth_service.logout(db, ann.id)
    auth_service.logout(db, ann.id)
    assert users.get_user(db, ann.id).access_token is None


def test_login_again_after_logout_works(db):
    ann = make_user(db, "ann@example.com")
    auth_service.login(db, "ann@example.com", USER_PASSWORD)
    auth_service.logout(db, ann.id)
    token, _ = auth_service.login(db, "ann@example.com", USER_PASSWORD)
    assert authenticate_token(db, token).id == ann.id


# -- gate ----------------------------------------------------------------------


def test_gate_without_token_is_missing_token(db):
    with pytest.raises(AuthorizationError) as exc:
        get_current_user(token=None, db=db)
    assert exc.value.kind is ErrorKind.MISSING_TOKEN


def test_gate_rejects_garbage(db):
    assert _gate_kind(db, "garbage") is ErrorKind.INVALID_TOKEN


def test_gate_rejects_signed_token_for_deleted_user(db):
    ann = make_user(db, "ann@example.com")
    token, _ = auth_service.login(db, "ann@example.com", USER_PASSWORD)
    users.remove_user(db, ann.id)
    assert _gate_kind(db, token) is ErrorKind.UNKNOWN_USER


def test_gate_rejects_valid_signature_never_issued_by_login(db):
    ann = make_user(db, "ann@example.com")
    minted = create_access_token({"sub": ann.id, "email": ann.email})
    # never persisted: the user has no active session
    assert _gate_kind(db, minted) is ErrorKind.SESSION_REVOKED

    auth_service.login(db, "ann@example.com", USER_PASSWORD)
    assert _gate_kind(db, minted) is ErrorKind.STALE_TOKEN


def test_gate_returns_current_role_not_claims(db):
    ann = make_user(db, "ann@example.com")
    token, _ = auth_service.login(db, "ann@example.com", USER_PASSWORD)
    users.update_user(db, ann.id, {"role": "ADMIN"})
    assert authenticate_token(db, token).role.value == "ADMIN"


def test_token_for_longest_valid_email_is_stored_whole(db):
    # 64-char local part + 189-char domain = 254, the EmailStr maximum
    domain = "a" * 63 + "." + "b" * 63 + "." + "c" * 57 + ".com"
    email = "l" * 64 + "@" + domain
    assert len(email) == 254
    make_user(db, email)

    token, user = auth_service.login(db, email, USER_PASSWORD)

    assert len(token) > 512
    assert User.__table__.c.access_token.type.length is None
    db.expire_all()
    assert users.get_user(db, user.id).access_token == token
    assert authenticate_token(db, token).id == user.id
