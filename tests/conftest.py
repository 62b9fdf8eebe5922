"""
Shared fixtures.

The app runs against one in-memory SQLite database (StaticPool keeps a single
connection so every session sees the same data).  The schema is recreated
for each test.  Environment variables are set before any application module
is imported because ``core.config.settings`` is built at import time.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
# pbkdf2 at 600k rounds would make every login take ~0.5s
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["API_PREFIX"] = "/api"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import models.user  # noqa: F401, E402
from database import Base, get_db  # noqa: E402
from main import app  # noqa: E402
from models.user import UserRole  # noqa: E402
from users import service as users  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_PASSWORD = "admin-pass-123"
USER_PASSWORD = "user-pass-123"


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def _override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, email, *, role=UserRole.USER, password=USER_PASSWORD, name=None):
    return users.create_user(db, {
        "name": name or email.split("@")[0].title(),
        "email": email,
        "password": password,
        "role": role,
    })


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role=UserRole.ADMIN, password=ADMIN_PASSWORD, name="Admin User")


@pytest.fixture
def user(db):
    return make_user(db, "user@example.com", name="Regular User")


def login(client, email, password):
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client, admin):
    return bearer(login(client, admin.email, ADMIN_PASSWORD))


@pytest.fixture
def user_headers(client, user):
    return bearer(login(client, user.email, USER_PASSWORD))
