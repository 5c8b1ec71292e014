"""Shared fixtures: a throwaway SQLite database and signed-in users."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

TEST_DB_PATH = Path(__file__).parent / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PUSH_KEY"] = "test-push-key"
os.environ["APP_TIMEZONE"] = "America/Bogota"
os.environ["APP_URL"] = "https://app.example.com"
os.environ.pop("SENDGRID_API_KEY", None)
os.environ.pop("SENDGRID_SENDER", None)

from notifyhub.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from notifyhub.domain.entities import ROLE_ADMIN, ROLE_CLIENT, User  # noqa: E402
from notifyhub.infrastructure import database  # noqa: E402
from notifyhub.infrastructure.repositories import UserRepository  # noqa: E402
from notifyhub.infrastructure.security import create_access_token  # noqa: E402


@pytest.fixture(autouse=True)
def setup_database():
    """Recreate every table so each test starts from an empty store."""

    from notifyhub.infrastructure import models  # noqa: F401

    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.initialize_database()
    yield
    database.engine.dispose()


def pytest_sessionfinish(session, exitstatus):
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()


@pytest.fixture()
def session():
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def make_user(session):
    """Create users on demand: ``make_user("ana@example.com", role="admin")``."""

    repository = UserRepository(session)

    def _make(email: str, *, role: str = ROLE_CLIENT, name: str | None = None, is_active: bool = True) -> User:
        return repository.create(
            User(id=None, email=email, name=name or email.split("@")[0].title(), role=role, is_active=is_active)
        )

    return _make


@pytest.fixture()
def admin(make_user) -> User:
    return make_user("admin@example.com", role=ROLE_ADMIN, name="Admin")


@pytest.fixture()
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        token = create_access_token({"sub": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"
