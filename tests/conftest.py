import os
import uuid
from datetime import timedelta

# Settings are read at import time, so the test environment goes in first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789-abcdefghijklmnopqrstuvwxyz"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["RATE_LIMIT_BACKEND"] = "memory"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import models  # noqa: E402,F401
from core import rate_limit  # noqa: E402
from core.security import create_access_token, hash_password  # noqa: E402
from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from models.post import Post  # noqa: E402
from models.user import User  # noqa: E402
from posts import workflow  # noqa: E402

DEFAULT_PASSWORD = "Passw0rd!"


@pytest.fixture(autouse=True)
def _fresh_db():
    """
    Recreate every table for each test on the shared in-memory SQLite
    database, and clear both rate limiters.
    """
    Base.metadata.create_all(bind=engine)
    rate_limit.login_limiter.reset()
    rate_limit.comment_limiter.reset()
    yield
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    """
    Factory fixture: insert a user directly via the ORM.
    """

    def _make_user(role: str = "reader", email: str | None = None, password: str = DEFAULT_PASSWORD,
                   full_name: str | None = None, is_active: bool = True) -> User:
        user = User(
            email=email or f"{role}-{uuid.uuid4().hex[:6]}@mailbox.org",
            password_hash=hash_password(password),
            full_name=full_name,
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    """
    Mint a session token for *user* without going through the login
    endpoint, so tests never trip the login rate limit.
    """

    def _headers(user: User, expires: timedelta | None = None) -> dict[str, str]:
        token, _ = create_access_token(
            {"sub": user.email, "user_id": user.id, "role": user.role},
            expires_delta=expires,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_post(db):
    """Factory fixture: create a post through the publication workflow."""

    def _make_post(author: User | None = None, slug: str | None = None, status: str = "published",
                   content: str = "Some **markdown** body text.", tags=None, title: str = "A Post") -> Post:
        return workflow.create_post(db, author, {
            "title": title,
            "slug": slug or f"post-{uuid.uuid4().hex[:8]}",
            "content": content,
            "tags": tags or [],
            "status": status,
        })

    return _make_post
