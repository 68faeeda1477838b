"""Test configuration and fixtures."""

import os

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["LOG_TO_FILE"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ["DB_AUTO_UPGRADE"] = "false"
os.environ["ALL_ACCESS_ROLES"] = "admin"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from stockroom.core.security import create_access_token
from stockroom.core.permissions.templates import permissions_for_role
from stockroom.db import Base, get_db
from stockroom.main import app
from stockroom.repositories import user_repository
import stockroom.models  # noqa: F401


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create a committed user; permissions default to the role template."""
    def _make_user(username, role="viewer", permissions=None, is_active=True):
        if permissions is None:
            permissions = [p.to_dict() for p in permissions_for_role(role)]
        user = user_repository.create_user(
            db,
            username=username,
            email=f"{username}@example.com",
            role=role,
            permissions=permissions,
            full_name=username.title(),
        )
        user.is_active = is_active
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    """Bearer headers for a user."""
    def _auth_headers(user) -> dict:
        token, _ = create_access_token(user.id)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def admin(make_user):
    return make_user("root", role="admin", permissions=[])


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)
