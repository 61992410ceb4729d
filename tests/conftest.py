"""Shared test fixtures.

Points the app at an in-memory SQLite database before anything under
``app`` is imported, and provides a session per test, a recording event
publisher, user/household factories and a TestClient whose auth, database
and publisher dependencies are overridden.
"""

import os

# Patch env vars BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENABLE_BACKGROUND_TASKS"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_ANON_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401  registers every table
from app.database import Base, get_db
from app.dependencies.permissions import get_current_user, get_event_publisher
from app.models.enums import HouseholdRole
from app.models.household_membership import HouseholdMember
from app.models.user import User
from app.schemas.household import HouseholdCreate
from app.services.household_service import HouseholdService
from app.utils.realtime import RecordingEventPublisher


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
def db(engine):
    """A session bound to a fresh in-memory database."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def publisher():
    return RecordingEventPublisher()


@pytest.fixture
def make_user(db):
    """Factory creating users with unique emails."""
    counter = {"n": 0}

    def _make_user(name=None, email=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            supabase_id=f"supabase-{n}",
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_household(db):
    """Factory creating a household owned by ``admin`` with extra accepted members."""

    def _make_household(admin, members=(), name="Maple House"):
        result = HouseholdService(db).create_household(HouseholdCreate(name=name), admin.id)
        household_id = result["data"].id
        for member in members:
            db.add(
                HouseholdMember(
                    user_id=member.id,
                    household_id=household_id,
                    role=HouseholdRole.MEMBER.value,
                    is_invited=True,
                    is_accepted=True,
                )
            )
        db.commit()
        return household_id

    return _make_household


@pytest.fixture
def admin(make_user):
    return make_user(name="Alice Admin")


@pytest.fixture
def member(make_user):
    return make_user(name="Bob Member")


@pytest.fixture
def outsider(make_user):
    return make_user(name="Olivia Outsider")


@pytest.fixture
def household_id(make_household, admin, member):
    return make_household(admin, members=[member])


class ApiClient:
    """TestClient wrapper that authenticates requests as a chosen user."""

    def __init__(self, app, client):
        self.app = app
        self.client = client

    def as_user(self, user):
        self.app.dependency_overrides[get_current_user] = lambda: user
        return _UserBoundClient(self.app, self.client, user)


class _UserBoundClient:
    """Client handle that re-applies its user's auth override on every request."""

    def __init__(self, app, client, user):
        self._app = app
        self._client = client
        self._user = user

    def __getattr__(self, name):
        attr = getattr(self._client, name)
        if name in ("get", "post", "put", "patch", "delete", "request", "options", "head"):
            def bound(*args, **kwargs):
                self._app.dependency_overrides[get_current_user] = lambda: self._user
                return attr(*args, **kwargs)
            return bound
        return attr


@pytest.fixture
def api(db, publisher):
    from app.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    try:
        yield ApiClient(app, TestClient(app))
    finally:
        app.dependency_overrides.clear()
