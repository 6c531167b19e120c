"""Pytest configuration and fixtures."""
import os
from datetime import datetime
from unittest.mock import MagicMock

# Settings are read at import time
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from timesheet_service.database import get_database
from timesheet_service.main import app
from timesheet_service.models.user import User, UserRole, UserStatus
from timesheet_service.routers.auth import get_current_user

USER_ID = "65a1b2c3d4e5f60718293a4b"


def make_user(
    role: UserRole = UserRole.USER,
    status: UserStatus = UserStatus.ACTIVE,
    user_id: str = USER_ID,
) -> User:
    """Build a signed-in user for endpoint tests."""
    now = datetime.utcnow()
    return User(
        _id=user_id,
        email="casey@example.com",
        name="Casey Contractor",
        role=role,
        status=status,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def mock_db():
    """Stand-in database handed to services through the dependency."""
    return MagicMock()


@pytest.fixture
def sign_in_as():
    """Return a function that switches the authenticated user."""

    def _sign_in_as(user: User) -> User:
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    return _sign_in_as


@pytest_asyncio.fixture
async def app_client(mock_db, sign_in_as):
    """
    Create a test client with the database and signed-in user overridden.

    This fixture:
    - Replaces the database dependency with a mock
    - Signs in an active regular user (use ``sign_in_as`` to change it)
    - Yields an async HTTP client for testing
    """
    app.dependency_overrides[get_database] = lambda: mock_db
    sign_in_as(make_user())

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def user_factory():
    """Return the ``make_user`` helper."""
    return make_user
