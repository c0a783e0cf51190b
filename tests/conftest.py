"""
Test configuration and fixtures for the AccessScan API.

The environment is pointed at a throwaway SQLite database and reports
directory before the application (and its settings) are imported.
"""

import os
import tempfile
import uuid
from typing import Generator

from dotenv import load_dotenv

import pytest
from fastapi.testclient import TestClient

load_dotenv()

_test_dir = tempfile.mkdtemp(prefix="accessscan-tests-")

test_db_url = os.getenv("TEST_DATABASE_URL")
if test_db_url:
    if "postgresql://" in test_db_url and "asyncpg" not in test_db_url:
        test_db_url = test_db_url.replace("postgresql://", "postgresql+asyncpg://")
    os.environ["DATABASE_URL"] = test_db_url
else:
    os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_test_dir, 'test.db')}"

os.environ["REPORTS_DIR"] = os.path.join(_test_dir, "reports")
os.environ["SCREENSHOT_ENABLED"] = "false"
os.environ["FETCH_RETRY_DELAY_SECONDS"] = "0"

import app.platform.db.models  # noqa: E402,F401  registers every mapper before User() is built
from app.features.auth.models.user import User  # noqa: E402
from app.features.auth.routes.auth import get_current_user  # noqa: E402
from app.platform.db.session import Database  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Create a test client for making HTTP requests.
    Entering the client runs the application lifespan (database, orchestrator).
    """
    with TestClient(test_app) as test_client:
        yield test_client


# Mock User object for authenticated tests
MOCK_USER = User(
    id=str(uuid.uuid4()),
    username="lunarkhord",
    password_hash="ininakhafurobinayoumaabusankamtarira",
)


# Dependency Override function
def override_get_current_user():
    """Mock dependency that always returns a fixed authenticated user."""
    return MOCK_USER


@pytest.fixture
def auth_client(client, test_app):
    """Client with the get_current_user dependency overridden for authenticated tests."""
    # Temporarily replace the real dependency with our mock
    test_app.dependency_overrides[get_current_user] = override_get_current_user

    yield client

    # Cleanup: restore the original dependency after the test runs
    test_app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
async def database(tmp_path):
    """A private SQLite database with every table created."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'accessscan.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def test_user(database):
    async with database.sessionmaker() as session:
        user = User(username=f"user-{uuid.uuid4().hex[:8]}", password_hash="not-a-real-hash")
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user
