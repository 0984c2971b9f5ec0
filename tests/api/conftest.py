"""Fixtures for API tests: an isolated database and settings per test."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pattern_engine.config import Settings
from pattern_engine.database import Base, get_db
from pattern_engine.dependencies import get_settings
from pattern_engine.main import app

ADMIN_SECRET = "s3cret"


@pytest.fixture(scope="function")
def test_db():
    """Create isolated test database for each test.

    This fixture:
    1. Creates a fresh in-memory SQLite database shared across connections
    2. Overrides FastAPI's get_db dependency
    3. Cleans up after the test
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    db_session = TestingSessionLocal()
    yield db_session
    db_session.close()

    app.dependency_overrides.clear()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def api_settings(test_db):
    settings = Settings(admin_secret=ADMIN_SECRET, debug=False)
    app.dependency_overrides[get_settings] = lambda: settings
    return settings


@pytest.fixture
def client(test_db, api_settings):
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_SECRET}"}
