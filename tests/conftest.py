"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/accounts", "/accounts_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

# The app builds its own engine from settings at import time, so point it at the
# test database before importing anything from src
os.environ["DATABASE_URL"] = SQLALCHEMY_DATABASE_URL
os.environ.setdefault("ENVIRONMENT", "test")

from src.config import get_settings  # noqa: E402
from src.database import Base, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.services.auth import decode_access_token  # noqa: E402

TEST_EMAIL = "test@example.com"
TEST_PASSWORD = "testpass123"


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and credentials."""

    def __init__(self, *args, user_id: int, email: str, password: str, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email
        self.password = password


connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    from src import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client, settings):
    """Sign up a user and return auth headers with user info."""
    response = client.post(
        "/signup",
        json={"name": "Test User", "email": TEST_EMAIL, "password": TEST_PASSWORD},
    )
    assert response.status_code == 201
    token = response.json()["token"]
    user_id = int(decode_access_token(token, settings)["sub"])

    return AuthHeaders(
        {"Authorization": f"Bearer {token}"},
        user_id=user_id,
        email=TEST_EMAIL,
        password=TEST_PASSWORD,
    )
