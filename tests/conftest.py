"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.api.dependencies import get_mailer
from src.config import Settings
from src.database import Base, get_db
from src.main import app
from src.services.email_service import EmailService


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class FakeTransport:
    """Mail transport that records messages instead of sending them."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, message):
        if self.fail:
            raise ConnectionRefusedError("SMTP server unavailable")
        self.sent.append(message)

    @property
    def subjects(self) -> list[str]:
        return [m["Subject"] for m in self.sent]


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace(
        "/subscription_tracker", "/subscription_tracker_test"
    )
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


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
def outbox():
    """Fake mail transport capturing every outgoing email."""
    return FakeTransport()


@pytest.fixture
def mailer(outbox):
    """Email service wired to the fake transport."""
    settings = Settings(
        frontend_url="https://app.example.com",
        email_user="tracker@example.com",
    )
    return EmailService(outbox, settings)


@pytest.fixture(scope="function")
def client(db, mailer):
    """Create a test client with database and mailer overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def signup(client, name: str, email: str, password: str = "testpass123") -> AuthHeaders:
    """Register a user and return bearer headers carrying the user's id and email."""
    response = client.post(
        "/api/v1/auth/signup",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201
    data = response.json()["data"]
    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"},
        user_id=data["user"]["id"],
        email=data["user"]["email"],
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return signup(client, "Test User", "test@example.com")


@pytest.fixture
def other_auth_headers(client):
    """A second, unrelated user."""
    return signup(client, "Other User", "other@example.com")


@pytest.fixture
def make_user(client):
    """Factory fixture registering additional users."""

    def _make_user(name: str, email: str, password: str = "testpass123") -> AuthHeaders:
        return signup(client, name, email, password)

    return _make_user
