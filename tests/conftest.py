"""
Pytest configuration and fixtures for SocialCal API tests.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from socialcal.database import Base, get_db
from socialcal.dependencies import get_dispatcher, get_storage, get_transport
from socialcal.limiter import limiter
from socialcal.main import app
from socialcal.models import SocialAccount
from socialcal.posting.circuit_breaker import CircuitBreaker
from socialcal.posting.dispatcher import PostingDispatcher
from socialcal.posting.notify import CollectingNotifier
from socialcal.posting.rate_limiter import PlatformRateLimiter

from fakes import USER_ID, FakeStorage, FakeTransport, make_token

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None


def get_test_db():
    """Get the shared test database session."""
    global _test_session
    try:
        yield _test_session
    finally:
        pass


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create a session
    _test_session = TestingSessionLocal()

    # Override the get_db dependency
    app.dependency_overrides[get_db] = get_test_db

    yield _test_session

    # Cleanup
    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None

    # Drop all tables
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def storage():
    return FakeStorage()


@pytest.fixture(scope="function")
def transport():
    return FakeTransport()


@pytest.fixture(scope="function")
def dispatcher(transport):
    """Dispatcher with its own breaker and limiter so tests do not share state"""
    return PostingDispatcher(transport, breaker=CircuitBreaker(), limiter=PlatformRateLimiter())


@pytest.fixture(scope="function")
def notifier():
    return CollectingNotifier()


@pytest.fixture(scope="function")
def client(db, storage, transport, dispatcher):
    """Create a test client wired to the fakes."""
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_transport] = lambda: transport
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def auth_headers():
    """Get auth headers for the test user."""
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture(scope="function")
def accounts(db):
    """One active account per platform for the test user; Twitter has two."""
    rows = [
        SocialAccount(user_id=USER_ID, platform="twitter", platform_user_id="tw-1",
                      username="main", access_token="tw-token", access_secret="tw-secret", is_primary=True),
        SocialAccount(user_id=USER_ID, platform="twitter", platform_user_id="tw-2",
                      username="brand", account_label="Brand", access_token="tw-token-2", access_secret="tw-secret-2"),
        SocialAccount(user_id=USER_ID, platform="facebook", platform_user_id="page-1", access_token="fb-page-token"),
        SocialAccount(user_id=USER_ID, platform="instagram", platform_user_id="ig-1", access_token="ig-token"),
        SocialAccount(user_id=USER_ID, platform="linkedin", platform_user_id="li-1", access_token="li-token"),
        SocialAccount(user_id=USER_ID, platform="threads", platform_user_id="th-1", access_token="th-token"),
        SocialAccount(user_id=USER_ID, platform="bluesky", platform_user_id="bs-1",
                      access_token="me.bsky.social", access_secret="app-password"),
        SocialAccount(user_id=USER_ID, platform="pinterest", platform_user_id="pin-1", access_token="pin-token"),
        SocialAccount(user_id=USER_ID, platform="tiktok", platform_user_id="tt-1", access_token="tt-token"),
        SocialAccount(user_id=USER_ID, platform="youtube", platform_user_id="yt-1", access_token="yt-token"),
        SocialAccount(user_id="someone-else", platform="twitter", platform_user_id="tw-x", access_token="other"),
    ]
    db.add_all(rows)
    db.commit()
    return rows
