"""Pytest configuration and fixtures."""

import os

# Fixed secrets and cheap hashing for tests; must be set before app modules load settings
os.environ.setdefault("JWT_SECRET_KEY", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET_KEY", "test-refresh-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_industry_hub.db")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.models.profile import LogisticsProfile, TourProfile, TravelProfile  # noqa: E402, F401
from app.models.revoked_token import RevokedToken  # noqa: E402, F401
from app.models.user import User  # noqa: E402, F401
from app.services.auth import AuthService  # noqa: E402

TEST_PASSWORD = "password123"


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="auth_service")
def auth_service_fixture() -> AuthService:
    return AuthService()


def _register(db_session: Session, email: str, industry_type: str = "other", password: str = TEST_PASSWORD) -> dict:
    """Register a user directly through the service and return its ids and tokens."""
    result = AuthService().register(db_session, "Test", "User", email, password, industry_type=industry_type)
    assert result.success, result.error
    return {
        "user_id": result.user.id,
        "email": result.user.email,
        "password": password,
        "access_token": result.tokens.access_token,
        "refresh_token": result.tokens.refresh_token,
        "headers": {"Authorization": f"Bearer {result.tokens.access_token}"},
    }


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session) -> dict:
    """A user with industry type 'other'."""
    return _register(db_session, "test@example.com")


@pytest.fixture(name="tour_user")
def tour_user_fixture(db_session: Session) -> dict:
    """A user with industry type 'tour'."""
    return _register(db_session, "tour@example.com", industry_type="tour")


@pytest.fixture(name="make_user")
def make_user_fixture(db_session: Session):
    """Factory registering extra users: make_user(email, industry_type="other")."""

    def factory(email: str, industry_type: str = "other", password: str = TEST_PASSWORD) -> dict:
        return _register(db_session, email, industry_type=industry_type, password=password)

    return factory
