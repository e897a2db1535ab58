"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["CORS_ORIGINS"] = '["http://localhost:5500"]'
os.environ["ADMIN_EMAIL"] = "admin@test.com"
os.environ["ADMIN_PASSWORD"] = "TestAdmin123!"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="community-uploads-")
os.environ.pop("SENTRY_DSN", None)

from authentication.auth import get_password_hash  # noqa: E402
from authentication.session_store import SessionRegistry  # noqa: E402
from init_db import seed_community  # noqa: E402
from models.config import settings  # noqa: E402
from models.schemas import AuthenticatedUser  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

MEMBER_PASSWORD = "memberpassword123"
OUTSIDER_PASSWORD = "outsiderpassword123"


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch) -> Path:
    """Give every test its own upload directory."""
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(directory))
    return directory


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session for backward compatibility."""
    return db_session


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden database dependency."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def app_registry(client) -> SessionRegistry:
    """The session registry owned by the running test app."""
    return client.app.state.session_registry


@pytest.fixture
def registry() -> SessionRegistry:
    """A standalone registry for service-level tests."""
    registry = SessionRegistry(max_age_seconds=3600)
    yield registry
    registry.close()


@pytest.fixture
def seeded(db_session) -> tuple[db_models.User, db_models.Community]:
    """The admin user and the community, as created by init_db."""
    return seed_community(db_session)


@pytest.fixture
def admin_user(seeded) -> db_models.User:
    return seeded[0]


@pytest.fixture
def community(seeded) -> db_models.Community:
    return seeded[1]


def _make_user(
    db_session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    community_id: int | None,
) -> db_models.User:
    user = db_models.User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        hashed_password=get_password_hash(password),
        auth_provider=db_models.AuthProvider.LOCAL,
        company="Acme Mining",
        job_title="Geologist",
        industry="Mining",
        community_id=community_id,
        permission_level=db_models.PermissionLevel.USER,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def member_user(db_session, community) -> db_models.User:
    """A regular user who belongs to the community."""
    return _make_user(
        db_session, "member@example.com", MEMBER_PASSWORD, "Mary", "Member", community.id
    )


@pytest.fixture
def other_member(db_session, community) -> db_models.User:
    """A second community member."""
    return _make_user(
        db_session, "other@example.com", MEMBER_PASSWORD, "Oscar", "Other", community.id
    )


@pytest.fixture
def outsider_user(db_session, community) -> db_models.User:
    """A registered user who has not joined the community."""
    return _make_user(
        db_session, "outsider@example.com", OUTSIDER_PASSWORD, "Otto", "Outsider", None
    )


@pytest.fixture
def test_post(db_session, member_user) -> db_models.Post:
    post = db_models.Post(user_id=member_user.id, content="First post from the pit")
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


@pytest.fixture
def test_comment(db_session, test_post, other_member) -> db_models.Comment:
    comment = db_models.Comment(
        post_id=test_post.id, user_id=other_member.id, content="Nice one"
    )
    db_session.add(comment)
    db_session.commit()
    db_session.refresh(comment)
    return comment


def as_authenticated(
    user: db_models.User, session_id: str = "test-session"
) -> AuthenticatedUser:
    """Build the request-scoped user a resolved session would yield."""
    return AuthenticatedUser(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        permission_level=user.permission_level,
        community_id=user.community_id,
        session_id=session_id,
    )


@pytest.fixture
def member(member_user) -> AuthenticatedUser:
    return as_authenticated(member_user)


@pytest.fixture
def admin(admin_user) -> AuthenticatedUser:
    return as_authenticated(admin_user)


@pytest.fixture
def other(other_member) -> AuthenticatedUser:
    return as_authenticated(other_member, "other-session")


@pytest.fixture
def outsider(outsider_user) -> AuthenticatedUser:
    return as_authenticated(outsider_user)


@pytest.fixture
def login(client):
    """Log a user in through the API; the client keeps the session cookie."""

    def _login(email: str, password: str):
        response = client.post(
            "/api/auth/login", json={"email": email, "password": password}
        )
        assert response.status_code == 200, response.text
        return response

    return _login


@pytest.fixture
def member_client(client, login, member_user):
    login(member_user.email, MEMBER_PASSWORD)
    return client


@pytest.fixture
def admin_client(client, login, admin_user):
    login(admin_user.email, settings.ADMIN_PASSWORD)
    return client


@pytest.fixture
def outsider_client(client, login, outsider_user):
    login(outsider_user.email, OUTSIDER_PASSWORD)
    return client
