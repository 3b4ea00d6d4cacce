import secrets
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from main import app
from esports_hub import models  # noqa: F401
from esports_hub.config import SESSION_COOKIE_NAME
from esports_hub.database import get_session
from esports_hub.models import User, Session as UserSession
from esports_hub.services.auth import hash_password

# Create in-memory database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Hashing is slow, share one hash between fixture users
TEST_PASSWORD = "password123"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture(name="session")
def session_fixture():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def create_user(
    session: Session,
    email: str = "player@example.com",
    name: str = "Player",
    is_admin: bool = False
) -> User:
    user = User(
        email=email,
        name=name,
        password_hash=TEST_PASSWORD_HASH,
        is_admin=is_admin
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def create_token(session: Session, user: User, expires_in: timedelta = timedelta(days=7)) -> str:
    token = secrets.token_urlsafe(32)
    session.add(UserSession(
        user_id=user.id,
        session_token=token,
        expires_at=datetime.utcnow() + expires_in
    ))
    session.commit()
    return token


def login_as(client: TestClient, session: Session, user: User) -> None:
    """Point the client's session cookie at the given user."""
    client.cookies.set(SESSION_COOKIE_NAME, create_token(session, user))


@pytest.fixture(name="user")
def user_fixture(session: Session) -> User:
    return create_user(session)


@pytest.fixture(name="admin")
def admin_fixture(session: Session) -> User:
    return create_user(session, email="admin@example.com", name="Admin", is_admin=True)


@pytest.fixture(name="user_client")
def user_client_fixture(client: TestClient, session: Session, user: User) -> TestClient:
    login_as(client, session, user)
    return client


@pytest.fixture(name="admin_client")
def admin_client_fixture(client: TestClient, session: Session, admin: User) -> TestClient:
    login_as(client, session, admin)
    return client
