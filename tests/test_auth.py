from datetime import timedelta

from sqlmodel import select

from esports_hub.config import SESSION_COOKIE_NAME
from esports_hub.models import User, Session as UserSession
from esports_hub.services.auth import hash_password, verify_password
from tests.conftest import TEST_PASSWORD, create_token


def test_password_hashing():
    password = "secure_password_123"
    hashed = hash_password(password)

    assert hashed != password
    assert isinstance(hashed, str)
    assert verify_password(password, hashed) is True
    assert verify_password("wrong_password", hashed) is False


def test_password_long_truncation():
    # bcrypt only uses 72 bytes, longer passwords are truncated
    long_password = "a" * 100
    hashed = hash_password(long_password)

    assert verify_password(long_password, hashed) is True
    assert verify_password("a" * 72, hashed) is True
    assert verify_password("b" * 72, hashed) is False


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_register_sets_session_cookie(client, session):
    response = client.post("/api/auth/register", json={
        "name": "New Player",
        "email": "New@Example.com",
        "password": "secret123"
    })

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "new@example.com"
    assert data["isAdmin"] is False
    assert SESSION_COOKIE_NAME in response.cookies

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["name"] == "New Player"


def test_register_duplicate_email(client, user):
    response = client.post("/api/auth/register", json={
        "name": "Someone",
        "email": user.email,
        "password": "secret123"
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"


def test_register_duplicate_email_caught_by_unique_index(client, session, user, monkeypatch):
    # Another registration commits the same email after the lookup ran
    monkeypatch.setattr("esports_hub.routers.auth.get_user_by_email", lambda db, email: None)

    response = client.post("/api/auth/register", json={
        "name": "Someone",
        "email": user.email,
        "password": "secret123"
    })

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"
    users = session.exec(select(User).where(User.email == user.email)).all()
    assert len(users) == 1


def test_register_validates_input(client):
    bad_email = client.post("/api/auth/register", json={
        "name": "x", "email": "not-an-email", "password": "secret123"
    })
    short_password = client.post("/api/auth/register", json={
        "name": "x", "email": "x@example.com", "password": "123"
    })

    assert bad_email.status_code == 400
    assert short_password.status_code == 400


def test_login_and_logout(client, session, user):
    wrong = client.post("/api/auth/login", json={"email": user.email, "password": "nope"})
    assert wrong.status_code == 401

    response = client.post("/api/auth/login", json={"email": user.email, "password": TEST_PASSWORD})
    assert response.status_code == 200
    assert client.get("/api/auth/me").status_code == 200

    logout = client.post("/api/auth/logout")
    assert logout.status_code == 200
    assert session.exec(select(UserSession).where(UserSession.user_id == user.id)).all() == []


def test_me_requires_session(client):
    assert client.get("/api/auth/me").status_code == 401


def test_expired_session_is_rejected_and_deleted(client, session, user):
    token = create_token(session, user, expires_in=timedelta(minutes=-5))
    client.cookies.set(SESSION_COOKIE_NAME, token)

    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert session.exec(select(UserSession).where(UserSession.session_token == token)).first() is None


def test_protected_endpoints_require_authentication(client):
    protected = [
        ("get", "/api/teams"),
        ("post", "/api/teams"),
        ("get", "/api/teams/all"),
        ("get", "/api/teams/1"),
        ("put", "/api/teams/1"),
        ("delete", "/api/teams/1"),
        ("get", "/api/users/search?q=abc"),
        ("get", "/api/user/dashboard-stats"),
        ("post", "/api/upload"),
        ("get", "/api/invites"),
        ("get", "/api/tournaments"),
        ("get", "/api/admin/tournaments"),
        ("post", "/api/admin/tournaments"),
        ("get", "/api/admin/tournaments/1"),
        ("put", "/api/admin/tournaments/1"),
        ("get", "/api/admin/contacts"),
        ("patch", "/api/admin/contacts/1"),
        ("delete", "/api/admin/contacts/1"),
        ("get", "/api/admin/dashboard-stats"),
    ]
    for method, url in protected:
        response = client.request(method.upper(), url)
        assert response.status_code == 401, f"{method.upper()} {url}"


def test_admin_endpoints_forbid_regular_users(user_client):
    assert user_client.get("/api/admin/tournaments").status_code == 403
    assert user_client.get("/api/admin/contacts").status_code == 403
    assert user_client.get("/api/admin/dashboard-stats").status_code == 403


def test_user_model_defaults(session, user):
    stored = session.get(User, user.id)
    assert stored.is_admin is False
    assert stored.created_at is not None
