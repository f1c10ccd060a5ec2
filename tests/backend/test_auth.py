from backend.app.auth.dependencies import get_token_issuer
from community.models import User

REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"


def _register(client, email="ada@example.com", password="secret123", username="ada"):
    return client.post(REGISTER_URL, json={"username": username, "email": email, "password": password})


def test_register_creates_member_and_returns_token(test_app_client):
    client, session_factory = test_app_client

    resp = _register(client)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["username"] == "ada"
    assert data["email"] == "ada@example.com"
    assert data["role"] == "member"
    assert "password_hash" not in data

    claims = get_token_issuer().verify(data["token"])
    assert claims.user_id == data["id"]
    assert claims.role == "member"

    session = session_factory()
    user = session.query(User).filter(User.email == "ada@example.com").one()
    assert user.password_hash != "secret123"
    session.close()


def test_register_duplicate_email_is_rejected(test_app_client):
    client, session_factory = test_app_client

    assert _register(client).status_code == 201
    resp = _register(client, username="other ada")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User already exists"

    session = session_factory()
    assert session.query(User).count() == 1
    session.close()


def test_register_validates_every_field(test_app_client):
    client, _ = test_app_client

    resp = client.post(REGISTER_URL, json={"username": "  ", "email": "not-an-email", "password": "123"})
    assert resp.status_code == 400
    fields = {error["field"] for error in resp.json()["errors"]}
    assert fields == {"username", "email", "password"}


def test_login_returns_token_for_same_identity(test_app_client):
    client, _ = test_app_client
    registered = _register(client).json()

    resp = client.post(LOGIN_URL, json={"email": "ada@example.com", "password": "secret123"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["id"] == registered["id"]

    claims = get_token_issuer().verify(data["token"])
    assert claims.user_id == registered["id"]
    assert claims.role == "member"


def test_login_failures_are_indistinguishable(test_app_client):
    client, _ = test_app_client
    _register(client)

    wrong_password = client.post(LOGIN_URL, json={"email": "ada@example.com", "password": "nope-nope"})
    unknown_email = client.post(LOGIN_URL, json={"email": "ghost@example.com", "password": "secret123"})

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["detail"] == "Invalid credentials"


def test_me_requires_bearer_token(test_app_client):
    client, _ = test_app_client

    assert client.get("/api/v1/auth/me").status_code == 401
    assert client.get("/api/v1/auth/me", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not.a.jwt"}).status_code == 401


def test_me_returns_current_user(authorized_client):
    client, headers, _ = authorized_client

    resp = client.get("/api/v1/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "tester@example.com"
