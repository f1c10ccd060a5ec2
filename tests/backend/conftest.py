import os
import sys
from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from backend.app.auth.dependencies import get_token_issuer  # noqa: E402
from backend.app.database import get_db  # noqa: E402
from backend.app.dependencies import get_image_storage, get_notifier  # noqa: E402
from backend.app.main import create_app  # noqa: E402
from community.constants import UserRole  # noqa: E402
from community.models import User  # noqa: E402
from community.security import hash_password  # noqa: E402
from community.services import ImageUpload, StoredImage  # noqa: E402


class FakeNotifier:
    """Records every notify call instead of sending mail."""

    def __init__(self):
        self.sent: list[tuple[set[str], str, str]] = []
        self.fail_with: Exception | None = None

    def notify(self, recipients, subject, html):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append((set(recipients), subject, html))


class FakeImageStorage:
    def __init__(self):
        self.uploaded: list[ImageUpload] = []

    def upload(self, image: ImageUpload) -> StoredImage:
        self.uploaded.append(image)
        index = len(self.uploaded)
        return StoredImage(url=f"https://images.example.com/{index}.jpg", storage_id=f"community-issues/{index}")


@pytest.fixture
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def fake_storage() -> FakeImageStorage:
    return FakeImageStorage()


@pytest.fixture
def test_app_client(test_db, fake_notifier, fake_storage) -> Iterator[tuple[TestClient, sessionmaker]]:
    db_url, TestingSessionLocal, engine = test_db

    app = create_app()

    def override_get_db() -> Iterator[Session]:
        db = TestingSessionLocal()
        try:
            yield db
            db.commit()  # Auto-commit on success like production
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: fake_notifier
    app.dependency_overrides[get_image_storage] = lambda: fake_storage

    with TestClient(app) as client:
        yield client, TestingSessionLocal


def _user_with_token(session_factory, **user_fields) -> tuple[User, dict[str, str]]:
    session = session_factory()
    try:
        password = user_fields.pop("password", "secret123")
        user = User(password_hash=hash_password(password, rounds=4), **user_fields)
        session.add(user)
        session.commit()
    finally:
        session.close()
    token = get_token_issuer().issue(user.id, user.role)
    return user, {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(test_app_client) -> Callable[..., tuple[User, dict[str, str]]]:
    """Factory creating a user row and returning it with auth headers."""
    _, TestingSessionLocal = test_app_client

    def factory(**user_fields):
        return _user_with_token(TestingSessionLocal, **user_fields)

    return factory


@pytest.fixture
def authorized_client(test_app_client, make_user) -> Iterator[tuple[TestClient, dict[str, str], sessionmaker]]:
    client, TestingSessionLocal = test_app_client
    _, headers = make_user(email="tester@example.com", username="tester")
    yield client, headers, TestingSessionLocal


@pytest.fixture
def admin_headers(make_user) -> dict[str, str]:
    _, headers = make_user(email="boss@example.com", username="boss", role=UserRole.ADMIN.value)
    return headers


@pytest.fixture
def other_headers(make_user) -> dict[str, str]:
    _, headers = make_user(email="neighbour@example.com", username="neighbour")
    return headers


@pytest.fixture
def create_issue(test_app_client) -> Callable[..., dict]:
    """POST a multipart issue and return the JSON body."""
    client, _ = test_app_client

    def factory(headers: dict[str, str], **fields) -> dict:
        data = {"title": "Pothole", "description": "Deep pothole on Elm Street"}
        data.update({key: str(value) for key, value in fields.items()})
        response = client.post("/api/v1/issues", data=data, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return factory
