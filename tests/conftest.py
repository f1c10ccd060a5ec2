"""
Pytest fixtures for Community Issues tests.

Each test gets a fresh in-memory SQLite database with the same connect hooks
(foreign keys, math functions) the application installs on SQLite engines.
"""

import os

# Settings are cached on first import; pin test values before anything loads them
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256-signing")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from community import models  # noqa: F401,E402
from community.constants import UserRole  # noqa: E402
from community.db import Base, configure_sqlite  # noqa: E402
from community.models import Issue, User  # noqa: E402
from community.security import TokenIssuer, hash_password  # noqa: E402

TEST_SECRET = os.environ["JWT_SECRET_KEY"]


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh test database for each test using ORM."""
    db_url = "sqlite://"
    engine = create_engine(
        db_url,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(engine)

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )

    yield db_url, TestingSessionLocal, engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_session(test_db):
    """Get a test session from the test database."""
    _, TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def token_issuer():
    return TokenIssuer(TEST_SECRET)


def create_test_user(session, email="member@example.com", username="member", role=UserRole.MEMBER.value, password="secret123"):
    """Helper to create a user row."""
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password, rounds=4),
        role=role,
    )
    session.add(user)
    session.flush()
    return user


def create_test_issue(session, reporter, title="Pothole", description="Deep pothole", longitude=0.0, latitude=0.0, **extra):
    """Helper to create an issue watched by its reporter."""
    issue = Issue(
        title=title,
        description=description,
        longitude=longitude,
        latitude=latitude,
        reporter=reporter,
        **extra,
    )
    issue.watchers.append(reporter)
    session.add(issue)
    session.flush()
    return issue


@pytest.fixture
def member(test_session):
    user = create_test_user(test_session)
    test_session.commit()
    return user


@pytest.fixture
def admin(test_session):
    user = create_test_user(test_session, email="admin@example.com", username="admin", role=UserRole.ADMIN.value)
    test_session.commit()
    return user


@pytest.fixture
def stranger(test_session):
    user = create_test_user(test_session, email="stranger@example.com", username="stranger")
    test_session.commit()
    return user


@pytest.fixture
def sample_issues(test_session, member):
    """Issues spread around Copenhagen plus one far away, oldest first."""
    from datetime import datetime, timedelta, timezone

    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    rows = [
        ("Broken streetlight", "Streetlight out on the corner", 12.5683, 55.6761, "pending"),
        ("Pothole on main road", "Large pothole damaging cars", 12.5700, 55.6770, "in-progress"),
        ("Graffiti", "Graffiti on the library wall", 12.6000, 55.7000, "pending"),
        ("Pothole near school", "Pothole and broken streetlight", 13.0000, 55.6000, "resolved"),
        ("Overflowing bin", "Trash bin overflowing", -0.1278, 51.5074, "pending"),
    ]
    issues = []
    for index, (title, description, lng, lat, status) in enumerate(rows):
        issue = create_test_issue(
            test_session,
            member,
            title=title,
            description=description,
            longitude=lng,
            latitude=lat,
            status=status,
            created_at=base + timedelta(days=index),
        )
        issues.append(issue)
    test_session.commit()
    return issues
