import pytest

from community import cli
from community.db import db
from community.models import User


@pytest.fixture
def cli_db():
    """Point the global db singleton at a fresh in-memory database."""
    db.reset()
    db.initialize("sqlite://")
    yield db
    db.reset()


def test_init_db_creates_tables(cli_db, capsys):
    assert cli.main(["init-db"]) == 0
    assert "created" in capsys.readouterr().out

    with cli_db.session() as session:
        assert session.query(User).count() == 0


def test_set_role_promotes_user(cli_db):
    cli_db.create_all_tables()
    with cli_db.session() as session:
        session.add(User(username="ada", email="ada@example.com", password_hash="h"))

    assert cli.main(["set-role", "ADA@example.com", "admin"]) == 0

    with cli_db.session() as session:
        assert session.query(User).filter(User.email == "ada@example.com").one().is_admin


def test_set_role_unknown_email_fails(cli_db, capsys):
    cli_db.create_all_tables()

    assert cli.main(["set-role", "ghost@example.com", "admin"]) == 1
    assert "No user" in capsys.readouterr().err


def test_set_role_rejects_unknown_role(cli_db):
    with pytest.raises(SystemExit):
        cli.main(["set-role", "ada@example.com", "superuser"])
