"""
Community Issues admin CLI.

Usage:
    python -m community.cli init-db
    python -m community.cli set-role alice@example.com admin
"""

import argparse
import sys

from dotenv import load_dotenv

from community.constants import UserRole
from community.db import db
from community.logging import configure_logging, get_logger
from community.repositories import UserRepository

logger = get_logger("cli")


def cmd_init_db(args) -> int:
    """Create all tables."""
    db.initialize()
    db.create_all_tables()
    print("Database tables created")
    return 0


def cmd_set_role(args) -> int:
    """Change a user's role; the only way to grant admin."""
    db.initialize()
    with db.session() as session:
        repo = UserRepository(session)
        user = repo.get_by_email(args.email.lower())
        if user is None:
            print(f"No user with email {args.email}", file=sys.stderr)
            return 1
        repo.set_role(user, args.role)
        logger.info("user_role_changed", user_id=user.id, role=args.role)
    print(f"{args.email} is now {args.role}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Community Issues administration")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.required = True

    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.set_defaults(func=cmd_init_db)

    role_parser = subparsers.add_parser("set-role", help="Change a user's role")
    role_parser.add_argument("email", help="Email of the user")
    role_parser.add_argument("role", choices=[role.value for role in UserRole])
    role_parser.set_defaults(func=cmd_set_role)

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    configure_logging()
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
