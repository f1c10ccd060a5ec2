"""
Repository pattern implementations for data access.

Usage:
    from community.repositories import IssueRepository
    from community.db import db

    with db.session() as session:
        repo = IssueRepository(session)
        issues, total = repo.search({"status": "pending"}, offset=0, limit=10)
"""

from .base import BaseRepository
from .comment_repository import CommentRepository
from .issue_repository import IssueRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "CommentRepository",
    "IssueRepository",
    "UserRepository",
]
