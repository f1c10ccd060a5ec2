"""
SQLAlchemy models for the Community Issues API.

Usage:
    from community.models import User, Issue, Comment
"""

from .base import Base
from .comment import Comment
from .issue import Issue, IssueImage, IssueStatusChange, issue_watchers
from .user import User

__all__ = [
    "Base",
    "User",
    "Issue",
    "IssueImage",
    "IssueStatusChange",
    "issue_watchers",
    "Comment",
]
