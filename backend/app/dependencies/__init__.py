"""
FastAPI dependency injection module.

Provides centralized dependencies for:
- Repositories (per-request session)
- Process-wide collaborators (mailer, image storage)
- Services
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from community.config import get_settings
from community.repositories import CommentRepository, IssueRepository, UserRepository
from community.security import TokenIssuer
from community.services import (
    AuthService,
    CommentService,
    EmailNotifier,
    ImageStorage,
    IssueService,
    Notifier,
    build_image_storage,
)

from ..auth.dependencies import get_token_issuer
from ..database import get_db

# =============================================================================
# Repository Dependencies
# =============================================================================


def get_issue_repository(db: Session = Depends(get_db)) -> IssueRepository:
    return IssueRepository(db)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_comment_repository(db: Session = Depends(get_db)) -> CommentRepository:
    return CommentRepository(db)


# =============================================================================
# Process-wide Collaborators
# =============================================================================


@lru_cache
def get_notifier() -> Notifier:
    """SMTP notifier; a silent no-op until EMAIL_* settings are present."""
    return EmailNotifier.from_settings(get_settings())


@lru_cache
def get_image_storage() -> ImageStorage:
    return build_image_storage(get_settings())


# =============================================================================
# Service Dependencies
# =============================================================================


def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(user_repo, issuer, hash_rounds=get_settings().password_hash_rounds)


def get_issue_service(
    issue_repo: IssueRepository = Depends(get_issue_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    notifier: Notifier = Depends(get_notifier),
    image_storage: ImageStorage = Depends(get_image_storage),
) -> IssueService:
    """Get IssueService instance with injected repositories and collaborators."""
    return IssueService(
        issue_repo,
        user_repo,
        notifier,
        image_storage,
        max_image_bytes=get_settings().max_image_size_mb * 1024 * 1024,
    )


def get_comment_service(
    comment_repo: CommentRepository = Depends(get_comment_repository),
    issue_repo: IssueRepository = Depends(get_issue_repository),
) -> CommentService:
    return CommentService(comment_repo, issue_repo)


__all__ = [
    # Repository dependencies
    "get_issue_repository",
    "get_user_repository",
    "get_comment_repository",
    # Collaborators
    "get_token_issuer",
    "get_notifier",
    "get_image_storage",
    # Service dependencies
    "get_auth_service",
    "get_issue_service",
    "get_comment_service",
]
