"""
Business services.

Services receive repositories and process-wide collaborators (token issuer,
mailer, image storage) through their constructors; none of them read
settings or globals directly.
"""

from community.services.auth_service import AuthService
from community.services.comment_service import CommentService
from community.services.issue_service import IssueService, Principal
from community.services.notification_service import EmailNotifier, Notifier
from community.services.storage_service import (
    CloudinaryImageStorage,
    ImageStorage,
    ImageUpload,
    StoredImage,
    UnconfiguredImageStorage,
    build_image_storage,
    validate_images,
)

__all__ = [
    "AuthService",
    "CommentService",
    "IssueService",
    "Principal",
    "EmailNotifier",
    "Notifier",
    "CloudinaryImageStorage",
    "ImageStorage",
    "ImageUpload",
    "StoredImage",
    "UnconfiguredImageStorage",
    "build_image_storage",
    "validate_images",
]
