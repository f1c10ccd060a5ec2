"""
Issue lifecycle: create, search, read, update, status transitions, delete
and watching.

Existence is always checked before entitlement, so a caller probing an id
that does not exist sees NotFound rather than Forbidden.
"""

import math
from dataclasses import dataclass

from community.constants import DEFAULT_COORDINATES, UserRole
from community.exceptions import Forbidden, NotFound, Unauthenticated
from community.logging import LogContext, get_logger
from community.models import Issue, IssueStatusChange, User
from community.repositories import IssueRepository, UserRepository
from community.schemas import IssueCreate, IssueQuery, IssueUpdate, StatusUpdate

from .notification_service import Notifier
from .storage_service import ImageStorage, ImageUpload, validate_images

logger = get_logger("issues")


@dataclass(frozen=True)
class Principal:
    """Identity resolved from a verified bearer token."""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def status_change_subject(title: str, to_status: str) -> str:
    return f'Issue "{title}" status updated: {to_status}'


def status_change_body(from_status: str, to_status: str) -> str:
    return f"<p>Status changed from <b>{from_status}</b> to <b>{to_status}</b>.</p>"


class IssueService:
    """
    Orchestrates issue operations over the repositories.

    Usage:
        service = IssueService(IssueRepository(session), UserRepository(session), notifier, storage)
        issue = service.create(principal, IssueCreate(title="Pothole", description="Deep"), [])
    """

    def __init__(
        self,
        issue_repo: IssueRepository,
        user_repo: UserRepository,
        notifier: Notifier,
        image_storage: ImageStorage,
        max_image_bytes: int = 5 * 1024 * 1024,
    ):
        self.issue_repo = issue_repo
        self.user_repo = user_repo
        self.notifier = notifier
        self.image_storage = image_storage
        self.max_image_bytes = max_image_bytes

    # =========================================================================
    # Reads
    # =========================================================================

    def search(self, query: IssueQuery) -> dict:
        issues, total = self.issue_repo.search(query.to_filters(), offset=query.offset, limit=query.limit)
        return {
            "items": issues,
            "page": query.page,
            "limit": query.limit,
            "total": total,
            "page_count": math.ceil(total / query.limit),
        }

    def get(self, issue_id: int) -> Issue:
        issue = self.issue_repo.get_detail(issue_id)
        if issue is None:
            raise NotFound("Issue not found")
        return issue

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, caller: Principal, draft: IssueCreate, images: list[ImageUpload] | None = None) -> Issue:
        """
        Report a new issue. The reporter becomes its first watcher.

        Coordinates fall back to (0, 0) unless both lng and lat are given.
        """
        images = images or []
        validate_images(images, self.max_image_bytes)
        reporter = self._caller_user(caller)

        if draft.lng is not None and draft.lat is not None:
            longitude, latitude = draft.lng, draft.lat
        else:
            longitude, latitude = DEFAULT_COORDINATES

        issue = Issue(
            title=draft.title,
            description=draft.description,
            longitude=longitude,
            latitude=latitude,
            address=draft.address or "",
            reporter=reporter,
        )
        issue.watchers.append(reporter)
        self._attach_images(issue, images)

        self.issue_repo.add(issue)
        logger.info("issue_created", issue_id=issue.id, reporter_id=reporter.id, image_count=len(images))
        return issue

    def update(
        self,
        caller: Principal,
        issue_id: int,
        changes: IssueUpdate,
        images: list[ImageUpload] | None = None,
    ) -> Issue:
        """
        Apply a partial update. New images are appended; the coordinate pair is
        only replaced when both lng and lat are supplied.
        """
        issue = self._get_for_write(caller, issue_id)
        images = images or []
        validate_images(images, self.max_image_bytes)

        if changes.title is not None:
            issue.title = changes.title
        if changes.description is not None:
            issue.description = changes.description
        if changes.lng is not None and changes.lat is not None:
            issue.longitude, issue.latitude = changes.lng, changes.lat
        if changes.address is not None:
            issue.address = changes.address
        self._attach_images(issue, images)

        self.issue_repo.save(issue)
        logger.info("issue_updated", issue_id=issue.id, actor_id=caller.user_id)
        return issue

    def change_status(self, caller: Principal, issue_id: int, request: StatusUpdate) -> Issue:
        """
        Move an issue to a new status and tell its watchers.

        Setting the current status again is a no-op: no history entry and no
        email. Mail is sent after the commit and its failures are only logged.
        """
        issue = self.issue_repo.get_detail(issue_id)
        if issue is None:
            raise NotFound("Issue not found")
        if not caller.is_admin:
            raise Forbidden("Admin role required")

        to_status = request.status.value
        from_status = issue.status
        if from_status == to_status:
            return issue

        with LogContext(issue_id=issue.id, actor_id=caller.user_id):
            issue.status = to_status
            issue.history.append(
                IssueStatusChange(from_status=from_status, to_status=to_status, changed_by_id=caller.user_id)
            )
            self.issue_repo.save(issue)
            self.issue_repo.commit()
            logger.info("issue_status_changed", from_status=from_status, to_status=to_status)

            recipients = self.issue_repo.watcher_emails(issue)
            try:
                self.notifier.notify(
                    recipients,
                    status_change_subject(issue.title, to_status),
                    status_change_body(from_status, to_status),
                )
            except Exception as exc:
                logger.warning("notification_failed", error=str(exc), recipient_count=len(recipients))

        return issue

    def delete(self, caller: Principal, issue_id: int) -> None:
        issue = self._get_for_write(caller, issue_id)
        self.issue_repo.delete(issue)
        logger.info("issue_deleted", issue_id=issue_id, actor_id=caller.user_id)

    # =========================================================================
    # Watchers
    # =========================================================================

    def watch(self, caller: Principal, issue_id: int) -> Issue:
        issue = self.get(issue_id)
        user = self._caller_user(caller)
        if self.issue_repo.add_watcher(issue, user):
            logger.info("issue_watched", issue_id=issue.id, user_id=user.id)
        return issue

    def unwatch(self, caller: Principal, issue_id: int) -> Issue:
        issue = self.get(issue_id)
        if self.issue_repo.remove_watcher(issue, caller.user_id):
            logger.info("issue_unwatched", issue_id=issue.id, user_id=caller.user_id)
        return issue

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get_for_write(self, caller: Principal, issue_id: int) -> Issue:
        issue = self.issue_repo.get_detail(issue_id)
        if issue is None:
            raise NotFound("Issue not found")
        if not (issue.is_owned_by(caller.user_id) or caller.is_admin):
            raise Forbidden("Not allowed to modify this issue")
        return issue

    def _caller_user(self, caller: Principal) -> User:
        user = self.user_repo.get_by_id(caller.user_id)
        if user is None:
            raise Unauthenticated("User no longer exists")
        return user

    def _attach_images(self, issue: Issue, images: list[ImageUpload]) -> None:
        for upload in images:
            stored = self.image_storage.upload(upload)
            issue.add_image(stored.url, stored.storage_id)
