"""Comments on issues."""

from community.exceptions import NotFound, ValidationError
from community.logging import get_logger
from community.models import Comment
from community.repositories import CommentRepository, IssueRepository

logger = get_logger("comments")


class CommentService:
    def __init__(self, comment_repo: CommentRepository, issue_repo: IssueRepository):
        self.comment_repo = comment_repo
        self.issue_repo = issue_repo

    def create(self, issue_id: int, author_id: int, text: str | None) -> Comment:
        """
        Add a comment. Empty text is rejected before the issue is looked up.

        Raises:
            ValidationError: Text is empty after trimming.
            NotFound: The issue does not exist.
        """
        text = (text or "").strip()
        if not text:
            raise ValidationError.for_field("text", "Comment text is required")
        if not self.issue_repo.exists(issue_id):
            raise NotFound("Issue not found")

        comment = self.comment_repo.create_comment(issue_id=issue_id, author_id=author_id, text=text)
        logger.info("comment_created", comment_id=comment.id, issue_id=issue_id, author_id=author_id)
        return comment

    def list(self, issue_id: int) -> list[Comment]:
        # An unknown issue simply has no comments
        return self.comment_repo.list_for_issue(issue_id)
