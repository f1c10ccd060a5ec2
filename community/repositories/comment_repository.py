"""Comment repository."""

from sqlalchemy.orm import joinedload

from community.models import Comment

from .base import BaseRepository


class CommentRepository(BaseRepository[Comment]):
    """Repository for comments on issues."""

    model = Comment

    def create_comment(self, issue_id: int, author_id: int, text: str) -> Comment:
        return self.add(Comment(issue_id=issue_id, author_id=author_id, text=text))

    def list_for_issue(self, issue_id: int) -> list[Comment]:
        """Newest first, with authors loaded in the same query."""
        return (
            self.session.query(Comment)
            .options(joinedload(Comment.author))
            .filter(Comment.issue_id == issue_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .all()
        )
