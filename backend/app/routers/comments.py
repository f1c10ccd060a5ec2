"""
Comment endpoints, nested under an issue.
"""

from fastapi import APIRouter, Depends, status

from community.schemas import CommentCreate
from community.services import CommentService, Principal

from ..auth.dependencies import get_current_principal
from ..dependencies import get_comment_service
from ..schemas import CommentResponse
from ..services.serializers import comment_to_dict

router = APIRouter(prefix="/issues/{issue_id}/comments", tags=["comments"])


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    issue_id: int,
    request: CommentCreate,
    principal: Principal = Depends(get_current_principal),
    comment_service: CommentService = Depends(get_comment_service),
):
    comment = comment_service.create(issue_id, principal.user_id, request.text)
    return CommentResponse(**comment_to_dict(comment))


@router.get("", response_model=list[CommentResponse])
def list_comments(
    issue_id: int,
    comment_service: CommentService = Depends(get_comment_service),
):
    """Comments newest first, each with its author's username."""
    return [CommentResponse(**comment_to_dict(comment)) for comment in comment_service.list(issue_id)]
