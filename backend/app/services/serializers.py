"""
ORM to response-dict conversion for the API layer.
"""

from community.models import Comment, Issue, User

from ..schemas import AuthResponse


def user_to_dict(user: User) -> dict:
    return {"id": user.id, "username": user.username, "email": user.email, "role": user.role}


def auth_response(user: User, token: str) -> AuthResponse:
    return AuthResponse(**user_to_dict(user), token=token)


def issue_to_dict(issue: Issue) -> dict:
    """Convert an Issue into the public JSON shape (GeoJSON-style location)."""
    return {
        "id": issue.id,
        "title": issue.title,
        "description": issue.description,
        "status": issue.status,
        "images": [{"url": image.url, "storage_id": image.storage_id} for image in issue.images],
        "location": {
            "type": "Point",
            "coordinates": list(issue.coordinates),
            "address": issue.address or "",
        },
        "created_by": issue.created_by_id,
        "assigned_to": issue.assigned_to_id,
        "watchers": [watcher.id for watcher in issue.watchers],
        "history": [
            {
                "from_status": entry.from_status,
                "to_status": entry.to_status,
                "changed_at": entry.changed_at,
                "changed_by": entry.changed_by_id,
            }
            for entry in issue.history
        ],
        "created_at": issue.created_at,
        "updated_at": issue.updated_at,
    }


def issue_detail_to_dict(issue: Issue) -> dict:
    data = issue_to_dict(issue)
    reporter = issue.reporter
    data["reporter"] = (
        {"id": reporter.id, "username": reporter.username, "email": reporter.email} if reporter else None
    )
    return data


def comment_to_dict(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "issue_id": comment.issue_id,
        "author_id": comment.author_id,
        "author_username": comment.author.username if comment.author else None,
        "text": comment.text,
        "created_at": comment.created_at,
    }
