"""
Domain errors raised by services and mapped to HTTP responses in
``backend.app.error_handlers``.
"""


class CommunityError(Exception):
    """Base class for errors the API reports to clients."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CommunityError):
    """Malformed or out-of-range input. Carries one entry per violated field."""

    default_message = "Validation error"

    def __init__(self, errors: list[dict[str, str]], message: str | None = None):
        self.errors = errors
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])


class Unauthenticated(CommunityError):
    default_message = "Not authenticated"


class Forbidden(CommunityError):
    default_message = "Forbidden"


class NotFound(CommunityError):
    default_message = "Not found"


class Conflict(CommunityError):
    """A unique field (e.g. email) is already taken."""

    default_message = "Conflict"


class InternalError(CommunityError):
    """Store or transport failure. The message is safe to show to clients."""

    default_message = "Internal server error"


__all__ = [
    "CommunityError",
    "ValidationError",
    "Unauthenticated",
    "Forbidden",
    "NotFound",
    "Conflict",
    "InternalError",
]
