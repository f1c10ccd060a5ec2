"""
Authentication dependencies for FastAPI routes.

The bearer token alone identifies the caller: its subject and role claims
become a ``Principal`` without a database lookup.
"""

from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from community.config import get_settings
from community.constants import UserRole
from community.exceptions import Forbidden, Unauthenticated
from community.security import InvalidToken, TokenIssuer
from community.services import Principal

# auto_error=False so a missing header maps to our 401 body instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Process-wide token issuer built once from settings."""
    settings = get_settings()
    return TokenIssuer(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.access_token_expire_minutes,
    )


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Principal:
    """
    Resolve the caller from ``Authorization: Bearer <token>``.

    Raises:
        Unauthenticated: Header absent, wrong scheme, or token rejected.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated("Not authenticated")
    try:
        claims = issuer.verify(credentials.credentials)
    except InvalidToken:
        raise Unauthenticated("Invalid token") from None
    return Principal(user_id=claims.user_id, role=claims.role)


def require_role(role: UserRole):
    """Build a dependency that only lets callers with ``role`` through."""

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role != role.value:
            raise Forbidden(f"{role.value.capitalize()} role required")
        return principal

    return dependency


require_admin = require_role(UserRole.ADMIN)
