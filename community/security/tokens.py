"""
Bearer token issuing and verification.

The signing secret is handed to ``TokenIssuer`` once at startup; nothing here
reads settings on its own, so tests can build issuers with any secret.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt


class InvalidToken(Exception):
    """Token is missing, malformed, expired or signed with another key."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str


class TokenIssuer:
    """
    Signs and verifies JWT access tokens carrying a user id and role.

    Usage:
        issuer = TokenIssuer(secret, expires_minutes=60 * 24 * 30)
        token = issuer.issue(user.id, user.role)
        claims = issuer.verify(token)
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: int = 60 * 24 * 30):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, user_id: int, role: str, expires_minutes: int | None = None) -> str:
        """
        Create a signed token.

        Args:
            user_id: Subject of the token.
            role: Role claim checked by admin-only routes.
            expires_minutes: Optional override for the validity window.
        """
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=expires_minutes if expires_minutes is not None else self.expires_minutes
        )
        claims: Dict[str, Any] = {
            "sub": str(user_id),
            "role": role,
            "exp": expire,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str | None) -> TokenClaims:
        """
        Decode and validate a token.

        Raises:
            InvalidToken: For every failure; callers cannot tell them apart.
        """
        if not token:
            raise InvalidToken("Invalid token")
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidToken("Invalid token") from exc

        subject = payload.get("sub")
        role = payload.get("role")
        if not subject or not isinstance(role, str):
            raise InvalidToken("Invalid token")
        try:
            user_id = int(subject)
        except (TypeError, ValueError) as exc:
            raise InvalidToken("Invalid token") from exc
        return TokenClaims(user_id=user_id, role=role)
