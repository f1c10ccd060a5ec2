"""
Security module for the Community Issues API.

Provides:
- Bearer token issuing/verification (JWT)
- Password hashing (bcrypt)
- Startup configuration validation
"""

from .passwords import hash_password, verify_password
from .tokens import InvalidToken, TokenClaims, TokenIssuer
from .validation import SecurityConfigError, validate_security_config

__all__ = [
    "InvalidToken",
    "TokenClaims",
    "TokenIssuer",
    "hash_password",
    "verify_password",
    "SecurityConfigError",
    "validate_security_config",
]
