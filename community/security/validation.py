"""
Security configuration validation.

Ensures critical security settings are properly configured
before the application starts.
"""

import os
import re
from dataclasses import dataclass

from community.config import WEAK_JWT_SECRETS
from community.logging import get_logger

logger = get_logger("security.validation")


class SecurityConfigError(Exception):
    """Raised when security configuration is invalid."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        message = "Security configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(message)


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_jwt_secret(secret: str) -> tuple[bool, str | None]:
    """
    Validate the token signing secret.

    Requirements:
    - At least 32 characters
    - Not a default/placeholder value
    - Contains letters or digits
    """
    if not secret:
        return False, "JWT_SECRET_KEY is not set"

    if secret.lower() in [v.lower() for v in WEAK_JWT_SECRETS]:
        return False, f"JWT_SECRET_KEY cannot be a default value like '{secret}'"

    if len(secret) < 32:
        return False, f"JWT_SECRET_KEY must be at least 32 characters (got {len(secret)})"

    if not re.search(r"[A-Za-z0-9]", secret):
        return False, "JWT_SECRET_KEY should contain a mix of letters and numbers"

    return True, None


def validate_cors_origins(origins: str) -> str | None:
    """Return a warning for permissive CORS settings, if any."""
    origin_list = [o.strip() for o in origins.split(",")]
    if "*" in origin_list:
        return "CORS allows all origins (*) - not recommended for production"
    if os.getenv("ENV") == "production" and any(
        host in origin for origin in origin_list for host in ("localhost", "127.0.0.1", "0.0.0.0")
    ):
        return "CORS includes localhost origins - verify this is intentional in production"
    return None


def validate_security_config(
    jwt_secret: str,
    cors_origins: str | None = None,
    strict: bool = False,
) -> ValidationResult:
    """
    Validate all security configuration.

    Raises:
        SecurityConfigError: On any error, or on warnings when strict=True
    """
    errors = []
    warnings = []

    valid, error = validate_jwt_secret(jwt_secret)
    if not valid and error:
        errors.append(error)

    if cors_origins:
        warning = validate_cors_origins(cors_origins)
        if warning:
            warnings.append(warning)

    for error in errors:
        logger.error("config_validation_error", error=error)
    for warning in warnings:
        logger.warning("config_validation_warning", warning=warning)

    if errors or (strict and warnings):
        raise SecurityConfigError(errors + (warnings if strict else []))

    return ValidationResult(valid=True, errors=errors, warnings=warnings)
