"""
Application configuration using Pydantic settings.

Usage:
    from community.config import get_settings
    settings = get_settings()
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

WEAK_JWT_SECRETS = (
    "CHANGE_ME",
    "changeme",
    "secret",
    "your-secret-key",
    "jwt-secret",
    "supersecret",
    "development",
    "test",
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and .env file.

    Required for production:
        - JWT_SECRET_KEY (min 32 chars)
        - DATABASE_URL

    Optional integrations (silently disabled when unset):
        - EMAIL_HOST / EMAIL_PORT / EMAIL_USER / EMAIL_PASS for watcher notifications
        - CLOUDINARY_CLOUD_NAME / CLOUDINARY_API_KEY / CLOUDINARY_API_SECRET for image storage
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "Community Issues API"
    api_prefix: str = "/api"
    debug: bool = Field(default=False)

    # Database
    database_url: str = Field(default="sqlite:///community_issues.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")
    auto_create_tables: bool = Field(default=False, validation_alias="AUTO_CREATE_TABLES")

    # JWT / Authentication
    jwt_secret_key: str = Field(default="CHANGE_ME", validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )
    password_hash_rounds: int = Field(default=10, ge=4, le=31, validation_alias="PASSWORD_HASH_ROUNDS")
    strict_security: bool = Field(default=False, validation_alias="STRICT_SECURITY")

    # HTTP
    cors_allowed_origins: str = Field(default="http://localhost:5173", validation_alias="CORS_ALLOWED_ORIGINS")
    max_request_size_mb: int = Field(default=25, validation_alias="MAX_REQUEST_SIZE_MB")

    # Outbound mail (watcher notifications)
    email_host: Optional[str] = Field(default=None, validation_alias="EMAIL_HOST")
    email_port: Optional[int] = Field(default=None, validation_alias="EMAIL_PORT")
    email_user: Optional[str] = Field(default=None, validation_alias="EMAIL_USER")
    email_password: Optional[str] = Field(default=None, validation_alias="EMAIL_PASS")
    email_from: str = Field(default="no-reply@example.com", validation_alias="EMAIL_FROM")
    email_use_tls: bool = Field(default=True, validation_alias="EMAIL_USE_TLS")
    email_timeout_seconds: float = Field(default=10.0, validation_alias="EMAIL_TIMEOUT_SECONDS")

    # Image storage
    cloudinary_cloud_name: Optional[str] = Field(default=None, validation_alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: Optional[str] = Field(default=None, validation_alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: Optional[str] = Field(default=None, validation_alias="CLOUDINARY_API_SECRET")
    cloudinary_folder: str = Field(default="community-issues", validation_alias="CLOUDINARY_FOLDER")
    max_image_size_mb: int = Field(default=5, validation_alias="MAX_IMAGE_SIZE_MB")

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Validate JWT secret - warns in dev, errors in production."""
        import os
        import warnings

        env = os.getenv("ENV", "development")
        is_production = env.lower() in ("production", "prod")

        is_weak = v.lower() in [s.lower() for s in WEAK_JWT_SECRETS]
        is_too_short = len(v) < 32

        if is_production:
            if is_weak:
                raise ValueError(
                    f"JWT_SECRET_KEY cannot be a default value ('{v}') in production. "
                    "Generate a secure key with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
                )
            if is_too_short:
                raise ValueError(
                    f"JWT_SECRET_KEY must be at least 32 characters in production (got {len(v)})."
                )
        elif is_weak:
            warnings.warn(
                f"JWT_SECRET_KEY is set to a default value ('{v}'). "
                "This is insecure - set a proper key for production.",
                UserWarning,
                stacklevel=2,
            )

        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def email_configured(self) -> bool:
        return all((self.email_host, self.email_port, self.email_user, self.email_password))

    @property
    def cloudinary_configured(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret)

    def validate_production_config(self) -> tuple[List[str], List[str]]:
        """
        Validate configuration for production deployment.

        Returns:
            Tuple of (errors, warnings) - errors are fatal, warnings are advisory
        """
        errors = []
        warnings = []

        if self.jwt_secret_key == "CHANGE_ME":
            errors.append("JWT_SECRET_KEY must be set for production")
        elif len(self.jwt_secret_key) < 32:
            errors.append("JWT_SECRET_KEY must be at least 32 characters")

        if not self.email_configured:
            warnings.append("EMAIL_* not set - status change notifications are disabled.")
        if not self.cloudinary_configured:
            warnings.append(
                "CLOUDINARY_* not set - uploaded images are accepted but not stored."
            )

        if self.strict_security and "localhost" in self.cors_allowed_origins:
            errors.append("CORS should not allow localhost in strict security mode")

        return errors, warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
