"""
Community Issues API application.

Run with ``uvicorn backend.app.main:app``. Startup validates the security
configuration, connects to the database and fails fast when it is unreachable.
"""

import os
from typing import Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from community.config import get_settings
from community.db import db
from community.logging import RequestLoggingMiddleware, configure_logging, get_logger
from community.security import SecurityConfigError, validate_security_config

from .error_handlers import register_exception_handlers
from .middleware.request_id import RequestIDMiddleware
from .routers import auth as auth_router
from .routers import comments as comments_router
from .routers import issues as issues_router


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to limit request body size."""

    def __init__(self, app, max_size_mb: int = 25):
        super().__init__(app)
        self.max_size = max_size_mb * 1024 * 1024
        self.max_size_mb = max_size_mb

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_size:
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={
                    "detail": f"Maximum request size is {self.max_size_mb}MB",
                    "status_code": status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                },
            )
        return await call_next(request)


settings = get_settings()
configure_logging(level="DEBUG" if settings.debug else "INFO")
logger = get_logger("api")


def _is_production() -> bool:
    return os.getenv("ENV", "development").lower() in ("production", "prod")


def validate_security_on_startup() -> bool:
    """Validate security configuration before serving traffic."""
    try:
        validate_security_config(
            jwt_secret=settings.jwt_secret_key,
            cors_origins=settings.cors_allowed_origins,
            strict=settings.strict_security,
        )

        config_errors, config_warnings = settings.validate_production_config()
        for warning in config_warnings:
            logger.warning("config_warning", message=warning)
        if config_errors:
            raise SecurityConfigError(config_errors)

        logger.info("security_validation_passed")
        return True

    except SecurityConfigError as e:
        for error in e.errors:
            logger.error("security_config_error", error=error)
        raise


def prepare_database() -> None:
    """Connect, optionally create tables, and refuse to start if the database is unreachable."""
    db.initialize(settings.database_url)
    if settings.auto_create_tables:
        db.create_all_tables()
        logger.info("database_tables_created")

    health = db.health_check()
    if not health["healthy"]:
        logger.error("database_unreachable", error=health["error"])
        raise RuntimeError("Database unreachable. Check DATABASE_URL.")
    logger.info("database_initialized", latency_ms=health["latency_ms"])


OPENAPI_TAGS = [
    {"name": "auth", "description": "Registration, login and the current user"},
    {"name": "issues", "description": "Reporting, searching, updating and resolving civic issues"},
    {"name": "comments", "description": "Discussion threads on issues"},
    {"name": "health", "description": "Liveness and readiness probes"},
]


def create_app() -> FastAPI:
    api_prefix = f"{settings.api_prefix}/v1"

    app = FastAPI(
        title=settings.app_name,
        description="Report local problems, follow their progress and get notified when they are resolved.",
        version="1.0.0",
        openapi_tags=OPENAPI_TAGS,
        debug=settings.debug,
    )

    app.add_middleware(RequestSizeLimitMiddleware, max_size_mb=settings.max_request_size_mb)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Accept-Encoding", "Origin", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)

    # Added last so it runs first: the request id is bound before the start line is logged
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        logger.info("app_startup", app_name=settings.app_name)

        # Both DEBUG and a non-production ENV are required to skip security validation
        allow_security_bypass = settings.debug and not _is_production()
        try:
            validate_security_on_startup()
        except SecurityConfigError:
            if not allow_security_bypass:
                logger.error(
                    "security_validation_failed_fatal",
                    message="Set a strong JWT_SECRET_KEY or use ENV=development with DEBUG=true to bypass.",
                )
                raise
            logger.warning("security_validation_skipped")

        prepare_database()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("app_shutdown")
        db.reset()

    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/health/ready", tags=["health"])
    def readiness_check():
        """
        Readiness probe: 200 when the database answers, 503 otherwise.

        Infrastructure details stay out of the response.
        """
        if not db.health_check()["healthy"]:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "checks": {"database": False}},
            )
        return {"status": "ready", "checks": {"database": True}}

    # API is accessible at /api/v1/*
    app.include_router(auth_router.router, prefix=api_prefix)
    app.include_router(issues_router.router, prefix=api_prefix)
    app.include_router(comments_router.router, prefix=api_prefix)

    return app


app = create_app()
