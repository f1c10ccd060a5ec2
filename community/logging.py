"""
Structured logging for the Community Issues API.

Everything logs through structlog. Development gets a readable console
renderer, other environments get one JSON object per line so log shippers
can index the ``request_id``, ``issue_id`` and ``actor_id`` keys that the
request middleware and the issue service bind.
"""

import logging
import os
import sys
import time
from collections.abc import Callable
from functools import lru_cache, wraps
from typing import Any, TypeVar

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

F = TypeVar("F", bound=Callable[..., Any])

SERVICE_NAME = "community_issues"

# Probe endpoints hit every few seconds by orchestrators
QUIET_PATHS = frozenset({"/health", "/health/ready"})


def _wants_console_output() -> bool:
    from .config import get_settings

    if get_settings().debug:
        return True
    return os.getenv("ENV", "development").lower() == "development"


def _tag_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def build_processors(console: bool) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _tag_service,
    ]
    if console:
        chain.append(structlog.dev.ConsoleRenderer(colors=False, exception_formatter=structlog.dev.plain_traceback))
    else:
        chain.extend([structlog.processors.format_exc_info, structlog.processors.JSONRenderer()])
    return chain


@lru_cache(maxsize=1)
def configure_logging(level: str = "INFO") -> None:
    """Set up stdlib and structlog once per process; later calls are no-ops."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)

    structlog.configure(
        processors=build_processors(console=_wants_console_output()),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = SERVICE_NAME) -> structlog.stdlib.BoundLogger:
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def bind_context(**values: Any) -> None:
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """
    Bind keys for the duration of a block.

        with LogContext(issue_id=issue.id, actor_id=caller.user_id):
            logger.info("issue_status_changed")

    Only the keys bound here are removed on exit, so an enclosing
    ``request_id`` survives.
    """

    def __init__(self, **values: Any):
        self.values = values

    def __enter__(self) -> "LogContext":
        bind_context(**self.values)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        structlog.contextvars.unbind_contextvars(*self.values)
        return False


def log_timing(operation: str, logger: structlog.stdlib.BoundLogger | None = None) -> Callable[[F], F]:
    """Log the duration of each call to the wrapped function, re-raising failures."""

    def decorator(func: F) -> F:
        op_logger = logger or get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                op_logger.error(
                    f"{operation}_failed",
                    elapsed_ms=_elapsed_ms(started),
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise
            op_logger.info(f"{operation}_done", elapsed_ms=_elapsed_ms(started))
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


class RequestLoggingMiddleware:
    """
    ASGI middleware writing ``request_started`` and ``request_complete`` lines.

    Health probes are logged at debug level. Completion lines are promoted to
    warning for 4xx and error for 5xx responses. Context bound during the
    request is cleared afterwards so it cannot leak into the next one.
    """

    def __init__(self, app):
        self.app = app
        self.logger = get_logger("community_issues.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        path = scope.get("path", "")
        quiet = path in QUIET_PATHS
        started = time.perf_counter()
        status_code = 500

        (self.logger.debug if quiet else self.logger.info)("request_started", method=method, path=path)

        async def capture_status(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        try:
            await self.app(scope, receive, capture_status)
        finally:
            if status_code >= 500:
                emit = self.logger.error
            elif status_code >= 400:
                emit = self.logger.warning
            elif quiet:
                emit = self.logger.debug
            else:
                emit = self.logger.info
            emit(
                "request_complete",
                method=method,
                path=path,
                status_code=status_code,
                elapsed_ms=_elapsed_ms(started),
            )
            clear_context()


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "LogContext",
    "log_timing",
    "RequestLoggingMiddleware",
]
