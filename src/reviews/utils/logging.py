"""Logging for the Reviews engine.

The standard library owns the handlers (console plus rotating files under
LOG_DIR), structlog owns the shape of each line. Production and staging
emit JSON lines; every other environment gets the rich console renderer.

Per-request fields live in structlog contextvars: the API opens a
`request_context` for every request and routes add the product or review
they work on with `bind_review_context`. Every line of a request carries
its request id and the product or review it concerns.
"""

import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from uuid import uuid4

import structlog

REQUEST_ID_HEADER = "X-Request-ID"

_LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
_JSON_ENVS = ("production", "staging")
_ROTATE_AT_BYTES = 10 * 1024 * 1024
_ROTATED_COPIES = 5

# Ledger calls (urllib3) and TestClient traffic (httpx) are noisy at DEBUG
_QUIET_LOGGERS = ("urllib3", "httpx", "asyncio")


def _current_env() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """Level for the current environment; LOG_LEVEL wins when set."""
    return os.getenv("LOG_LEVEL", _LEVELS_BY_ENV.get(_current_env(), "INFO")).upper()


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_ROTATE_AT_BYTES,
        backupCount=_ROTATED_COPIES,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def _handlers(level: str) -> list[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    handlers = [console]

    # LOG_DIR="" keeps output on the console only
    log_dir = os.getenv("LOG_DIR", "logs")
    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating_file(path / "calista_reviews.log", level))
        handlers.append(_rotating_file(path / "calista_reviews_error.log", logging.ERROR))
    return handlers


def _renderer(env: str):
    if env in _JSON_ENVS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
    )


def configure_logging() -> None:
    env = _current_env()
    level = get_log_level()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = _handlers(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            _renderer(env),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def request_context(request_id: str | None = None, **fields):
    """Scope `request_id` (generated when absent) and `fields` to one request's log lines."""
    request_id = request_id or uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **fields)
    try:
        yield request_id
    finally:
        structlog.contextvars.clear_contextvars()


def bind_review_context(**ids) -> None:
    """Add product/review ids to the current request's log lines. None values are skipped."""
    structlog.contextvars.bind_contextvars(**{key: str(value) for key, value in ids.items() if value is not None})
