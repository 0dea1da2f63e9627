"""Logging configuration for the application."""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TextIO

from app.config import get_settings

# Request context of the HTTP call being served, if any
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
request_path_var: ContextVar[str | None] = ContextVar("request_path", default=None)

LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(request_id)s %(request_path)s | "
    "%(name)s:%(lineno)d | %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that log every outbound or inbound request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class RequestContextFilter(logging.Filter):
    """Stamp log records with the id and path of the current request."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        record.request_path = request_path_var.get() or ""
        return True


class ServiceLogHandler(logging.StreamHandler):
    """Stream handler installed by setup_logging."""


class LevelColorFormatter(logging.Formatter):
    """Formatter that colors the level name for terminal output."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def formatMessage(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().formatMessage(record)

        # Only the rendered copy is colored; other handlers see the plain name
        plain = record.levelname
        record.levelname = f"{color}{plain:<8}{self.RESET}"
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = plain


def setup_logging(level: str | None = None, stream: TextIO | None = None) -> logging.Handler:
    """Configure root logging for the service.

    Installs a single stream handler carrying the request context. Calling
    this again replaces the handler it installed earlier and leaves handlers
    added by others (test harnesses, uvicorn) in place.

    Args:
        level: Log level name, defaults to the configured ``log_level``
        stream: Output stream, defaults to stdout

    Returns:
        The installed handler
    """
    level = (level or get_settings().log_level).upper()
    stream = stream or sys.stdout

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        if isinstance(handler, ServiceLogHandler):
            root_logger.removeHandler(handler)

    handler = ServiceLogHandler(stream)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())

    if stream.isatty():
        handler.setFormatter(LevelColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured with level: {level}")
    return handler


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


@contextmanager
def request_context(request_id: str, path: str | None = None) -> Iterator[str]:
    """Bind a request id and path to every record logged inside the block.

    The previous values are restored on exit, so nested or concurrent
    requests never leak their ids into each other.
    """
    id_token = request_id_var.set(request_id)
    path_token = request_path_var.set(path)
    try:
        yield request_id
    finally:
        request_path_var.reset(path_token)
        request_id_var.reset(id_token)


@contextmanager
def log_timing(logger: logging.Logger, operation: str, **context) -> Iterator[None]:
    """Log how long the wrapped block took.

    Failures are logged as well before the exception propagates.

    Args:
        logger: Logger to write to
        operation: Human readable operation name
        **context: Extra key=value pairs appended to the message
    """
    details = " ".join(f"{key}={value}" for key, value in context.items())
    suffix = f" ({details})" if details else ""
    start = time.perf_counter()
    try:
        yield
    except Exception:
        logger.warning(f"{operation} failed after {time.perf_counter() - start:.3f}s{suffix}")
        raise
    logger.info(f"{operation} took {time.perf_counter() - start:.3f}s{suffix}")
