"""Structured logging setup using structlog with report correlation IDs."""

import logging
import sys
from contextvars import ContextVar
from typing import TextIO

import structlog
from structlog.types import EventDict, WrappedLogger

# Correlation ID for tracing one report request across concurrent fetches
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def add_correlation_id(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add correlation ID to log event if set."""
    correlation_id = correlation_id_var.get()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def _stderr_logger(*_args: object) -> structlog.PrintLogger:
    """Logger factory that looks up sys.stderr each time a logger is built."""
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(log_level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure structured logging for the application.

    Log lines go to stderr by default so rendered reports written to stdout
    stay clean.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream for log lines (default: sys.stderr)
    """
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", level=level, stream=stream or sys.stderr)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_correlation_id,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream) if stream else _stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation ID for current async context.

    Args:
        correlation_id: Report ID used to tie log lines together
    """
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str:
    """Get correlation ID from current async context.

    Returns:
        Current correlation ID or empty string if not set
    """
    return correlation_id_var.get()


def bind_subject(login: str) -> None:
    """Attach the account currently being processed to every log line."""
    structlog.contextvars.bind_contextvars(subject=login)


def clear_subject() -> None:
    """Drop the account binding set by bind_subject."""
    structlog.contextvars.unbind_contextvars("subject")
