"""Structured logging for SDK calls.

Uses structlog for structured logging with JSON or console output.
Every entry logged while a client call is in flight carries the call's
invocation_id, service and operation, so the retries, signing and
parsing of one call can be correlated across sync and async code.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

import structlog

# Empty outside of a client call
_invocation_id: ContextVar[str] = ContextVar("invocation_id", default="")

# Third-party loggers that echo every request at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore")


def current_invocation_id() -> str:
    """Invocation ID of the call in flight, or ``""``."""
    return _invocation_id.get()


@contextmanager
def invocation(service: str, operation: str) -> Iterator[str]:
    """Scope one client call: fresh invocation ID plus service/operation context.

    Works across ``await`` points since both the ID and structlog's
    bound context live in context vars.
    """
    iid = uuid.uuid4().hex
    token = _invocation_id.set(iid)
    try:
        with structlog.contextvars.bound_contextvars(service=service, operation=operation):
            yield iid
    finally:
        _invocation_id.reset(token)


def _add_invocation_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: tag entries emitted during a client call."""
    iid = _invocation_id.get()
    if iid:
        event_dict.setdefault("invocation_id", iid)
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: str = "json",
) -> None:
    """Configure structured logging for SDK consumers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for machine-readable output, "console" for humans.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        _add_invocation_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )
    if log_level > logging.DEBUG:
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
