"""Centralised logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from structlog import stdlib
from structlog.contextvars import (
    bind_contextvars,
    unbind_contextvars,
)

from .config import settings

_LOGGING_CONFIGURED = False


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = settings.log_level
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: int | str | None = None) -> None:
    """Initialise structlog with a JSON formatter and contextvars support."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=_resolve_level(level)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.stdlib.filter_by_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=stdlib.BoundLogger,
        logger_factory=stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str | None = None):
    """Return a structlog logger ensuring the configuration is ready."""

    configure_logging()
    return structlog.get_logger(name)


@contextmanager
def exchange_context(**values: Any) -> Iterator[None]:
    """Bind and automatically clean exchange-related context variables."""

    if not values:
        yield
        return
    configure_logging()
    bind_contextvars(**values)
    try:
        yield
    finally:
        unbind_contextvars(*values.keys())


__all__ = ["configure_logging", "exchange_context", "get_logger"]
