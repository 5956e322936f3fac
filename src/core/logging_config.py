"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
Log lines go to stderr so command output on stdout stays clean.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from core.constants import DEFAULT_LOG_LEVEL


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structlog processors and the minimum log level.

    Args:
        level: Level name such as ``INFO`` or ``DEBUG``.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
        logger_factory=_StderrLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Applies the default configuration on first use so SDK callers that
    never call ``configure_logging`` still get JSON events on stderr.

    Returns:
        A structlog logger bound to the module name.
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name, module=name)


class _StderrLoggerFactory:
    """Build print loggers on whatever ``sys.stderr`` is at call time."""

    def __call__(self, *args: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=sys.stderr)


def _level_number(level: str) -> int:
    level_number = logging.getLevelName(level.upper())
    if isinstance(level_number, int):
        return level_number
    return logging.INFO
