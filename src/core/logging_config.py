"""Structured logging configuration.

This module initializes structlog with a stable structured format.
Events are rendered as JSON and handed to the standard logging
hierarchy, so output level and destination stay under the control of
the embedding application.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    _configure_structlog()
    return structlog.get_logger(name)


def enable_console_logging(level: int = logging.INFO) -> None:
    """Send structured log lines to stderr at the given level.

    Args:
        level: Minimum standard logging level to emit.
    """
    root_logger = logging.getLogger()
    if not any(getattr(handler, "_local_history", False) for handler in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        setattr(handler, "_local_history", True)
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


def _configure_structlog() -> None:
    """Apply the shared processor chain once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True
