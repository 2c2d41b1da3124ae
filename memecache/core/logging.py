"""Structured logging setup built on structlog.

Importing this module routes structlog through stdlib ``logging`` with level
filtering. Code that embeds the cache without calling :func:`setup_logging`
therefore follows its own stdlib logging configuration, and DEBUG hit/miss
lines stay silent under the stdlib default of WARNING. Applications call
:func:`setup_logging` once at startup to pick the level, renderer and stream.
"""

import logging
import sys
from typing import TextIO

import structlog
from structlog.types import EventDict, WrappedLogger


def _uppercase_level(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def configure_default_logging() -> None:
    """Send structlog events to stdlib logging without touching its handlers."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def setup_logging(log_level: str = "INFO", log_format: str = "json", stream: TextIO = sys.stdout) -> None:
    """Configure stdlib logging and structlog.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR).
        log_format: 'json' for machine-readable output, anything else for
            the console renderer.
        stream: Where log lines are written.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=stream, level=level)

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _uppercase_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, typically with ``__name__``."""
    return structlog.get_logger(name)


if not structlog.is_configured():
    configure_default_logging()
