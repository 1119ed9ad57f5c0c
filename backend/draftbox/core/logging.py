"""Structured logging for Draftbox built on structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from draftbox.core.config import settings

# Libraries that log every statement or connection at INFO/DEBUG
NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite")


def setup_logging(level: str | None = None, debug: bool | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level name; defaults to ``settings.log_level``.
        debug: Render colored console output instead of JSON; defaults to
            ``settings.debug``.
    """
    debug = settings.debug if debug is None else debug
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(log_level)

    # SQL echo is controlled by the engine
    if not debug:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, usually with ``__name__``."""
    return structlog.get_logger(name)
