"""
Structured logging configuration using structlog.

JSON lines when ``LOG_FORMAT=json``, coloured console output otherwise.
Logs go to stdout. Challenges, tokens and digests are only ever logged as
short prefixes.
"""

import logging
import sys

import structlog

from app.config import settings


def _log_level() -> int:
    return getattr(logging, settings.log_level.upper(), logging.INFO)


def setup_logging() -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once; later calls replace the configuration.
    """
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging (uvicorn, SQLAlchemy, slowapi) to stdout as well
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=_log_level(),
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str | None = None):
    """Return a structlog logger, optionally bound to a logger name."""
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger_name=name)
    return logger
