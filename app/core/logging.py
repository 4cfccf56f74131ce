"""Logging configuration and setup for the application.

Configures structlog once per process. Development renders colored console
output, every other environment emits one JSON object per line so Cloud
Logging can index the event fields.
"""

import logging
import sys

import structlog

from app.core.config import (
    Environment,
    settings,
)


def configure_logging(level: str = settings.LOG_LEVEL, log_format: str = settings.LOG_FORMAT) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Minimum log level name
        log_format: "console" or "json"
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    use_json = log_format == "json" or settings.APP_ENV == Environment.PRODUCTION
    if use_json:
        renderer = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderer = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=shared_processors + renderer,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()

logger = structlog.get_logger("skillswap")
