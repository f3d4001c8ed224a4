"""Structured logging setup."""

import logging
import sys

import structlog

from catalog_cms.infrastructure.config import settings


def configure_logging() -> None:
    """Route structlog through stdlib logging as one JSON object per line.

    Debug events are suppressed in production whatever ``LOG_LEVEL``
    says.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    if settings.is_production:
        level = max(level, logging.INFO)

    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr, force=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
