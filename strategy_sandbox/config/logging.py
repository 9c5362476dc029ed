"""
Structured logging setup.

All modules obtain loggers with ``structlog.get_logger(__name__)`` and log
event names with key/value context, e.g.
``logger.info("simulation_completed", months=12, seed=42)``.
"""

import logging
import sys
from typing import Optional

import structlog

from .settings import LoggingConfig


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Configure structlog rendering and the level filter."""
    config = config or LoggingConfig()
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False
    )
