"""
Logging configuration module for structured logging.

This module configures the application's logging system using structlog.
It provides structured logging capabilities with JSON formatting for production
and human-readable console output for development.

The logging configuration includes:
- Timestamp formatting
- Log level inclusion and filtering
- JSON/Console output based on settings
- Logger caching
"""

import logging

import structlog

from src.core.config.settings import settings


def configure_logging(log_level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configures the application's logging system.

    This function sets up structlog with:
    1. ISO format timestamps
    2. Log level inclusion
    3. JSON formatting for production (when LOG_JSON=True)
    4. Console formatting for development
    5. Standard library logger factory and bound logger

    Args:
        log_level: Overrides settings.LOG_LEVEL when given.
        json_logs: Overrides settings.LOG_JSON when given.
    """
    level_name = (log_level or settings.LOG_LEVEL).upper()
    use_json = settings.LOG_JSON if json_logs is None else json_logs

    logging.basicConfig(format="%(message)s", level=getattr(logging, level_name, logging.INFO))

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()
