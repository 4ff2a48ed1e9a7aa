"""
Structured Logging
==================

structlog on top of the standard logging module: JSON lines in
production, colored console output elsewhere.

Request-scoped values (request id, route) are bound once through
``bind_request_context`` and attached to every event logged while the
request is handled, including events from the search pipeline.
"""

import logging
import sys
from typing import Any

import structlog

from product_search.config.settings import get_settings


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """
    Configure structlog and the root logger.

    Args:
        level: Log level name (defaults to ``LOG_LEVEL``)
        json_output: Force JSON rendering on/off (defaults to production only)
    """
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if json_output is None:
        json_output = settings.is_production

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(**values: Any) -> None:
    """Attach values to every event logged in the current request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def log_query_error(component: str, operation: str, error: str, **context: Any) -> None:
    """Log a failed datastore operation with its component/operation tag."""
    get_logger(component).error(
        "Query failed",
        component=component,
        operation=operation,
        error=error,
        **context,
    )
