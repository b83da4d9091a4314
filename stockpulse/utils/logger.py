"""
StockPulse — Structured Logging Utility
structlog configuration plus per-request context binding, so every event
emitted while serving a ticker carries `ticker` and `route` without each
call site repeating them.
"""
import logging
import sys
from typing import Any

import structlog

from stockpulse.config.settings import get_settings

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("aiohttp.access", "uvicorn.access")


def _processors(debug: bool) -> list:
    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if debug:
        return shared + [structlog.dev.ConsoleRenderer()]
    return shared + [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def setup_logging() -> None:
    """Configure structured logging for the entire application."""
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=_processors(settings.debug),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_request_context(**values: Any) -> None:
    """Replace the request-scoped context (ticker, route, ...)."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def get_logger(name: str = None) -> structlog.BoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name or "stockpulse")
