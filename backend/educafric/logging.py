"""
Structured logging for the documents service.

Logs are rendered as colored console lines in development and as JSON
everywhere else. Every module grabs its own logger:

    from educafric.logging import get_logger
    logger = get_logger(__name__)
    logger.info("master_sheet.generated", class_name="6ème A", pages=1)

The PDF renderers also accept a ``logger`` argument, so a caller can send
their diagnostics somewhere else (a request-bound logger, a test double)
without touching the rendering code.
"""

import logging
import sys
from typing import Any, Protocol

import structlog
from structlog.types import Processor

from educafric.config import Settings


class DocumentLogger(Protocol):
    """The subset of a structlog logger the renderers rely on."""

    def debug(self, event: str, **kw: Any) -> Any: ...

    def info(self, event: str, **kw: Any) -> Any: ...

    def warning(self, event: str, **kw: Any) -> Any: ...

    def error(self, event: str, **kw: Any) -> Any: ...


def setup_logging(settings: Settings) -> None:
    """Configure structlog (and stdlib logging underneath it).

    Called once from the application lifespan.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_development or settings.DEBUG:
        processors: list[Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Third-party noise
    for logger_name in ["uvicorn.access", "sqlalchemy", "asyncio", "aiosqlite"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for the given module name."""
    return structlog.get_logger(name)
