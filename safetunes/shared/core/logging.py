"""
Logging Configuration

Structured logging setup using structlog.

Log Output:
===========
Development:
    2024-01-15 10:30:00 [info     ] Lyrics cache hit    track=yesterday artist=the beatles

Production (JSON):
    {"timestamp": "2024-01-15T10:30:00", "level": "info", "event": "Lyrics cache hit", ...}

Usage:
======
    from safetunes.shared.core.logging import logger, get_logger, log_context

    logger.info("Request approved", request_id=str(request.id), kind="album")
    logger.warning("Cache write failed", error=str(e))

    # Bind values for every log line of the current request / message
    log_context(request_id=request_id, owner_id=owner_id)
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import Processor

from safetunes.config.settings import settings

NOISY_LOGGERS = ("httpx", "httpcore", "botocore", "openai")


def setup_logging() -> None:
    """
    Configure structlog and the stdlib root logger.

    Development gets a colored console renderer; every other environment
    gets one JSON object per line. Called once on module import.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper()),
    )

    # Outbound clients log every request at INFO; keep them for DEBUG runs
    if not settings.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_development:
        processors: list[Processor] = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = shared_processors + [
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


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (e.g. "worker", "moderation")

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> None:
    """
    Bind key-value pairs to every subsequent log call in this context.

    Example:
        log_context(message_id=message.message_id, kind=message.body["kind"])
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


# Initialize logging on module import
setup_logging()

logger = get_logger("safetunes")
