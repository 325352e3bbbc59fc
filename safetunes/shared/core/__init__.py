"""
Core Module

Provides core functionality shared across the API and the worker:
- Structured logging
- Custom exceptions

Usage:
======
    from safetunes.shared.core.logging import logger, get_logger
    from safetunes.shared.core.exceptions import SafeTunesException, NotFoundError

    logger.info("Starting operation", owner_id=owner_id)
"""

from safetunes.shared.core.logging import (
    logger,
    get_logger,
    log_context,
    clear_log_context,
)
from safetunes.shared.core.exceptions import (
    SafeTunesException,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    RequestNotFoundError,
    KidProfileNotFoundError,
    ReviewNotFoundError,
    ValidationError,
    LyricsRequiredError,
    ConflictError,
    InvalidTransitionError,
    MissingReferenceError,
    ServiceUnavailableError,
    ExternalServiceError,
    UpstreamError,
)

__all__ = [
    # Logging
    "logger",
    "get_logger",
    "log_context",
    "clear_log_context",
    # Exceptions
    "SafeTunesException",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RequestNotFoundError",
    "KidProfileNotFoundError",
    "ReviewNotFoundError",
    "ValidationError",
    "LyricsRequiredError",
    "ConflictError",
    "InvalidTransitionError",
    "MissingReferenceError",
    "ServiceUnavailableError",
    "ExternalServiceError",
    "UpstreamError",
]
