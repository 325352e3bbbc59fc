"""
API Handlers

Route handlers for the SafeTunes API.

Handlers follow the pattern:
- Parse HTTP requests
- Call service methods
- Format HTTP responses

All business logic is delegated to the service layer; errors are raised as
SafeTunesException subclasses and rendered by the error handler middleware.
"""

from safetunes.api.handlers import (
    discovery_handler,
    health_handler,
    library_handler,
    moderation_handler,
    profile_handler,
    request_handler,
)

__all__ = [
    "discovery_handler",
    "health_handler",
    "library_handler",
    "moderation_handler",
    "profile_handler",
    "request_handler",
]
