"""
Custom Exceptions

Application-specific exceptions with HTTP status codes and error codes.

Exception Hierarchy:
====================
    SafeTunesException (base)
       │
       ├── AuthenticationError (401)      ← Invalid or expired token
       ├── AuthorizationError (403)       ← Profile belongs to another account
       ├── NotFoundError (404)            ← Resource not found
       │      ├── RequestNotFoundError
       │      ├── KidProfileNotFoundError
       │      └── ReviewNotFoundError
       ├── ValidationError (400)          ← Invalid input data
       │      └── LyricsRequiredError     ← Review cache miss without lyrics
       ├── ConflictError (409)            ← State no longer matches expectations
       │      └── InvalidTransitionError  ← Request left the expected status
       ├── MissingReferenceError (422)    ← Catalog id never captured
       └── ServiceUnavailableError (503)
              └── ExternalServiceError
                     └── UpstreamError (502) ← AI reviewer / lyric provider failure

Usage:
======
    from safetunes.shared.core.exceptions import InvalidTransitionError

    raise InvalidTransitionError("song", request_id, expected="pending", actual="approved")
    # {"error": {"code": "INVALID_TRANSITION", "message": "...", "details": {...}}}

Exception Handling:
===================
    Exceptions are caught by the error handler middleware and converted to JSON:
    {
        "error": {
            "code": "NOT_FOUND",
            "message": "Song request with id 'abc-123' not found",
            "details": {}
        }
    }
"""

from typing import Any, Optional


class SafeTunesException(Exception):
    """
    Base exception for all SafeTunes application errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (default 500)
        error_code: Machine-readable error code
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dictionary with error details for JSON response
        """
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


# ═══════════════════════════════════════════════════════════════════════════════
# AUTHENTICATION & AUTHORIZATION ERRORS (401, 403)
# ═══════════════════════════════════════════════════════════════════════════════


class AuthenticationError(SafeTunesException):
    """Authentication failed error (401 Unauthorized)."""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTHENTICATION_ERROR",
            details=details,
        )


class AuthorizationError(SafeTunesException):
    """
    Authorization failed error (403 Forbidden).

    Raised when an account acts on a kid profile or request it does not own.
    """

    def __init__(
        self,
        message: str = "Access denied",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=403,
            error_code="AUTHORIZATION_ERROR",
            details=details,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# NOT FOUND ERRORS (404)
# ═══════════════════════════════════════════════════════════════════════════════


class NotFoundError(SafeTunesException):
    """
    Resource not found error (404 Not Found).

    Example:
        raise NotFoundError("Kid profile", profile_id)
        # Message: "Kid profile with id 'abc-123' not found"
    """

    def __init__(
        self,
        resource: str,
        resource_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class RequestNotFoundError(NotFoundError):
    """Song or album request not found."""

    def __init__(self, kind: str, request_id: str) -> None:
        super().__init__(resource=f"{kind.capitalize()} request", resource_id=request_id)


class KidProfileNotFoundError(NotFoundError):
    """Kid profile not found."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(resource="Kid profile", resource_id=profile_id)


class ReviewNotFoundError(NotFoundError):
    """Cached content review not found."""

    def __init__(self, review_id: str) -> None:
        super().__init__(resource="Content review", resource_id=review_id)


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION & CONFLICT ERRORS (400, 409, 422)
# ═══════════════════════════════════════════════════════════════════════════════


class ValidationError(SafeTunesException):
    """Validation error (400 Bad Request)."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[dict[str, Any]] = None,
        error_code: str = "VALIDATION_ERROR",
    ) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details,
        )


class LyricsRequiredError(ValidationError):
    """
    A review was requested for content that has no cached verdict and no
    lyrics were supplied. Not retryable: the caller has to obtain lyrics first.
    """

    def __init__(self, track_name: str, artist_name: str) -> None:
        super().__init__(
            message=f'Lyrics are required to review "{track_name}" by {artist_name}',
            details={"track_name": track_name, "artist_name": artist_name},
            error_code="LYRICS_REQUIRED",
        )


class ConflictError(SafeTunesException):
    """
    Resource conflict error (409 Conflict).

    Raised when an operation conflicts with the current stored state.
    """

    def __init__(
        self,
        message: str = "Resource conflict",
        details: Optional[dict[str, Any]] = None,
        error_code: str = "CONFLICT",
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_code=error_code,
            details=details,
        )


class InvalidTransitionError(ConflictError):
    """
    A request is no longer in the status the transition starts from.

    Either the caller acted on stale data or a concurrent transaction won
    the race. The caller must refetch the request and decide again.
    """

    def __init__(
        self,
        kind: str,
        request_id: str,
        expected: str,
        actual: Optional[str],
    ) -> None:
        super().__init__(
            message=(
                f"{kind.capitalize()} request '{request_id}' is {actual or 'unknown'}, "
                f"expected {expected}. Refresh and try again."
            ),
            details={"request_id": request_id, "expected": expected, "actual": actual},
            error_code="INVALID_TRANSITION",
        )


class MissingReferenceError(SafeTunesException):
    """
    A transition needs the external catalog id but the request never captured it.

    Example:
        raise MissingReferenceError("album", "Abbey Road")
        # Cannot approve album "Abbey Road" - missing Apple Music ID. Please re-request this album.
    """

    def __init__(self, kind: str, content_name: str) -> None:
        super().__init__(
            message=(
                f'Cannot approve {kind} "{content_name}" - missing Apple Music ID. '
                f"Please re-request this {kind}."
            ),
            status_code=422,
            error_code="MISSING_REFERENCE",
            details={"kind": kind, "content_name": content_name},
        )


# ═══════════════════════════════════════════════════════════════════════════════
# SERVICE ERRORS (502, 503)
# ═══════════════════════════════════════════════════════════════════════════════


class ServiceUnavailableError(SafeTunesException):
    """Service temporarily unavailable error (503)."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=503,
            error_code="SERVICE_UNAVAILABLE",
            details=details,
        )


class ExternalServiceError(ServiceUnavailableError):
    """External API failure."""

    def __init__(
        self,
        service_name: str,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        msg = message or f"{service_name} service error"
        extra_details = details or {}
        extra_details["service"] = service_name
        super().__init__(message=msg, details=extra_details)


class UpstreamError(ExternalServiceError):
    """
    The AI reviewer or lyric provider failed or returned a malformed payload.

    The message is what the parent sees; the reason goes into details.
    """

    USER_MESSAGE = "Could not analyze automatically; you may enter information manually."

    def __init__(self, service_name: str, reason: str) -> None:
        super().__init__(
            service_name=service_name,
            message=self.USER_MESSAGE,
            details={"reason": reason},
        )
        self.status_code = 502
        self.error_code = "UPSTREAM_FAILURE"
        self.reason = reason
