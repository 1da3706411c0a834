"""
NoteSync Backend — Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-facing messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses.

Exception Hierarchy:
    NoteSyncError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── LocatorError             → 403 Forbidden (bad or expired signed locator)
    ├── NotFoundError            → 404 Not Found
    ├── RecordStoreError         → 502 Bad Gateway
    └── BlobStoreError           → 502 Bad Gateway
        └── BlobNotFoundError    → 404 Not Found

Remote failures are not retried or classified further: a record store or blob
store failure propagates out of the triggering operation as one of the two
store errors.
"""

from typing import Any, Dict, Optional


class NoteSyncError(Exception):
    """
    Base exception for all NoteSync application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteSyncError):
    """Raised when client input fails validation (400)."""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(NoteSyncError):
    """Raised when a request carries no valid session (401)."""

    def __init__(
        self,
        message: str = "A valid session is required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LocatorError(NoteSyncError):
    """Raised when a signed blob locator is malformed, forged or expired (403)."""

    def __init__(
        self,
        message: str = "The image link is invalid or has expired",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NoteSyncError):
    """
    Raised when a requested resource does not exist (404).

    Example: deleting a note by id when the id is not in the session's list
    and no name was supplied to locate its blob.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RecordStoreError(NoteSyncError):
    """
    Raised when a record store query or mutation fails.

    Covers transport failures, non-2xx responses and GraphQL `errors`
    payloads alike. HTTP: 502 Bad Gateway.
    """

    def __init__(
        self,
        message: str = "The note service is unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BlobStoreError(NoteSyncError):
    """Raised when a blob put, locator lookup or removal fails (502)."""

    def __init__(
        self,
        message: str = "The image storage service failed. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BlobNotFoundError(BlobStoreError):
    """Raised when a locator is requested for a key with no stored object (404)."""

    def __init__(
        self,
        key: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["key"] = key
        super().__init__(message=f"No stored image for key '{key}'", context=ctx)
        self.key = key
