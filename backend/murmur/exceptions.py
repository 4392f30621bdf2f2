"""
Murmur Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions, one per failure kind the API reports.
How:   Each class carries a user-facing message, an optional context dict
       (logged, never returned), an HTTP status code and a machine-readable
       error code. Global handlers registered in main.py render them as JSON.
Who:   Raised by services and the token guard; caught by global handlers.

Exception Hierarchy:
    MurmurError (base)
    ├── InvalidInputError          → 400 Bad Request
    ├── UnauthorizedError          → 401 Unauthorized
    ├── ForbiddenError             → 403 Forbidden
    ├── NotFoundError              → 404 Not Found
    ├── ConflictError              → 409 Conflict
    ├── UnprocessableEntityError   → 422 Unprocessable Entity
    ├── DatabaseError              → 500 Internal Server Error
    └── StoreUnavailableError      → 503 Service Unavailable

    ConfigurationError is raised at startup only and is never served.
"""

from typing import Any, Dict, Optional


class MurmurError(Exception):
    """
    Base exception for all Murmur application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidInputError(MurmurError):
    """
    Raised when request fields are missing or malformed.

    Example response:
        {"error": "invalid_input", "message": "Username and password are required"}
    """

    status_code = 400
    error_code = "invalid_input"

    def __init__(
        self,
        message: str = "Invalid input",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(MurmurError):
    """No credentials were supplied, or login credentials did not match."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(MurmurError):
    """A token was supplied but its signature, expiry or payload is invalid."""

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MurmurError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None (or a zero rowcount) for missing rows; services
    convert that into this exception.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(MurmurError):
    """
    Raised when an insert violates a uniqueness rule held by the store.

    When: duplicate username on registration, duplicate follow edge.
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnprocessableEntityError(MurmurError):
    """Well-formed request whose content breaks a business rule (post length)."""

    status_code = 422
    error_code = "unprocessable_entity"

    def __init__(
        self,
        message: str = "Unprocessable entity",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DatabaseError(MurmurError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Constraint
        names, SQL text and driver errors go to the server log only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreUnavailableError(MurmurError):
    """
    Raised when a store round trip exceeds DB_TIMEOUT_SECONDS.

    HTTP:    503 Service Unavailable, with a Retry-After header.
    """

    status_code = 503
    error_code = "service_unavailable"

    def __init__(
        self,
        message: str = "The data store is not responding. Please try again shortly.",
        retry_after: int = 5,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class ConfigurationError(ValueError):
    """Startup configuration is missing or unsafe. The process must not serve."""
