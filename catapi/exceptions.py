"""
Cat API — Custom Exception Hierarchy
======================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, auth dependencies and routes; caught by global handlers.

Exception Hierarchy:
    CatApiError (base)
    ├── ValidationError        → 400 Bad Request (client can fix)
    ├── AuthenticationError    → 401 Unauthorized (missing/invalid token)
    ├── ForbiddenError         → 403 Forbidden (owner/admin mismatch)
    ├── NotFoundError          → 404 Not Found
    ├── FileStorageError       → 500 Internal Server Error
    └── DatabaseError          → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class CatApiError(Exception):
    """
    Base exception for all Cat API application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "Something went wrong with the server",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatApiError):
    """
    Raised when client input fails validation.

    When:    Malformed coordinates, unsupported upload, missing required fields.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Invalid value: topRight",
            "request_id": "a1b2c3d4"
        }
    """

    status_code = 400
    error_code = "validation_error"

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


class AuthenticationError(CatApiError):
    """
    Raised when a protected route is called without a usable bearer token.

    When:    Header missing, not a Bearer scheme, bad signature, expired token.
    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(CatApiError):
    """
    Raised when an authenticated caller is not allowed to perform an action.

    When:    Caller is not the cat's owner, caller is not the fixed admin,
             login credentials do not match.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CatApiError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE on an unknown id, or listing an empty collection.
    HTTP:    404 Not Found

    The store returns None for missing rows (not an exception); services
    convert that into NotFoundError.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        message: str = "Not found",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(CatApiError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CatApiError):
    """
    Raised when store operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "Something went wrong with the server",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
