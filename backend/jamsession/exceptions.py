"""
Jam Session Backend — Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for the failure cases of the API.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right HTTP status.
Who:   Raised by services and the auth dependency; caught by global handlers.

Exception Hierarchy:
    JamSessionError (base)
    ├── ValidationError       → 400 Bad Request (field errors in `details`)
    ├── NotFoundError         → 400 Bad Request (missing rows are client errors here)
    ├── AuthenticationError   → 401 Unauthorized
    ├── ForbiddenError        → 403 Forbidden
    └── DatabaseError         → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class JamSessionError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(JamSessionError):
    """
    Raised when client input breaks a rule the schema layer cannot express.

    What:    Unknown author id, duplicate e-mail, and similar business rules.
    HTTP:    400 Bad Request

    `errors` mirrors the shape of Pydantic's error list so that clients see
    one format for every validation failure:

        [{"loc": ["body", "email"], "msg": "...", "type": "value_error"}]
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
        location: str = "body",
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        if errors is None and field:
            errors = [{"loc": [location, field], "msg": message, "type": "value_error"}]
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors or []


class NotFoundError(JamSessionError):
    """
    Raised when a requested row does not exist.

    HTTP:    400 Bad Request

    The message names the resource and what the client tried to do with it,
    e.g. "The jam you are trying to delete doesn't exist in the db".
    """

    def __init__(
        self,
        resource: str = "resource",
        action: str = "retrieve",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The {resource} you are trying to {action} doesn't exist in the db"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class AuthenticationError(JamSessionError):
    """
    Raised when the bearer token is missing, malformed, expired or unsigned.

    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    def __init__(
        self,
        message: str = "Missing or invalid bearer token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(JamSessionError):
    """
    Raised when an authenticated caller may not touch the resource.

    When:    Deleting a jam whose author is somebody else.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(JamSessionError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the context is
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
