"""
Brainboard Backend: Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions, one per failure class a caller can see.
How:   Each exception carries a user-facing message, a stable error code and an
       optional context dict. The global handlers registered in main.py turn
       them into `{"error", "code", "request_id"}` JSON bodies with the
       status code stored on the class.

Exception Hierarchy:
    BrainboardError (base)                    → 500
    ├── InvalidInputError                     → 400 Bad Request
    │   └── DuplicateEmailError               → 400
    ├── UnauthenticatedError                  → 401 Unauthorized
    │   └── InvalidCredentialsError           → 401
    ├── ForbiddenError                        → 403 Forbidden
    ├── NotFoundError                         → 404 Not Found
    ├── DatabaseError                         → 500 Internal Server Error
    └── ObjectStorageError                    → 500 Internal Server Error

Security Note:
    `context` is logged server-side only. It never reaches the response body.
"""

from typing import Any, Dict, Optional


class BrainboardError(Exception):
    """
    Base exception for all Brainboard application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status the global handler responds with
        code:         Stable machine-readable error code
    """

    status_code: int = 500
    code: str = "internal"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidInputError(BrainboardError):
    """
    Raised when client input fails a business rule.

    When:   Malformed body, missing image_url on an image card, a kind change on
            update, an unknown permission string, an empty or oversized upload.
    HTTP:   400 Bad Request (request-model validation failures are mapped to
            the same status by main.py)
    """

    status_code = 400
    code = "invalid_input"

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


class DuplicateEmailError(InvalidInputError):
    """Signup with an email that already has an account."""

    code = "duplicate_email"

    def __init__(self, email: str):
        super().__init__(
            message="An account with this email already exists",
            field="email",
            context={"email": email},
        )


class UnauthenticatedError(BrainboardError):
    """
    Raised when a user-scoped route is called without a valid session token.

    HTTP:   401 Unauthorized
    """

    status_code = 401
    code = "unauthenticated"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(UnauthenticatedError):
    """Login with an unknown email or a wrong password. The two cases look identical."""

    code = "invalid_credentials"

    def __init__(self):
        super().__init__(message="Invalid email or password")


class ForbiddenError(BrainboardError):
    """
    Raised when the caller's effective permission is too low for the action.

    Also used for unknown or revoked share tokens, which resolve to no
    permission at all.
    HTTP:   403 Forbidden
    """

    status_code = 403
    code = "forbidden"

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BrainboardError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts that
    None into this exception so routes never inspect query results for status.
    HTTP:   404 Not Found
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id is not None:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(BrainboardError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the SQL error is
    logged server-side only.
    HTTP:   500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ObjectStorageError(BrainboardError):
    """
    Raised when putting or deleting a blob fails (S3 or the local volume).

    HTTP:   500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Object storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
