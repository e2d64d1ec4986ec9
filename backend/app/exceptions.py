"""
RedSocial Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions, one per error kind.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, the authentication gate and middleware.

Exception Hierarchy:
    RedSocialError (base)           → 500
    ├── ValidationError             → 400 Bad Request (invalid input, e.g. short password)
    ├── UnauthorizedError           → 401 Unauthorized (bad credentials or token)
    ├── ForbiddenError              → 403 Forbidden (caller is not the resource owner)
    ├── NotFoundError               → 404 Not Found
    ├── ConflictError               → 409 Conflict (duplicate username/email/follow edge)
    ├── DatabaseError               → 500 Internal Server Error
    └── RateLimitExceededError      → 429 Too Many Requests

Every class exposes `kind`, the machine-readable code used both in the
response body (`error`) and in log lines.
"""

from typing import Any, Dict, Optional


class RedSocialError(Exception):
    """
    Base exception for all RedSocial application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only by 4xx handlers)
    """

    kind = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def to_body(self, request_id: str, include_details: bool = True) -> Dict[str, Any]:
        """The ErrorResponse payload: error kind, message, request ID and optional details."""
        body: Dict[str, Any] = {"error": self.kind, "message": self.message, "request_id": request_id}
        if include_details and self.context:
            body["details"] = self.context
        return body


class ValidationError(RedSocialError):
    """
    Raised when client input fails a business rule.

    When:    Password shorter than the minimum, rejected self-follow.
    HTTP:    400 Bad Request

    Schema-level problems (missing fields, malformed email) are rejected
    earlier by FastAPI with 422.
    """

    kind = "validation_error"

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


class NotFoundError(RedSocialError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that
    None into this exception.
    """

    kind = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)
        self.resource = resource


class ConflictError(RedSocialError):
    """
    Raised when a write would break a uniqueness rule.

    When:    Username or email already taken, follow edge already present.
    HTTP:    409 Conflict

    Raised both by the service pre-checks and when the database rejects
    a racing insert with an IntegrityError.
    """

    kind = "conflict"

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(RedSocialError):
    """
    Raised when the caller cannot be authenticated.

    When:    Wrong password, missing/invalid/expired bearer token,
             unknown token subject, wrong API gate secret.
    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    kind = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(RedSocialError):
    """
    Raised when an authenticated caller acts on a resource it does not own.

    When:    Following on behalf of another user, editing someone else's
             publication, commenting as another user.
    HTTP:    403 Forbidden
    """

    kind = "forbidden"

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(RedSocialError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic.
        Detailed error info (SQL, constraint names) is logged server-side only.
    """

    kind = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(RedSocialError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    Response includes:
        - retry_after: Seconds until the rate limit window resets
        - Retry-After header for HTTP-compliant clients
    """

    kind = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
