"""
Domain exceptions and their FastAPI exception handlers

Exception                 Status  Code
------------------------  ------  ---------------------
InvalidIdentifierError    400     INVALID_IDENTIFIER
InvalidDateError          400     INVALID_DATE
InvalidArgumentError      400     INVALID_ARGUMENT
UnauthenticatedError      401     UNAUTHENTICATED
ForbiddenError            403     FORBIDDEN
NotFoundError             404     NOT_FOUND
AlreadyExistsError        409     ALREADY_EXISTS
(anything else)           500     INTERNAL_ERROR

Repositories raise these, handlers let them propagate, and the handlers below
render exactly one response per failure.
"""

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tracker.core.config import settings
from tracker.core.logger import get_logger

logger = get_logger(__name__)


class TrackerError(Exception):
    """
    Base exception for the tracker API.

    Carries the HTTP status it maps to and a machine-readable code.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "TRACKER_ERROR"

    def __init__(self, message: str, headers: dict[str, str] | None = None):
        super().__init__(message)
        self.message = message
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class InvalidIdentifierError(TrackerError):
    """Raised when a path id/number is not a valid integer."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_IDENTIFIER"

    def __init__(self, message: str = "Invalid id"):
        super().__init__(message)


class InvalidDateError(TrackerError):
    """Raised when a date field is not YYYY-MM-DD."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_DATE"

    def __init__(self, field: str):
        super().__init__("Date format is invalid (yyyy-MM-dd)")
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "field": self.field}


class InvalidArgumentError(TrackerError):
    """Raised when a repository rejects a field value (e.g. an unknown status)."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_ARGUMENT"


class UnauthenticatedError(TrackerError):
    """Raised when the credential is missing or malformed."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"

    def __init__(self, message: str):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(TrackerError):
    """Raised when the credential does not own the requested path."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, message: str = "You are not authorized to access this resource"):
        super().__init__(message)


class NotFoundError(TrackerError):
    """Raised when an entity is absent from the caller's scope."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class AlreadyExistsError(TrackerError):
    """Raised when a unique entity (user name/email) is already taken."""

    status_code = status.HTTP_409_CONFLICT
    code = "ALREADY_EXISTS"

    def __init__(self, resource: str):
        super().__init__(f"{resource} already exists")
        self.resource = resource


#
# Exception Handlers
#


async def tracker_exception_handler(request: Request, exc: TrackerError) -> JSONResponse:
    """Convert a TrackerError into its JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Render routing errors (unknown path, method not allowed) in the tracker error shape.

    Reserved first segments always answer 404, whatever the method.
    """
    first_segment = request.url.path.lstrip("/").split("/", 1)[0]
    if first_segment in settings.RESERVED_PATH_SEGMENTS and exc.status_code in (
        status.HTTP_404_NOT_FOUND,
        status.HTTP_405_METHOD_NOT_ALLOWED,
    ):
        return await tracker_exception_handler(request, NotFoundError("Route"))

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": "HTTP_ERROR"},
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Convert request validation errors to 400 responses.

    Path parameter failures collapse to a generic invalid-id error; body failures
    list one message per offending field.
    """
    errors = exc.errors()

    if any(error.get("loc", ("",))[0] == "path" for error in errors):
        return await tracker_exception_handler(request, InvalidIdentifierError())

    field_errors = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field_errors.append(
            {
                "field": ".".join(loc) or "body",
                "message": error.get("msg", "is invalid"),
            }
        )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Validation error",
            "code": "MALFORMED_INPUT",
            "errors": field_errors,
        },
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {str(exc)}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        },
    )
