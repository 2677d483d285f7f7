"""Error taxonomy and the handlers that render it as ``{"error": ...}`` bodies."""
from enum import Enum
from typing import Iterable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.logging_config import get_logger


logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Something went wrong. Please try again later."


class ValidationKind(str, Enum):
    """Kinds of request validation failure."""

    MISSING_FIELDS = "missing_fields"
    INVALID_ENUM = "invalid_enum"
    INVALID_ID = "invalid_id"
    NO_FIELDS = "no_fields"
    INVALID = "invalid"


class AuthKind(str, Enum):
    """Kinds of authentication failure."""

    MISSING_TOKEN = "missing_token"
    MALFORMED_HEADER = "malformed_header"
    MALFORMED = "malformed"
    EXPIRED = "expired"
    INVALID_CREDENTIALS = "invalid_credentials"


class AuthzKind(str, Enum):
    """Kinds of authorization failure."""

    NOT_OWNER = "not_owner"
    NOT_AUTHOR = "not_author"


class NotFoundKind(str, Enum):
    """Entities that can be missing."""

    KICK = "kick"
    COMMENT = "comment"
    ACCOUNT = "account"


class ConflictKind(str, Enum):
    """Uniqueness constraints that can be violated."""

    HANDLE_TAKEN = "handle_taken"
    EMAIL_TAKEN = "email_taken"


AUTH_MESSAGES = {
    AuthKind.MISSING_TOKEN: "No authentication token provided. Please sign in.",
    AuthKind.MALFORMED_HEADER: "Invalid authentication format. Please sign in again.",
    AuthKind.MALFORMED: "Invalid authentication token. Please sign in again.",
    AuthKind.EXPIRED: "Your session has expired. Please sign in again.",
    AuthKind.INVALID_CREDENTIALS: "Invalid credentials.",
}

AUTHZ_MESSAGES = {
    AuthzKind.NOT_OWNER: "Unauthorized: you do not own this kick",
    AuthzKind.NOT_AUTHOR: "Unauthorized: you are not the author of this comment",
}

NOT_FOUND_MESSAGES = {
    NotFoundKind.KICK: "Kick not found",
    NotFoundKind.COMMENT: "Comment not found",
    NotFoundKind.ACCOUNT: "User not found",
}

CONFLICT_MESSAGES = {
    ConflictKind.HANDLE_TAKEN: "Username already taken.",
    ConflictKind.EMAIL_TAKEN: "Email already registered.",
}


class AppError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, kind: Enum | None = None):
        super().__init__(message)
        self.message = message
        self.kind = kind


class ValidationError(AppError):
    """Missing or malformed input, detected before any mutation."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, kind: ValidationKind = ValidationKind.INVALID):
        super().__init__(message, kind)

    @classmethod
    def missing_fields(cls, fields: Iterable[str]) -> "ValidationError":
        names = ", ".join(fields)
        return cls(f"Missing required fields: {names}", ValidationKind.MISSING_FIELDS)


class AuthError(AppError):
    """Missing, malformed or expired token, or bad sign-in credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, kind: AuthKind):
        super().__init__(AUTH_MESSAGES[kind], kind)


class AuthzError(AppError):
    """Authenticated, but not the owner or author the operation requires."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, kind: AuthzKind):
        super().__init__(AUTHZ_MESSAGES[kind], kind)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, kind: NotFoundKind):
        super().__init__(NOT_FOUND_MESSAGES[kind], kind)


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, kind: ConflictKind):
        super().__init__(CONFLICT_MESSAGES[kind], kind)


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self):
        super().__init__(INTERNAL_ERROR_MESSAGE)


def format_validation_errors(errors: Iterable[dict]) -> str:
    """
    Summarize pydantic error dicts into one readable line.

    Example:
        >>> format_validation_errors([{"loc": ("body", "category"), "msg": "bad"}])
        'category: bad'
    """
    parts = []
    for error in errors:
        loc = [part for part in error.get("loc", ()) if isinstance(part, str) and part != "body"]
        field = ".".join(loc)
        message = error.get("msg", "Invalid value")
        parts.append(f"{field}: {message}" if field else message)
    return "; ".join(parts) or "Invalid request"


def is_enum_error(errors: Iterable[dict]) -> bool:
    return any(error.get("type") == "enum" for error in errors)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies and parameters as 400s."""
    errors = exc.errors()
    kind = ValidationKind.INVALID_ENUM if is_enum_error(errors) else ValidationKind.INVALID
    error = ValidationError(format_validation_errors(errors), kind)
    return await app_error_handler(request, error)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure in full and return a generic body."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the handlers that give every error body the same shape."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
