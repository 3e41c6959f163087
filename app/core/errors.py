"""Application errors.

Services raise these; ``app.main`` renders them as JSON with the matching
HTTP status. ``details`` carries the upstream (Supabase) message when there
is one.
"""

from enum import Enum


class ErrorCode(str, Enum):
    E_UNAUTHORIZED = "E_UNAUTHORIZED"
    E_FORBIDDEN = "E_FORBIDDEN"
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_NOT_FOUND = "E_NOT_FOUND"
    E_CONFLICT = "E_CONFLICT"
    E_UPSTREAM = "E_UPSTREAM"


ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    ErrorCode.E_UNAUTHORIZED: 401,
    ErrorCode.E_FORBIDDEN: 403,
    ErrorCode.E_INVALID_REQUEST: 400,
    ErrorCode.E_NOT_FOUND: 404,
    ErrorCode.E_CONFLICT: 409,
    ErrorCode.E_UPSTREAM: 500,
}


class AppError(Exception):
    """Base class for every error surfaced to API callers."""

    code = ErrorCode.E_UPSTREAM
    default_message = "Unexpected error."

    def __init__(self, message: str | None = None, details: str | None = None):
        self.message = message or self.default_message
        self.details = details
        self.status_code = ERROR_CODE_TO_STATUS[self.code]
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"detail": self.message, "code": self.code.value}
        if self.details:
            body["details"] = self.details
        return body


class Unauthorized(AppError):
    code = ErrorCode.E_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(AppError):
    code = ErrorCode.E_FORBIDDEN
    default_message = "Forbidden"


class InvalidRequest(AppError):
    code = ErrorCode.E_INVALID_REQUEST
    default_message = "Invalid request."


class NotFound(AppError):
    code = ErrorCode.E_NOT_FOUND
    default_message = "Not found."


class Conflict(AppError):
    code = ErrorCode.E_CONFLICT
    default_message = "Already exists."


class UpstreamFailure(AppError):
    """A Supabase call failed. Never retried here."""

    code = ErrorCode.E_UPSTREAM
    default_message = "Backend request failed."


def upstream_message(exc: Exception) -> str:
    """Best human readable text of a supabase / postgrest exception."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__
