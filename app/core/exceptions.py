"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    code: str = "InternalError"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        if code:
            self.code = code


class ValidationError(AppException):
    """Malformed or semantically invalid input."""

    code = "ValidationError"

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    code = "NotFound"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    code = "AuthenticationFailed"

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class UnauthorizedError(AppException):
    """Actor lacks permission for the requested action."""

    code = "Unauthorized"

    def __init__(self, detail: str = "You don't have permission to perform this action") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ConflictError(AppException):
    """Resource changed concurrently or would violate a uniqueness rule."""

    code = "Conflict"

    def __init__(self, detail: str = "The resource was modified by another request", code: str | None = None) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail, code=code)


class TransitionRejected(AppException):
    """A booking or dispute status change was refused by its state machine."""

    def __init__(self, reason: str, detail: str) -> None:
        status_code = (
            status.HTTP_403_FORBIDDEN
            if reason == "UnauthorizedActor"
            else status.HTTP_409_CONFLICT
        )
        self.reason = reason
        super().__init__(status_code=status_code, detail=detail, code=reason)


class RateLimitExceeded(AppException):
    """Rate limit exceeded exception."""

    code = "RateLimited"

    def __init__(self, detail: str = "Too many requests. Please try again later.") -> None:
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)
