"""Application exceptions.

Every error the API reports is an ``AppError`` carrying the HTTP status it maps
to. Handlers in ``src.main`` turn them into the response envelope.
"""

from fastapi import status


class AppError(Exception):
    """Base exception for errors reported to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Raised when a request is missing fields or carries malformed values."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class ConflictError(AppError):
    """Raised when a resource with the same identity already exists."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class UnauthenticatedError(AppError):
    """Raised for a missing, invalid or expired token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid authentication credentials"


class InvalidCredentialsError(UnauthenticatedError):
    """Raised when a sign-in password does not match."""

    default_message = "Invalid credentials"


class ForbiddenError(AppError):
    """Raised when the caller does not own the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Unauthorized"


class NotFoundError(AppError):
    """Raised when a resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalError(AppError):
    """Raised for unexpected store or token failures."""


class NotificationError(AppError):
    """Raised when the mail transport fails to deliver a message."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Failed to send email"
