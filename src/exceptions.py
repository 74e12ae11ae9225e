"""Service-level errors and the HTTP status each one maps to.

Every error carries a stable ``error`` string that is returned to the client
unchanged, plus an optional ``message`` with extra detail.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for errors raised by the account flows."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Server error"
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None):
        super().__init__(message or self.error)
        self.message = message


class DuplicateResource(ServiceError):
    """An account with the requested email already exists."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Email already exists"


class InvalidCredentials(ServiceError):
    """Login failed.

    Raised for both an unknown email and a wrong password so that callers
    cannot tell the two apart.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid credentials"


class Unauthenticated(ServiceError):
    """Missing, malformed, expired or orphaned bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Not authorized"
    headers = {"WWW-Authenticate": "Bearer"}


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "User not found"


class InternalFailure(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Server error"


class RequestTimeout(ServiceError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error = "Gateway Timeout"
