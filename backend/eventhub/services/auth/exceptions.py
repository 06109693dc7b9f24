"""Authentication and authorization errors.

Each error carries the HTTP status the transport layer should answer with.
Messages are safe to show to the caller.
"""

from fastapi import status


class AuthError(Exception):
    """Base exception for credential and access failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class InvalidInputError(AuthError):
    """Malformed or too-short caller-supplied data."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class PasswordTooLongError(InvalidInputError):
    """Password exceeds what the hashing algorithm accepts."""

    default_message = "Password is too long"


class UnauthorizedError(AuthError):
    """Missing, invalid or expired credential, or failed login."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ForbiddenError(AuthError):
    """Valid credential without privilege for the targeted resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class ConflictError(AuthError):
    """Resource already exists (duplicate registration)."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InternalError(AuthError):
    """Unexpected failure; the message carries no internal detail."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
