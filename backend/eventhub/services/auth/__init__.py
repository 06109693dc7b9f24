"""Authentication and authorization services.

Handles password hashing, session credentials, password reset tokens and
the per-request access guard.
"""

from .access_guard import AccessGuard
from .auth_service import AuthResult, AuthService
from .exceptions import (
    AuthError,
    ConflictError,
    ForbiddenError,
    InternalError,
    InvalidInputError,
    PasswordTooLongError,
    UnauthorizedError,
)
from .password_hasher import PasswordHasher
from .reset_token_store import ResetTokenStore
from .token_signer import SessionClaims, TokenSigner

__all__ = [
    "AccessGuard",
    "AuthError",
    "AuthResult",
    "AuthService",
    "ConflictError",
    "ForbiddenError",
    "InternalError",
    "InvalidInputError",
    "PasswordHasher",
    "PasswordTooLongError",
    "ResetTokenStore",
    "SessionClaims",
    "TokenSigner",
    "UnauthorizedError",
]
