"""Authentication dependencies for routes."""

from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from eventhub.config import settings
from eventhub.database import get_db
from eventhub.services.auth import AccessGuard, AuthService, SessionClaims, TokenSigner
from eventhub.services.email_service import EmailService, MessageSender

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_token_signer() -> TokenSigner:
    """Process-wide signer built from the configured secret."""
    return TokenSigner.from_settings(settings)


def get_message_sender() -> MessageSender:
    return EmailService(settings)


def get_auth_service(
    db: Session = Depends(get_db),
    message_sender: MessageSender = Depends(get_message_sender),
    signer: TokenSigner = Depends(get_token_signer),
) -> AuthService:
    return AuthService(db, message_sender, settings, signer=signer)


def get_access_guard(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    signer: TokenSigner = Depends(get_token_signer),
) -> AccessGuard:
    """
    Derive the caller's access guard from the bearer token, if any.

    A missing or invalid token yields an anonymous guard rather than an
    error; routes decide whether anonymity is acceptable.

    Usage:
        @router.get("/events")
        def list_events(guard: AccessGuard = Depends(get_access_guard)):
            if guard.is_admin: ...
    """
    if not credentials:
        return AccessGuard.anonymous()
    return AccessGuard.from_token(credentials.credentials, signer)


def get_current_claims(guard: AccessGuard = Depends(get_access_guard)) -> SessionClaims:
    """Require a valid credential.

    Raises:
        UnauthorizedError: If no valid credential was presented.
    """
    return guard.require_authenticated()
