"""Authentication router (REST auth surface)."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from eventhub.database import get_db
from eventhub.dependencies.auth import get_auth_service, get_current_claims
from eventhub.rate_limiter import limiter
from eventhub.schemas.auth import (
    AuthResponse,
    RequestPasswordReset,
    ResetPassword,
    SuccessResponse,
    UserInfo,
    UserLogin,
    UserRegister,
)
from eventhub.services.auth import AuthResult, AuthService, SessionClaims, UnauthorizedError
from eventhub.services.repositories import UserRepository
from eventhub.services.security_audit_service import SecurityAuditService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(token=result.token, user=UserInfo.model_validate(result.user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register(
    request: Request,
    data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Register a new user and log them in."""
    ip_address, user_agent = SecurityAuditService.get_request_info(request)
    result = auth_service.register(
        data.first_name, data.last_name, data.email, data.password,
        ip_address=ip_address, user_agent=user_agent,
    )
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
@limiter.limit("10/minute")
def login(
    request: Request,
    data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Login and get a session token."""
    ip_address, user_agent = SecurityAuditService.get_request_info(request)
    result = auth_service.login(
        data.email, data.password, ip_address=ip_address, user_agent=user_agent
    )
    return _auth_response(result)


@router.post("/request-password-reset", response_model=SuccessResponse)
@limiter.limit("5/hour")
def request_password_reset(
    request: Request,
    data: RequestPasswordReset,
    auth_service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    """Request a password reset email.

    Always answers with success (don't reveal if email exists).
    """
    ip_address, user_agent = SecurityAuditService.get_request_info(request)
    success = auth_service.request_password_reset(
        data.email, ip_address=ip_address, user_agent=user_agent
    )
    return SuccessResponse(success=success)


@router.post("/reset-password", response_model=AuthResponse)
@limiter.limit("10/minute")
def reset_password(
    request: Request,
    data: ResetPassword,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Reset password with the token from the email and log in."""
    ip_address, user_agent = SecurityAuditService.get_request_info(request)
    result = auth_service.reset_password(
        data.token, data.new_password, ip_address=ip_address, user_agent=user_agent
    )
    return _auth_response(result)


@router.get("/me", response_model=UserInfo)
def get_me(
    claims: SessionClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
) -> UserInfo:
    """Get the current authenticated user's information."""
    user = UserRepository(db).find_by_id(claims.user_id)
    if user is None:
        # Valid signature for an account that no longer exists
        raise UnauthorizedError("Not authenticated")
    return UserInfo.model_validate(user)
