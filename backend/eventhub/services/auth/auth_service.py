"""Registration, login and password reset use cases."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from urllib.parse import urlencode

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventhub.config import Settings
from eventhub.config import settings as default_settings
from eventhub.models.user import User
from eventhub.services.auth.exceptions import (
    ConflictError,
    InternalError,
    InvalidInputError,
    UnauthorizedError,
)
from eventhub.services.auth.password_hasher import PasswordHasher
from eventhub.services.auth.reset_token_store import ResetTokenStore
from eventhub.services.auth.token_signer import TokenSigner
from eventhub.services.email_service import MessageSender
from eventhub.services.repositories import DuplicateError, NotFoundError, UserRepository
from eventhub.services.security_audit_service import SecurityAuditService, SecurityEventType

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INVALID_RESET_TOKEN_MESSAGE = "Invalid or expired reset token"


@dataclass(frozen=True)
class AuthResult:
    """A freshly issued credential and the user it was issued for."""

    token: str
    user: User


class AuthService:
    """Orchestrates the credential use cases.

    Owns every write to credential state. One instance serves one request:
    it shares the request's database session with its repository and reset
    token store, and commits at the end of each use case.
    """

    def __init__(
        self,
        db: Session,
        message_sender: MessageSender,
        settings: Settings = default_settings,
        *,
        hasher: PasswordHasher | None = None,
        signer: TokenSigner | None = None,
        users: UserRepository | None = None,
        reset_tokens: ResetTokenStore | None = None,
    ) -> None:
        self._db = db
        self._sender = message_sender
        self._settings = settings
        self._hasher = hasher or PasswordHasher(rounds=settings.bcrypt_rounds)
        self._signer = signer or TokenSigner.from_settings(settings)
        self._users = users or UserRepository(db)
        self._reset_tokens = reset_tokens or ResetTokenStore(
            db,
            expires_delta=timedelta(minutes=settings.password_reset_token_expire_minutes),
        )

    def _issue(self, user: User) -> AuthResult:
        token = self._signer.issue(user.id, user.email, user.is_admin)
        return AuthResult(token=token, user=user)

    def _internal_error(self, action: str) -> InternalError:
        logger.exception(f"{action} failed")
        self._rollback()
        return InternalError()

    def _rollback(self) -> None:
        try:
            self._db.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed")

    def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """Create an account and log it in."""
        if not (first_name and last_name and email and password):
            raise InvalidInputError("Missing required fields")

        try:
            if self._users.find_by_email(email) is not None:
                raise ConflictError("User with this email already exists")

            user = self._users.insert(
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_hash=self._hasher.hash(password),
            )
            SecurityAuditService.log_event(
                self._db, SecurityEventType.USER_REGISTERED, user_id=user.id,
                ip_address=ip_address, user_agent=user_agent,
            )
            self._db.commit()
        except DuplicateError as e:
            # Lost a race with a concurrent registration for the same email
            raise ConflictError("User with this email already exists") from e
        except SQLAlchemyError as e:
            raise self._internal_error("Registration") from e

        logger.info(f"User registered: {user.id}")
        return self._issue(user)

    def login(
        self,
        email: str,
        password: str,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """Check credentials and issue a session credential.

        Unknown email and wrong password fail with the same error, and both
        spend one bcrypt verification.
        """
        try:
            user = self._users.find_by_email(email) if email else None
            if user is None:
                # Dummy verification to prevent timing-based email enumeration
                self._hasher.verify(password or "", self._hasher.dummy_hash)
                SecurityAuditService.log_event(
                    self._db, SecurityEventType.LOGIN_FAILED,
                    ip_address=ip_address, user_agent=user_agent,
                    details={"reason": "user_not_found"},
                )
                self._db.commit()
                raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

            if not self._hasher.verify(password or "", user.password_hash):
                SecurityAuditService.log_event(
                    self._db, SecurityEventType.LOGIN_FAILED, user_id=user.id,
                    ip_address=ip_address, user_agent=user_agent,
                    details={"reason": "invalid_password"},
                )
                self._db.commit()
                raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

            SecurityAuditService.log_event(
                self._db, SecurityEventType.LOGIN_SUCCESS, user_id=user.id,
                ip_address=ip_address, user_agent=user_agent,
            )
            self._db.commit()
        except SQLAlchemyError as e:
            raise self._internal_error("Login") from e

        logger.info(f"User logged in: {user.id}")
        return self._issue(user)

    def build_reset_url(self, raw_secret: str) -> str:
        base = self._settings.frontend_url.rstrip("/")
        return f"{base}/reset-password?{urlencode({'token': raw_secret})}"

    def request_password_reset(
        self,
        email: str,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> bool:
        """Email a reset link if the account exists.

        Always returns True so the answer never reveals whether the email is
        registered. Failures are logged for operators and otherwise ignored;
        a token committed before a failed send stays valid.
        """
        user_id = None
        try:
            user = self._users.find_by_email(email) if email else None
            if user is None:
                logger.info("Password reset requested for unknown email")
                return True

            user_id = user.id
            raw_secret = self._reset_tokens.create(user.id)
            SecurityAuditService.log_event(
                self._db, SecurityEventType.PASSWORD_RESET_REQUESTED, user_id=user.id,
                ip_address=ip_address, user_agent=user_agent,
            )
            self._db.commit()

            self._sender.send(user.email, self.build_reset_url(raw_secret))
            logger.info(f"Password reset link sent for user: {user.id}")
        except Exception:
            logger.exception(f"Password reset request failed (user_id={user_id})")
            self._rollback()
        return True

    def reset_password(
        self,
        raw_secret: str,
        new_password: str,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """Redeem a reset secret, set the new password and log the user in."""
        if (
            not raw_secret
            or not new_password
            or len(new_password) < self._settings.password_min_length
        ):
            raise InvalidInputError("Invalid token or password too short")

        # Hash before redeeming so an unhashable password leaves the token usable
        password_hash = self._hasher.hash(new_password)

        try:
            user_id = self._reset_tokens.consume(raw_secret)
            if user_id is None:
                self._rollback()
                SecurityAuditService.log_event(
                    self._db, SecurityEventType.PASSWORD_RESET_FAILED,
                    ip_address=ip_address, user_agent=user_agent,
                    details={"reason": "invalid_or_expired_token"},
                )
                self._db.commit()
                raise UnauthorizedError(INVALID_RESET_TOKEN_MESSAGE)

            self._users.update_password_hash(user_id, password_hash)
            SecurityAuditService.log_event(
                self._db, SecurityEventType.PASSWORD_RESET_COMPLETED, user_id=user_id,
                ip_address=ip_address, user_agent=user_agent,
            )
            self._db.commit()
            user = self._users.get_by_id(user_id)
        except (SQLAlchemyError, NotFoundError) as e:
            raise self._internal_error("Password reset") from e

        logger.info(f"Password reset for user: {user_id}")
        return self._issue(user)
