"""Session credential (JWT) issuance and verification."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from eventhub.config import Settings

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "email", "is_admin", "iat", "exp"]


@dataclass(frozen=True)
class SessionClaims:
    """Verified contents of a session credential."""

    user_id: str
    email: str
    is_admin: bool
    issued_at: datetime
    expires_at: datetime


class TokenSigner:
    """Issues and verifies signed, time-limited bearer credentials.

    Rotating the secret invalidates every outstanding credential.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(days=7),
    ) -> None:
        if not secret_key:
            raise ValueError("TokenSigner requires a non-empty secret key")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenSigner":
        return cls(
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            expires_delta=timedelta(days=settings.session_token_expire_days),
        )

    def issue(
        self,
        user_id: str,
        email: str,
        is_admin: bool,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a signed credential asserting the given identity."""
        if expires_delta is None:
            expires_delta = self.expires_delta

        now = datetime.now(UTC)
        payload = {
            "sub": user_id,
            "email": email,
            "is_admin": bool(is_admin),
            "iat": now,
            "exp": now + expires_delta,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> SessionClaims | None:
        """Decode and validate a credential.

        Returns None for anything that is not a correctly signed, unexpired
        token carrying exactly the expected claim types.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid token: {e}")
            return None

        user_id = payload["sub"]
        email = payload["email"]
        is_admin = payload["is_admin"]
        issued_at = payload["iat"]
        expires_at = payload["exp"]
        if not (
            isinstance(user_id, str)
            and isinstance(email, str)
            and isinstance(is_admin, bool)
            and isinstance(issued_at, int)
            and isinstance(expires_at, int)
        ):
            logger.debug("Token claims have unexpected types")
            return None

        return SessionClaims(
            user_id=user_id,
            email=email,
            is_admin=is_admin,
            issued_at=datetime.fromtimestamp(issued_at, UTC),
            expires_at=datetime.fromtimestamp(expires_at, UTC),
        )
