"""Single-use password reset tokens."""

import hashlib
import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from eventhub.models.password_reset_token import PasswordResetToken, ResetTokenState

logger = logging.getLogger(__name__)

# Bytes of randomness in each raw secret
SECRET_NBYTES = 32


def _utcnow() -> datetime:
    return datetime.now(UTC)


def hash_secret(raw_secret: str) -> str:
    """Hash a raw secret using SHA-256 (hex digest, as stored)."""
    return hashlib.sha256(raw_secret.encode("utf-8")).hexdigest()


class ResetTokenStore:
    """Creates and redeems password reset tokens.

    Only the SHA-256 of a secret is stored. The store flushes but never
    commits: the caller owns the transaction, so marking a token used and
    writing the new password hash land together.
    """

    def __init__(
        self,
        db: Session,
        expires_delta: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._db = db
        self.expires_delta = expires_delta
        self._clock = clock

    def create(self, user_id: str) -> str:
        """Store a new token for the user and return its raw secret."""
        raw_secret = secrets.token_urlsafe(SECRET_NBYTES)
        token = PasswordResetToken(
            user_id=user_id,
            token_hash=hash_secret(raw_secret),
            expires_at=self._clock() + self.expires_delta,
        )
        self._db.add(token)
        self._db.flush()
        logger.debug("Created password reset token %s for user %s", token.id, user_id)
        return raw_secret

    def consume(self, raw_secret: str) -> str | None:
        """Redeem a secret, returning the owning user id or None.

        The mark-used UPDATE repeats the usability predicate, so of two
        concurrent redemptions of one token only one updates a row.
        """
        if not raw_secret:
            return None

        token_hash = hash_secret(raw_secret)
        now = self._clock()
        usable = (
            PasswordResetToken.token_hash == token_hash,
            PasswordResetToken.used_at.is_(None),
            PasswordResetToken.expires_at > now,
        )

        token_id = self._db.scalar(select(PasswordResetToken.id).where(*usable).limit(1))
        if token_id is None:
            return None

        result = self._db.execute(
            update(PasswordResetToken)
            .where(PasswordResetToken.id == token_id, *usable)
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.info("Password reset token %s was redeemed concurrently", token_id)
            return None

        user_id = self._db.scalar(
            select(PasswordResetToken.user_id).where(PasswordResetToken.id == token_id)
        )
        logger.debug("Consumed password reset token %s for user %s", token_id, user_id)
        return user_id

    def state_of(self, raw_secret: str) -> ResetTokenState | None:
        """Return the state of the token for a secret, or None if unknown."""
        token = self._db.scalar(
            select(PasswordResetToken)
            .where(PasswordResetToken.token_hash == hash_secret(raw_secret))
            .execution_options(populate_existing=True)
        )
        if token is None:
            return None
        return token.state_at(self._clock())
