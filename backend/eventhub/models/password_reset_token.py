"""Password reset token model."""

import enum
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from eventhub.database import Base

if TYPE_CHECKING:
    from eventhub.models.user import User


class ResetTokenState(enum.Enum):
    """Lifecycle state of a stored reset token."""

    VALID = "valid"
    EXPIRED = "expired"
    USED = "used"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class PasswordResetToken(Base):
    """Single-use token for the password reset flow.

    Rows are never deleted or reused: once ``used_at`` is set the row stays
    as an audit record.
    """

    __tablename__ = "password_reset_tokens"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    token_hash: Mapped[str] = mapped_column(String(64), index=True)  # SHA-256 hex
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="password_reset_tokens")

    def state_at(self, now: datetime) -> ResetTokenState:
        """Return the token's state at the given instant."""
        if self.used_at is not None:
            return ResetTokenState.USED
        if _as_utc(now) >= _as_utc(self.expires_at):
            return ResetTokenState.EXPIRED
        return ResetTokenState.VALID

    def __repr__(self) -> str:
        return f"<PasswordResetToken(id={self.id}, user_id={self.user_id})>"
