"""ORM models."""

from eventhub.models.event import Event
from eventhub.models.password_reset_token import PasswordResetToken, ResetTokenState
from eventhub.models.security_audit_log import SecurityAuditLog
from eventhub.models.user import User

__all__ = [
    "Event",
    "PasswordResetToken",
    "ResetTokenState",
    "SecurityAuditLog",
    "User",
]
