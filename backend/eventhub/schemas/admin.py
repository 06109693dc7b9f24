"""Schemas for admin endpoints."""

from datetime import datetime
from typing import Any

from pydantic import Field

from eventhub.models.security_audit_log import SecurityAuditLog
from eventhub.schemas.common import CamelModel


class SecurityEventInfo(CamelModel):
    """One security audit log entry."""

    id: str
    user_id: str | None = None
    event_type: str
    ip_address: str | None = None
    user_agent: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None

    @classmethod
    def from_log(cls, log: SecurityAuditLog) -> "SecurityEventInfo":
        return cls(
            id=log.id,
            user_id=log.user_id,
            event_type=log.event_type,
            ip_address=log.ip_address,
            user_agent=log.user_agent,
            details=log.details_data,
            created_at=log.created_at,
        )
