"""Security audit log model for credential events."""

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from eventhub.database import Base


class SecurityAuditLog(Base):
    """One recorded login, registration or password reset event."""

    __tablename__ = "security_audit_logs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    # Kept after the user is deleted so the trail survives
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), index=True
    )
    event_type: Mapped[str] = mapped_column(String(50), index=True)
    ip_address: Mapped[str | None] = mapped_column(String(45))
    user_agent: Mapped[str | None] = mapped_column(String(500))
    details: Mapped[str | None] = mapped_column(Text)  # JSON
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )

    @property
    def details_data(self) -> dict[str, Any]:
        return json.loads(self.details) if self.details else {}

    def __repr__(self) -> str:
        return f"<SecurityAuditLog(id={self.id}, event={self.event_type}, user_id={self.user_id})>"
