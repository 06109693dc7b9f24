"""Admin router for operator visibility into credential events."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventhub.database import get_db
from eventhub.dependencies.admin import get_admin_claims
from eventhub.schemas.admin import SecurityEventInfo
from eventhub.services.auth import SessionClaims
from eventhub.services.security_audit_service import SecurityAuditService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/security-events", response_model=list[SecurityEventInfo])
def list_security_events(
    event_type: str | None = Query(None, alias="eventType"),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: SessionClaims = Depends(get_admin_claims),
) -> list[SecurityEventInfo]:
    """Most recent security events, newest first."""
    logs = SecurityAuditService.recent_events(db, limit=limit, event_type=event_type)
    return [SecurityEventInfo.from_log(log) for log in logs]
