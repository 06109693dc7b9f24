"""Events router.

Every mutation goes through the access guard's owner-or-admin check.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from eventhub.database import get_db
from eventhub.dependencies.auth import get_access_guard, get_current_claims
from eventhub.models.event import Event
from eventhub.models.user import User
from eventhub.schemas.event import EventCreate, EventInfo, EventUpdate
from eventhub.services.auth import AccessGuard, ForbiddenError, SessionClaims

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


def _get_event_or_404(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )
    return event


def _adjust_hosted_count(db: Session, user_id: str, delta: int) -> None:
    db.query(User).filter(User.id == user_id).update(
        {User.hosted_events_count: User.hosted_events_count + delta},
        synchronize_session=False,
    )


@router.post("", response_model=EventInfo, status_code=status.HTTP_201_CREATED)
def create_event(
    data: EventCreate,
    db: Session = Depends(get_db),
    claims: SessionClaims = Depends(get_current_claims),
) -> Event:
    """Create an event owned by the caller."""
    event = Event(
        owner_id=claims.user_id,
        title=data.title,
        description=data.description,
        is_public=data.is_public,
    )
    db.add(event)
    _adjust_hosted_count(db, claims.user_id, 1)
    db.commit()
    db.refresh(event)

    logger.info(f"Event {event.id} created by user {claims.user_id}")
    return event


@router.get("", response_model=list[EventInfo])
def list_events(
    db: Session = Depends(get_db),
    guard: AccessGuard = Depends(get_access_guard),
) -> list[Event]:
    """List events visible to the caller.

    Admins see everything, authenticated users see public events plus
    their own, anonymous callers see public events only.
    """
    query = db.query(Event)
    if not guard.is_admin:
        if guard.is_authenticated:
            query = query.filter(or_(Event.is_public.is_(True), Event.owner_id == guard.user_id))
        else:
            query = query.filter(Event.is_public.is_(True))
    return query.order_by(Event.created_at.desc()).all()


@router.get("/{event_id}", response_model=EventInfo)
def get_event(
    event_id: str,
    db: Session = Depends(get_db),
    guard: AccessGuard = Depends(get_access_guard),
) -> Event:
    """Get one event. Private events are visible to their owner and admins."""
    event = _get_event_or_404(db, event_id)
    if not event.is_public and not guard.is_owner_or_admin(event.owner_id):
        raise ForbiddenError("Cannot view private event")
    return event


@router.put("/{event_id}", response_model=EventInfo)
def update_event(
    event_id: str,
    data: EventUpdate,
    db: Session = Depends(get_db),
    guard: AccessGuard = Depends(get_access_guard),
) -> Event:
    """Update an event. Owner or admin only."""
    guard.require_authenticated()
    event = _get_event_or_404(db, event_id)
    guard.require_owner_or_admin(event.owner_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field != "description":
            continue
        setattr(event, field, value)

    db.commit()
    db.refresh(event)
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: str,
    db: Session = Depends(get_db),
    guard: AccessGuard = Depends(get_access_guard),
) -> Response:
    """Delete an event. Owner or admin only."""
    guard.require_authenticated()
    event = _get_event_or_404(db, event_id)
    guard.require_owner_or_admin(event.owner_id)

    owner_id = event.owner_id
    db.delete(event)
    _adjust_hosted_count(db, owner_id, -1)
    db.commit()

    logger.info(f"Event {event_id} deleted by user {guard.user_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
