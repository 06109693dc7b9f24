"""Schemas for event endpoints."""

from datetime import datetime

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from eventhub.schemas.common import CamelModel


class EventCreate(CamelModel):
    """Schema for creating an event."""

    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    is_public: bool = True


class EventUpdate(CamelModel):
    """Schema for updating an event. Only provided fields change."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    is_public: bool | None = None


class EventInfo(CamelModel):
    """Schema for event responses."""

    id: str
    owner_id: str
    title: str
    description: str | None = None
    is_public: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )
