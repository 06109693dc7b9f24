"""Schemas for authentication endpoints.

Fields default to empty strings so that missing values reach the auth
service, which answers with its own 400 instead of a validation 422.
"""

from datetime import datetime

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from eventhub.schemas.common import CamelModel


class UserRegister(CamelModel):
    """Schema for user registration."""

    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)
    email: str = Field("", max_length=255)  # Stored exactly as given
    password: str = ""


class UserLogin(CamelModel):
    """Schema for user login."""

    email: str = ""
    password: str = ""


class RequestPasswordReset(CamelModel):
    """Schema for requesting a password reset link."""

    email: str = ""


class ResetPassword(CamelModel):
    """Schema for resetting a password with the emailed token."""

    token: str = ""
    new_password: str = ""


class UserInfo(CamelModel):
    """Schema for user info in auth responses."""

    id: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool = False
    hosted_events_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class AuthResponse(CamelModel):
    """Schema for a successful register, login or reset."""

    token: str
    user: UserInfo


class SuccessResponse(CamelModel):
    """Schema for a bare success flag."""

    success: bool = True
