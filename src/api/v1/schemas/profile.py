"""Pydantic schemas for Profile API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from domain.entities.notification import NotificationLevel


class ProfileResponse(BaseModel):
    """Schema for Profile response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "name": "Ada",
                "greeting": "Hi",
                "bio": "Engineer",
                "image_url": "https://xyzabc.supabase.co/storage/v1/object/public/profile_images/4f1c.jpg",
                "face_encoding": [-0.0913, 0.1187, 0.0342],
                "created_at": "2026-01-28T10:00:00",
                "updated_at": "2026-01-28T10:00:00",
            }
        },
    )

    id: UUID
    name: str
    greeting: str | None = None
    bio: str | None = None
    image_url: str | None = None
    face_encoding: list[float] | None = None
    created_at: datetime
    updated_at: datetime


class NotificationResponse(BaseModel):
    """A user-facing message attached to a response."""

    model_config = ConfigDict(from_attributes=True)

    level: NotificationLevel
    title: str
    message: str


class ProfileListResponse(BaseModel):
    """Schema for list of Profiles."""

    data: list[ProfileResponse]


class ProfileDetailResponse(BaseModel):
    """Schema for single Profile."""

    data: ProfileResponse


class ProfileOutcomeResponse(BaseModel):
    """Schema for the result of a create, update or delete."""

    data: ProfileResponse
    notifications: list[NotificationResponse]
    redirect_to: str | None = None
