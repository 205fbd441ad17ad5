"""Rider onboarding schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class RiderApplicationCreate(BaseModel):
    """Schema for rider application request."""

    license_number: str = Field(..., min_length=1, max_length=100)
    license_image: str | None = Field(None, max_length=500)


class RiderApplicationReview(BaseModel):
    """Schema for an admin decision."""

    admin_notes: str | None = None


class RiderApplicationResponse(BaseModel):
    """Schema for rider application response."""

    application_id: UUID
    user_id: UUID
    license_number: str
    license_image: str | None
    status: str
    admin_notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class RiderApplicationStatus(BaseModel):
    """Schema for the caller's application status."""

    status: str
    application: RiderApplicationResponse | None = None
