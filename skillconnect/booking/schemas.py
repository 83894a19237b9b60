"""
skillconnect/booking/schemas.py

Booking Schemas
Defines Pydantic schemas for:
- Posting an open job
- Applying to a job and reading applications
- Reading bookings
- Accepting an application (assignment result)
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from skillconnect.database.enums import ApplicationStatus, BookingStatus
from skillconnect.service.schemas import CategoryKey

DEFAULT_APPLICATION_MESSAGE = "I would like to work on this job."


# ---------------------------------------------------
# Open Job Posts
# ---------------------------------------------------
class JobPostCreate(BaseModel):
    """Schema used by a client to post a job with no provider or service attached."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=2000)
    amount: float = Field(..., gt=0, description="Budget offered for the job")
    category: CategoryKey = Field(..., description="Category or subcategory key")
    booking_date: datetime | None = Field(default=None, description="Preferred date")
    duration_minutes: int | None = Field(default=None, gt=0)


# ---------------------------------------------------
# Booking Read
# ---------------------------------------------------
class BookingRead(BaseModel):
    id: UUID
    client_id: UUID
    provider_id: UUID | None = None
    service_id: UUID | None = None
    amount: float
    currency: str
    status: BookingStatus
    stripe_session_id: str | None = None
    booking_date: datetime | None = None
    notes: str | None = None
    job_type: str | None = None
    duration_minutes: int | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------
# Applications
# ---------------------------------------------------
class ApplicationCreate(BaseModel):
    message: str = Field(default=DEFAULT_APPLICATION_MESSAGE, max_length=2000)


class ApplicationRead(BaseModel):
    id: UUID
    booking_id: UUID
    provider_id: UUID
    message: str | None = None
    status: ApplicationStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AcceptApplicationResult(BaseModel):
    """Outcome of assigning a provider to an open job post."""

    booking: BookingRead
    application: ApplicationRead
    rejected_count: int = Field(..., description="Competing applications closed by this call")
