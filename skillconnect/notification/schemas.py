"""
skillconnect/notification/schemas.py

Notification Schemas
- BookingEmailData / BookingEmailResult: input and delivery ids of the booking email pair
- NotificationRead: in-app notification row
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------
# Booking Emails
# ---------------------------------------------------
class BookingEmailData(BaseModel):
    booking_id: UUID
    client_email: str
    provider_email: str
    client_name: str = "Client"
    provider_name: str = "Provider"
    service_title: str
    amount: float
    currency: str
    booking_date: datetime | None = None


class BookingEmailResult(BaseModel):
    client_email_id: str | None = Field(None, description="Mail provider id of the client email")
    provider_email_id: str | None = Field(
        None, description="Mail provider id of the provider email"
    )

    @property
    def delivered(self) -> bool:
        """Both emails were handed to the mail provider (False when sending is disabled)."""
        return self.client_email_id is not None and self.provider_email_id is not None


# ---------------------------------------------------
# In-App Notifications
# ---------------------------------------------------
class NotificationRead(BaseModel):
    id: UUID
    title: str
    message: str
    type: str
    read: bool
    data: dict[str, Any] | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MarkAllReadResult(BaseModel):
    updated: int
