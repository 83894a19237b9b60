"""
skillconnect/payment/schemas.py

Payment Schemas
- CheckoutRequest / CheckoutResponse: starting a hosted checkout for a service
- VerifyPaymentRequest / VerifyPaymentResponse: confirming a booking after checkout
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from skillconnect.booking.schemas import BookingRead


class CheckoutRequest(BaseModel):
    """The charged amount is always taken from the service record, never from the caller."""

    service_id: UUID
    provider_id: UUID
    booking_date: datetime | None = None
    notes: str | None = Field(default=None, max_length=2000)


class CheckoutResponse(BaseModel):
    url: str = Field(..., description="Hosted checkout page to redirect the client to")
    session_id: str
    booking_id: UUID


class VerifyPaymentRequest(BaseModel):
    session_id: str = Field(..., min_length=1)


class VerifyPaymentResponse(BaseModel):
    confirmed: bool = Field(..., description="Booking is confirmed after this call")
    payment_status: str
    booking: BookingRead | None = None
    transitioned: bool = Field(
        False, description="This call performed the pending -> confirmed transition"
    )
    emails_sent: bool = False
    client_email_id: str | None = None
    provider_email_id: str | None = None


class WebhookAck(BaseModel):
    received: bool = True
    handled: bool = False
