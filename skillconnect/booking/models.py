"""
skillconnect/booking/models.py

Defines the Booking and Application models.
- Booking: one engagement attempt between a client and (optionally) a provider.
  A booking with no provider and no checkout session is an open job post.
  A booking with a checkout session is payment-tracked.
- Application: a provider's expressed interest in an open job post
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from skillconnect.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from skillconnect.database.enums import ApplicationStatus, BookingStatus, db_enum

if TYPE_CHECKING:
    from skillconnect.service.models import Service


# MODEL: Booking
class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "bookings"

    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.user_id", name="fk_bookings_client_id"),
        nullable=False,
        index=True,
        comment="Client who booked or posted the job",
    )
    provider_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.user_id", name="fk_bookings_provider_id"),
        nullable=True,
        index=True,
        comment="Assigned provider; null for an open job post",
    )
    service_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("services.id", name="fk_bookings_service_id", ondelete="SET NULL"),
        nullable=True,
        comment="Booked service; null for an open job post",
    )

    amount: Mapped[float] = mapped_column(Float, nullable=False, comment="Agreed amount")
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="gel")
    status: Mapped[BookingStatus] = mapped_column(
        db_enum(BookingStatus, "booking_status"),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
        comment="Current status of the booking",
    )
    stripe_session_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        comment="Checkout session id; non-null marks a payment-tracked booking",
    )
    booking_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="Scheduled date"
    )
    notes: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Free text; open job posts store '<title> - <description>'"
    )
    job_type: Mapped[str | None] = mapped_column(
        String(64), nullable=True, comment="Category key of an open job post"
    )
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    service: Mapped[Optional["Service"]] = relationship("Service", lazy="selectin")
    applications: Mapped[list["Application"]] = relationship(
        "Application",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Application.created_at",
    )

    @property
    def is_payment_tracked(self) -> bool:
        return self.stripe_session_id is not None

    @property
    def is_open_job_post(self) -> bool:
        return (
            self.provider_id is None
            and self.stripe_session_id is None
            and self.status == BookingStatus.PENDING
        )


# MODEL: Application
class Application(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "applications"

    booking_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("bookings.id", name="fk_applications_booking_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Open job post being applied to",
    )
    provider_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.user_id", name="fk_applications_provider_id"),
        nullable=False,
        comment="Applicant provider",
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ApplicationStatus] = mapped_column(
        db_enum(ApplicationStatus, "application_status"),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="applications")
