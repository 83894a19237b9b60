"""
skillconnect/database/models.py

Core SQLAlchemy ORM Models

Defines:
- Profile: one row per authenticated identity, carrying the marketplace role

Imports every domain model so the metadata is complete wherever this module
is imported (Alembic, tests):
- Service (services offered by providers)
- Booking / Application (bookings, open job posts and applications)
- Message (direct messages)
- Notification (in-app alerts)
"""

import uuid

from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from skillconnect.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from skillconnect.database.enums import UserRole, db_enum
from skillconnect.booking.models import Application, Booking
from skillconnect.messaging.models import Message
from skillconnect.notification.models import Notification
from skillconnect.service.models import Service

__all__ = ["Profile", "Service", "Booking", "Application", "Message", "Notification"]


# ---------------------------------------------------
# Profile Model: Marketplace Identity
# ---------------------------------------------------
class Profile(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "profiles"

    # -------------------------------------
    # Fields
    # -------------------------------------
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        unique=True,
        nullable=False,
        index=True,
        comment="Identity id issued by the auth collaborator",
    )
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    user_type: Mapped[UserRole | None] = mapped_column(
        db_enum(UserRole, "user_role"),
        nullable=True,
        comment="Marketplace role; set once during onboarding",
    )
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    skills: Mapped[list[str] | None] = mapped_column(
        ARRAY(String), nullable=True, comment="Provider skill tags"
    )
    avatar_url: Mapped[str | None] = mapped_column(String, nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    hourly_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    experience_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rating: Mapped[float | None] = mapped_column(
        Float, nullable=True, comment="Maintained externally; read-only here"
    )
    total_reviews: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="Maintained externally; read-only here"
    )

    # -------------------------------------
    # Relationships
    # -------------------------------------

    # One-to-Many: A provider can offer multiple services
    services: Mapped[list["Service"]] = relationship(
        "Service",
        back_populates="provider",
        cascade="all, delete-orphan",
    )

    @property
    def is_provider(self) -> bool:
        return self.user_type == UserRole.PROVIDER

    @property
    def display_name(self) -> str:
        return self.full_name or ("Provider" if self.is_provider else "Client")
