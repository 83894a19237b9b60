"""
skillconnect/service/models.py

Service Database Model
Defines the SQLAlchemy model for services offered by providers.
Each service is owned by exactly one provider profile.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from skillconnect.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from skillconnect.database.enums import RateType, db_enum

if TYPE_CHECKING:
    from skillconnect.database.models import Profile


# ---------------------------------------------------
# Service Model
# ---------------------------------------------------
class Service(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Represents a service listing published by a provider."""

    __tablename__ = "services"
    __table_args__ = (
        CheckConstraint("rate > 0", name="ck_services_rate_positive"),
        CheckConstraint("duration_minutes > 0", name="ck_services_duration_positive"),
    )

    provider_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.user_id", name="fk_services_provider_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Provider (auth user id) offering this service",
    )
    title: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Title or name of the service"
    )
    description: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Detailed description of the service"
    )
    category: Mapped[str] = mapped_column(
        String(64), nullable=False, comment="Category or subcategory key from the taxonomy"
    )
    rate: Mapped[float] = mapped_column(Float, nullable=False, comment="Price per rate unit")
    rate_type: Mapped[RateType] = mapped_column(
        db_enum(RateType, "rate_type"),
        nullable=False,
        default=RateType.HOURLY,
        comment="How the rate is charged (hourly, fixed, daily)",
    )
    duration_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=60, comment="Typical duration in minutes"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Inactive services never appear in discovery",
    )

    # ---------------------------------------------------
    # Relationships
    # ---------------------------------------------------
    provider: Mapped["Profile"] = relationship(
        "Profile",
        back_populates="services",
        lazy="joined",
    )
