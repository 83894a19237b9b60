"""
skillconnect/profile/schemas.py

Profile Schemas
Defines Pydantic schemas for:
- Reading the caller's own profile (full view)
- Reading another identity's public profile (no contact details)
- Assigning the marketplace role during onboarding
- Partially updating the caller's profile
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from skillconnect.database.enums import UserRole


# ---------------------------------------------------
# Read Schemas
# ---------------------------------------------------
class PublicProfileRead(BaseModel):
    """Profile fields any authenticated identity may see."""

    user_id: UUID
    full_name: str | None = None
    user_type: UserRole | None = None
    bio: str | None = None
    skills: list[str] | None = None
    avatar_url: str | None = None
    location: str | None = None
    hourly_rate: float | None = None
    experience_years: int | None = None
    rating: float | None = None
    total_reviews: int | None = None

    model_config = ConfigDict(from_attributes=True)


class ProfileRead(PublicProfileRead):
    """Full profile as seen by its owner."""

    id: UUID
    email: str | None = None
    phone: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------
# Onboarding
# ---------------------------------------------------
class RoleAssign(BaseModel):
    role: UserRole = Field(..., description="Marketplace role; can only be set once")


# ---------------------------------------------------
# Update Schema
# ---------------------------------------------------
class ProfileUpdate(BaseModel):
    """
    Partial update of the caller's own profile. The role is not part of this
    schema; unknown fields (including `user_type`) are rejected.
    """

    full_name: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=30)
    bio: str | None = Field(default=None, max_length=2000)
    skills: list[str] | None = Field(default=None, description="Provider skill tags")
    avatar_url: str | None = None
    location: str | None = Field(default=None, max_length=200)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    hourly_rate: float | None = Field(default=None, gt=0)
    experience_years: int | None = Field(default=None, ge=0, le=80)

    model_config = ConfigDict(extra="forbid")
