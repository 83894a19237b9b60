"""
skillconnect/discovery/schemas.py

Discovery Schemas
- ProviderListing / JobListing: flattened, read-only rows the filters operate on
- ProviderFilterCriteria / JobFilterCriteria: client-supplied filters (all ANDed)
- MapMarker: descriptor consumed by the map widget
- CategoryRead: taxonomy node for category pickers
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SortBy(str, Enum):
    RATING = "rating"
    PRICE = "price"
    DISTANCE = "distance"


# ---------------------------------------------------
# Listings
# ---------------------------------------------------
class ProviderListing(BaseModel):
    """One provider as shown in discovery, built from the profile and its active services."""

    id: UUID = Field(..., description="Provider identity id")
    name: str
    profession: str
    category: str = Field(..., description="Primary category shown on the card")
    categories: list[str] = Field(default_factory=list, description="Active service categories")
    rating: float = 0.0
    reviews: int = 0
    distance_km: float = 0.0
    hourly_rate: float = Field(0.0, description="Lowest active service rate")
    bio: str = ""
    avatar_url: str | None = None
    location: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    model_config = ConfigDict(frozen=True)


class JobListing(BaseModel):
    """An open job post as seen by providers."""

    id: UUID = Field(..., description="Booking id of the open job post")
    client_id: UUID
    client_name: str = "Client"
    title: str
    description: str = ""
    category: str | None = None
    amount: float
    currency: str
    booking_date: datetime | None = None
    duration_minutes: int | None = None
    distance_km: float = 0.0
    location: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------
# Filter Criteria
# ---------------------------------------------------
class _RangeCriteria(BaseModel):
    text: str | None = Field(default=None, description="Case-insensitive substring match")
    category: str | None = Field(default=None, description="Category key; parents include children")
    min_rate: float | None = Field(default=None, ge=0)
    max_rate: float | None = Field(default=None, ge=0)
    max_distance_km: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_range(self) -> "_RangeCriteria":
        if self.min_rate is not None and self.max_rate is not None and self.min_rate > self.max_rate:
            raise ValueError("min_rate must not exceed max_rate")
        return self


class ProviderFilterCriteria(_RangeCriteria):
    min_rating: float | None = Field(default=None, ge=0, le=5)
    sort_by: SortBy | None = None


class JobFilterCriteria(_RangeCriteria):
    """Rate bounds apply to the job's posted amount."""


# ---------------------------------------------------
# Map / Taxonomy
# ---------------------------------------------------
class LatLng(BaseModel):
    lat: float
    lng: float


class MapMarker(BaseModel):
    id: UUID
    position: LatLng
    label: str
    category: str | None = None


class CategoryRead(BaseModel):
    key: str
    label: str
    subcategories: list["CategoryRead"] = Field(default_factory=list)
