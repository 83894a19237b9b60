"""
skillconnect/service/schemas.py

Service Schemas
Defines Pydantic schemas for:
- Creating a service
- Updating a service
- Toggling a service's active flag
- Reading a service (response model)
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from skillconnect.database.enums import RateType
from skillconnect.discovery.categories import canonical_category


def _validate_category(value: str) -> str:
    key = canonical_category(value)
    if key is None:
        raise ValueError(f"Unknown category: {value!r}")
    return key


CategoryKey = Annotated[str, AfterValidator(_validate_category)]


# ---------------------------------------------------
# Base Schema for Service Fields
# ---------------------------------------------------
class ServiceBase(BaseModel):
    """Base schema containing shared fields for service creation and reads."""

    title: str = Field(..., min_length=1, max_length=100, description="Title of the service")
    description: str | None = Field(default=None, description="Detailed description")
    category: str = Field(..., description="Category or subcategory key")
    rate: float = Field(..., gt=0, description="Price per rate unit")
    rate_type: RateType = Field(default=RateType.HOURLY, description="How the rate is charged")
    duration_minutes: int = Field(default=60, gt=0, description="Typical duration in minutes")


# ---------------------------------------------------
# Create Service Schema
# ---------------------------------------------------
class ServiceCreate(ServiceBase):
    """Schema used to create a new service listing."""

    category: CategoryKey = Field(..., description="Category or subcategory key")


# ---------------------------------------------------
# Update Service Schema
# ---------------------------------------------------
class ServiceUpdate(BaseModel):
    """Schema used to update an existing service listing. Unset fields stay unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    category: CategoryKey | None = None
    rate: float | None = Field(default=None, gt=0)
    rate_type: RateType | None = None
    duration_minutes: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _required_fields_not_null(self) -> "ServiceUpdate":
        # Only description may be cleared; the rest can be omitted but not nulled.
        cleared = [
            name
            for name in self.model_fields_set
            if name != "description" and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"{', '.join(sorted(cleared))} cannot be null")
        return self


class ServiceActiveUpdate(BaseModel):
    is_active: bool


# ---------------------------------------------------
# Read (Response) Schema
# ---------------------------------------------------
class ServiceProviderRead(BaseModel):
    """Public summary of the provider offering a service."""

    user_id: UUID
    full_name: str | None = None
    avatar_url: str | None = None
    location: str | None = None
    rating: float | None = None

    model_config = ConfigDict(from_attributes=True)


class ServiceRead(ServiceBase):
    """Schema returned when reading a service listing."""

    id: UUID = Field(..., description="Unique identifier for the service")
    provider_id: UUID = Field(..., description="Identity id of the provider offering the service")
    is_active: bool
    created_at: datetime
    updated_at: datetime
    provider: ServiceProviderRead | None = Field(
        None, description="Details of the provider offering the service"
    )

    model_config = ConfigDict(from_attributes=True)
