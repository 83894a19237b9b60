"""
skillconnect/core/schemas.py

Core Schemas

Shared response envelopes used by every router:
- PaginatedResponse: a page of items plus total count and next-page flag
- MessageResponse: plain acknowledgement payload
- TokenPayload: verified access-token claims
"""

from collections.abc import Sequence
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic schema for paginated list responses."""

    total_count: int = Field(..., description="Total number of items available")
    has_next_page: bool = Field(..., description="Indicates if there are more items available")
    items: list[T] = Field(..., description="List of items for the current page")

    @classmethod
    def from_page(
        cls, items: Sequence[T], total_count: int, skip: int, limit: int
    ) -> "PaginatedResponse[T]":
        """Build a page envelope from a service-layer (items, total) result."""
        return cls(
            total_count=total_count,
            has_next_page=(skip + limit) < total_count,
            items=list(items),
        )


class MessageResponse(BaseModel):
    """Generic response schema for simple success or informational messages."""

    detail: str = Field(..., description="Response message detail")


# ---------------------------------------------------
# Access Token Claims
# ---------------------------------------------------
class TokenPayload(BaseModel):
    """Claims read from an access token issued by the auth provider."""

    sub: UUID = Field(..., description="Identity id")
    email: str | None = Field(default=None, description="Email bound to the identity")
    exp: int | None = None
