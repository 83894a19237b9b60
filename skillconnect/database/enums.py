"""
skillconnect/database/enums.py

Enumerations

Defines enumerations shared by models, schemas and services:
- UserRole: marketplace role chosen once during onboarding
- RateType: how a service rate is charged
- BookingStatus: lifecycle of a booking / open job post
- ApplicationStatus: lifecycle of a provider's application to an open job
- MessageType / MessageStatus: direct message kind and delivery state

Values are stored lowercase, matching what clients send and read.
"""

from enum import Enum

from sqlalchemy import Enum as SAEnum


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


def db_enum(enum_cls: type[Enum], name: str) -> SAEnum:
    """Postgres enum column type persisting member values rather than names."""
    return SAEnum(enum_cls, name=name, values_callable=_enum_values)


# ---------------------------------------------------
# User Role Enumeration
# ---------------------------------------------------
class UserRole(str, Enum):
    CLIENT = "client"
    PROVIDER = "provider"


# ---------------------------------------------------
# Service Rate Type
# ---------------------------------------------------
class RateType(str, Enum):
    HOURLY = "hourly"
    FIXED = "fixed"
    DAILY = "daily"


# ---------------------------------------------------
# Booking Status
# ---------------------------------------------------
class BookingStatus(str, Enum):
    """
    PENDING   - open job post, or checkout awaiting payment confirmation
    CONFIRMED - payment verified, or provider assigned to an open job post
    COMPLETED - assigned open job marked done by its provider
    CANCELLED - open job post withdrawn by its client
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# ---------------------------------------------------
# Application Status
# ---------------------------------------------------
class ApplicationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# ---------------------------------------------------
# Messaging
# ---------------------------------------------------
class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


class MessageStatus(str, Enum):
    SENDING = "sending"
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
