"""
skillconnect/messaging/models.py

Messaging Models

Defines the SQLAlchemy model for direct messages. Conversations are not
stored: a conversation is the set of messages exchanged with one
counterparty, derived at read time.
"""

import uuid

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from skillconnect.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from skillconnect.database.enums import MessageStatus, MessageType, db_enum


# ---------------------------------------------------
# Message Model
# ---------------------------------------------------
class Message(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Represents an individual message from one identity to another.
    """

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_sender_recipient", "sender_id", "recipient_id"),
        Index("ix_messages_recipient_sender", "recipient_id", "sender_id"),
    )

    sender_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.user_id", name="fk_messages_sender_id"),
        nullable=False,
        comment="Identity that sent this message",
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.user_id", name="fk_messages_recipient_id"),
        nullable=False,
        comment="Identity this message is addressed to",
    )
    message_text: Mapped[str] = mapped_column(Text, nullable=False)
    message_type: Mapped[MessageType] = mapped_column(
        db_enum(MessageType, "message_type"),
        nullable=False,
        default=MessageType.TEXT,
    )
    file_url: Mapped[str | None] = mapped_column(String, nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[MessageStatus] = mapped_column(
        db_enum(MessageStatus, "message_status"),
        nullable=False,
        default=MessageStatus.SENT,
    )
