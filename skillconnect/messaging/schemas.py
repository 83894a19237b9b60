"""
skillconnect/messaging/schemas.py

Messaging Schemas
Defines Pydantic schemas for:
- Sending a message
- Reading messages
- Conversation summaries derived from message history
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from skillconnect.database.enums import MessageStatus, MessageType


# ---------------------------------------------------
# Send Message Schema
# ---------------------------------------------------
class MessageCreate(BaseModel):
    recipient_id: UUID = Field(..., description="Identity the message is addressed to")
    message_text: str = Field(..., min_length=1, max_length=5000)
    message_type: MessageType = MessageType.TEXT
    file_url: str | None = Field(default=None, description="Stored file location (image/file)")
    file_size: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _attachment_needs_url(self) -> "MessageCreate":
        if self.message_type != MessageType.TEXT and not self.file_url:
            raise ValueError(f"file_url is required for {self.message_type.value} messages")
        return self


# ---------------------------------------------------
# Read Schemas
# ---------------------------------------------------
class MessageRead(BaseModel):
    id: UUID
    sender_id: UUID
    recipient_id: UUID
    message_text: str
    message_type: MessageType
    file_url: str | None = None
    file_size: int | None = None
    status: MessageStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationSummary(BaseModel):
    counterparty_id: UUID
    counterparty_name: str
    counterparty_avatar_url: str | None = None
    last_message: MessageRead
    last_activity: datetime
    unread_count: int = 0


class MarkReadResult(BaseModel):
    updated: int
