"""
skillconnect/messaging/services.py

Messaging Service Logic

Handles direct messages between two identities:
- Send a message (recipient must have a profile; self-messaging rejected)
- Read the full conversation with one counterparty, oldest first
- Derive the conversation list (one entry per counterparty) with unread counts
- Mark a conversation's incoming messages as read
"""

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import and_, case, func, literal, or_, select, union_all, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.database.enums import MessageStatus
from skillconnect.database.models import Profile
from skillconnect.messaging import schemas
from skillconnect.messaging.models import Message

logger = logging.getLogger(__name__)


def _between(me: UUID, other):
    return or_(
        and_(Message.sender_id == me, Message.recipient_id == other),
        and_(Message.sender_id == other, Message.recipient_id == me),
    )


class MessageService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def send_message(
        self, sender_id: UUID, data: schemas.MessageCreate
    ) -> schemas.MessageRead:
        if data.recipient_id == sender_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot message yourself."
            )

        recipient = (
            await self.db.execute(select(Profile.id).where(Profile.user_id == data.recipient_id))
        ).scalar_one_or_none()
        if recipient is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipient not found.")

        message = Message(
            sender_id=sender_id,
            recipient_id=data.recipient_id,
            message_text=data.message_text,
            message_type=data.message_type,
            file_url=data.file_url,
            file_size=data.file_size,
            status=MessageStatus.SENT,
        )
        self.db.add(message)
        try:
            await self.db.commit()
            await self.db.refresh(message)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[MESSAGING ERROR] Failed to send message: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to send message.")

        logger.info(f"[MESSAGING] {sender_id} -> {data.recipient_id} ({data.message_type.value})")
        return schemas.MessageRead.model_validate(message)

    async def get_conversation(
        self, me: UUID, counterparty_id: UUID, skip: int = 0, limit: int = 50
    ) -> list[schemas.MessageRead]:
        stmt = (
            select(Message)
            .where(_between(me, counterparty_id))
            .order_by(Message.created_at.asc())
            .offset(skip)
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [schemas.MessageRead.model_validate(m) for m in rows]

    async def list_conversations(self, me: UUID) -> list[schemas.ConversationSummary]:
        """
        One summary per counterparty, most recent activity first.

        Grouping happens in SQL over the caller's whole message history: each
        thread yields its last activity and unread count, and is joined back to
        the message written at that instant.
        """
        outgoing = select(
            Message.recipient_id.label("counterparty_id"),
            Message.created_at.label("created_at"),
            literal(0).label("unread"),
        ).where(Message.sender_id == me)
        incoming = select(
            Message.sender_id.label("counterparty_id"),
            Message.created_at.label("created_at"),
            case((Message.status != MessageStatus.READ, 1), else_=0).label("unread"),
        ).where(Message.recipient_id == me)
        threads = union_all(outgoing, incoming).subquery("threads")

        summary = (
            select(
                threads.c.counterparty_id,
                func.max(threads.c.created_at).label("last_activity"),
                func.sum(threads.c.unread).label("unread_count"),
            )
            .group_by(threads.c.counterparty_id)
            .subquery("summary")
        )
        stmt = (
            select(Message, summary.c.counterparty_id, summary.c.unread_count)
            .join(
                summary,
                and_(
                    Message.created_at == summary.c.last_activity,
                    _between(me, summary.c.counterparty_id),
                ),
            )
            .order_by(summary.c.last_activity.desc(), Message.id)
        )
        try:
            rows = (await self.db.execute(stmt)).all()
        except Exception as e:
            logger.error(f"[MESSAGING] Failed to load conversations for {me}: {e}", exc_info=True)
            return []

        # Two messages sharing the last timestamp both join; keep the first.
        latest: dict[UUID, tuple[Message, int]] = {}
        for message, counterparty_id, unread_count in rows:
            latest.setdefault(counterparty_id, (message, int(unread_count or 0)))

        if not latest:
            return []

        profiles = {
            p.user_id: p
            for p in (
                await self.db.execute(select(Profile).where(Profile.user_id.in_(list(latest))))
            )
            .scalars()
            .all()
        }

        summaries = []
        for other, (msg, unread_count) in latest.items():
            profile = profiles.get(other)
            summaries.append(
                schemas.ConversationSummary(
                    counterparty_id=other,
                    counterparty_name=profile.display_name if profile else "Unknown User",
                    counterparty_avatar_url=profile.avatar_url if profile else None,
                    last_message=schemas.MessageRead.model_validate(msg),
                    last_activity=msg.created_at,
                    unread_count=unread_count,
                )
            )
        return summaries

    async def mark_conversation_read(self, me: UUID, counterparty_id: UUID) -> int:
        stmt = (
            update(Message)
            .where(
                Message.sender_id == counterparty_id,
                Message.recipient_id == me,
                Message.status != MessageStatus.READ,
            )
            .values(status=MessageStatus.READ)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[MESSAGING ERROR] Failed to mark conversation read: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to update messages.")
        return result.rowcount or 0
