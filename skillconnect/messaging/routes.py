"""
skillconnect/messaging/routes.py

Messaging Routes
- POST /messages: send a direct message
- GET /messages/conversations: conversation list with unread counts
- GET /messages/conversations/{counterparty_id}: full conversation
- POST /messages/conversations/{counterparty_id}/read: mark incoming messages read
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.core.dependencies import PaginationParams, SessionDep
from skillconnect.core.limiter import limiter
from skillconnect.database.session import get_db
from skillconnect.messaging import schemas
from skillconnect.messaging.services import MessageService

router = APIRouter(prefix="/messages", tags=["Messaging"])

DBDep = Annotated[AsyncSession, Depends(get_db)]


@router.post(
    "",
    response_model=schemas.MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send Message",
)
@limiter.limit("30/minute")
async def send_message(
    request: Request,
    data: schemas.MessageCreate,
    db: DBDep,
    session: SessionDep,
) -> schemas.MessageRead:
    return await MessageService(db).send_message(session.user_id, data)


@router.get(
    "/conversations",
    response_model=list[schemas.ConversationSummary],
    status_code=status.HTTP_200_OK,
    summary="List Conversations",
)
@limiter.limit("30/minute")
async def list_conversations(
    request: Request, db: DBDep, session: SessionDep
) -> list[schemas.ConversationSummary]:
    return await MessageService(db).list_conversations(session.user_id)


@router.get(
    "/conversations/{counterparty_id}",
    response_model=list[schemas.MessageRead],
    status_code=status.HTTP_200_OK,
    summary="Get Conversation",
    description="Messages exchanged with one counterparty, oldest first.",
)
@limiter.limit("60/minute")
async def get_conversation(
    request: Request,
    counterparty_id: UUID,
    db: DBDep,
    session: SessionDep,
    pagination: PaginationParams = Depends(),
) -> list[schemas.MessageRead]:
    return await MessageService(db).get_conversation(
        session.user_id, counterparty_id, skip=pagination.skip, limit=pagination.limit
    )


@router.post(
    "/conversations/{counterparty_id}/read",
    response_model=schemas.MarkReadResult,
    status_code=status.HTTP_200_OK,
    summary="Mark Conversation Read",
)
@limiter.limit("60/minute")
async def mark_conversation_read(
    request: Request,
    counterparty_id: UUID,
    db: DBDep,
    session: SessionDep,
) -> schemas.MarkReadResult:
    updated = await MessageService(db).mark_conversation_read(session.user_id, counterparty_id)
    return schemas.MarkReadResult(updated=updated)
