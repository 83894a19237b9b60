"""
skillconnect/notification/routes.py

In-app notification routes (owner only): list, mark one read, mark all read.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.core.dependencies import PaginationParams, SessionDep
from skillconnect.core.limiter import limiter
from skillconnect.core.schemas import PaginatedResponse
from skillconnect.database.session import get_db
from skillconnect.notification import schemas
from skillconnect.notification.services import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])

DBDep = Annotated[AsyncSession, Depends(get_db)]


@router.get(
    "",
    response_model=PaginatedResponse[schemas.NotificationRead],
    status_code=status.HTTP_200_OK,
    summary="List My Notifications",
)
@limiter.limit("30/minute")
async def list_my_notifications(
    request: Request,
    db: DBDep,
    session: SessionDep,
    unread_only: bool = Query(False, description="Only return unread notifications"),
    pagination: PaginationParams = Depends(),
) -> PaginatedResponse[schemas.NotificationRead]:
    items, total = await NotificationService(db).list_my_notifications(
        session.user_id, unread_only=unread_only, skip=pagination.skip, limit=pagination.limit
    )
    return PaginatedResponse[schemas.NotificationRead].from_page(
        items, total, pagination.skip, pagination.limit
    )


@router.post(
    "/read-all",
    response_model=schemas.MarkAllReadResult,
    status_code=status.HTTP_200_OK,
    summary="Mark All Notifications Read",
)
@limiter.limit("10/minute")
async def mark_all_read(
    request: Request, db: DBDep, session: SessionDep
) -> schemas.MarkAllReadResult:
    updated = await NotificationService(db).mark_all_read(session.user_id)
    return schemas.MarkAllReadResult(updated=updated)


@router.post(
    "/{notification_id}/read",
    response_model=schemas.NotificationRead,
    status_code=status.HTTP_200_OK,
    summary="Mark Notification Read",
)
@limiter.limit("30/minute")
async def mark_read(
    request: Request,
    notification_id: UUID,
    db: DBDep,
    session: SessionDep,
) -> schemas.NotificationRead:
    return await NotificationService(db).mark_read(session.user_id, notification_id)
