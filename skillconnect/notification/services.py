"""
skillconnect/notification/services.py

Notification Service Layer
- BookingEmailService: renders and sends the confirmation email pair
  (client + provider) for a confirmed booking. No retries; failures propagate.
- NotificationService: owner-only reads and read-flag updates for in-app
  notifications.
"""

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.core import email
from skillconnect.notification import schemas
from skillconnect.notification.models import Notification

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = {"gel": "₾", "usd": "$", "eur": "€", "gbp": "£"}


def format_amount(amount: float, currency: str) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.lower())
    value = f"{amount:,.2f}".rstrip("0").rstrip(".")
    return f"{symbol}{value}" if symbol else f"{value} {currency.upper()}"


# ---------------------------------------------------
# Booking Emails
# ---------------------------------------------------
class BookingEmailService:
    CLIENT_TEMPLATE = "booking_confirmed_client.html"
    PROVIDER_TEMPLATE = "booking_received_provider.html"

    async def send_booking_emails(
        self, data: schemas.BookingEmailData
    ) -> schemas.BookingEmailResult:
        """
        Send the client confirmation then the provider notice.

        Raises:
            EmailDeliveryError: rendering or delivery of either email failed.
        """
        context = {
            "booking_id": str(data.booking_id),
            "client_name": data.client_name,
            "provider_name": data.provider_name,
            "client_email": data.client_email,
            "service_title": data.service_title,
            "amount_display": format_amount(data.amount, data.currency),
            "booking_date": data.booking_date.strftime("%Y-%m-%d %H:%M")
            if data.booking_date
            else None,
        }

        client_email_id = await email.send_email(
            data.client_email,
            f"Booking Confirmed - {data.service_title}",
            email.render_template(self.CLIENT_TEMPLATE, context),
        )
        provider_email_id = await email.send_email(
            data.provider_email,
            f"New Booking Received - {data.service_title}",
            email.render_template(self.PROVIDER_TEMPLATE, context),
        )
        logger.info(
            f"[NOTIFY] Booking {data.booking_id} emails sent "
            f"(client={client_email_id}, provider={provider_email_id})"
        )
        return schemas.BookingEmailResult(
            client_email_id=client_email_id, provider_email_id=provider_email_id
        )


# ---------------------------------------------------
# In-App Notifications
# ---------------------------------------------------
class NotificationService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_my_notifications(
        self, user_id: UUID, unread_only: bool = False, skip: int = 0, limit: int = 50
    ) -> tuple[list[schemas.NotificationRead], int]:
        filters = [Notification.user_id == user_id]
        if unread_only:
            filters.append(Notification.read.is_(False))

        total = (
            await self.db.execute(select(func.count(Notification.id)).where(*filters))
        ).scalar_one()
        stmt = (
            select(Notification)
            .where(*filters)
            .order_by(Notification.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [schemas.NotificationRead.model_validate(n) for n in rows], total

    async def mark_read(self, user_id: UUID, notification_id: UUID) -> schemas.NotificationRead:
        stmt = select(Notification).where(
            Notification.id == notification_id, Notification.user_id == user_id
        )
        notification = (await self.db.execute(stmt)).scalars().first()
        if not notification:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found."
            )
        if not notification.read:
            notification.read = True
            try:
                await self.db.commit()
                await self.db.refresh(notification)
            except Exception as e:
                await self.db.rollback()
                logger.error(f"[NOTIFY ERROR] Failed to mark notification read: {e}", exc_info=True)
                raise HTTPException(status_code=500, detail="Failed to update notification.")
        return schemas.NotificationRead.model_validate(notification)

    async def mark_all_read(self, user_id: UUID) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[NOTIFY ERROR] Failed to mark notifications read: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to update notifications.")
        return result.rowcount or 0
