"""
skillconnect/payment/services.py

Payment Service Layer

Checkout creation:
    service lookup (active, owned by the given provider) -> Stripe customer
    lookup/creation -> Checkout session -> pending Booking carrying the
    session id. If the booking insert fails the session is expired and the
    orphan is logged for reconciliation.

Verification (redirect or webhook):
    Stripe session lookup -> atomic `pending -> confirmed` update matched by
    stripe_session_id -> confirmation emails. Emails go out only when this
    call performed the transition, so repeated verification never re-sends.
    "Email failed" and "confirmation failed" are reported with distinct codes.
"""

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.booking.models import Booking
from skillconnect.booking.schemas import BookingRead
from skillconnect.core.config import settings
from skillconnect.core.dependencies import SessionContext
from skillconnect.core.exceptions import APIError, EmailDeliveryError
from skillconnect.database.enums import BookingStatus
from skillconnect.database.models import Profile
from skillconnect.notification.schemas import BookingEmailData
from skillconnect.notification.services import BookingEmailService
from skillconnect.payment import schemas
from skillconnect.payment.gateway import (
    CheckoutSession,
    PaymentGatewayError,
    StripeGateway,
    session_from_event,
)
from skillconnect.service.models import Service

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED_EVENT = "checkout.session.completed"


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


class PaymentService:
    def __init__(
        self,
        db: AsyncSession,
        gateway: StripeGateway | None = None,
        notifier: BookingEmailService | None = None,
    ) -> None:
        self.db = db
        self.gateway = gateway or StripeGateway()
        self.notifier = notifier or BookingEmailService()

    # ---------------------------------------------------
    # Checkout Creation
    # ---------------------------------------------------
    async def create_checkout(
        self, session: SessionContext, data: schemas.CheckoutRequest
    ) -> schemas.CheckoutResponse:
        if not session.email:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An email address is required to start checkout.",
            )
        if data.provider_id == session.user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="You cannot book your own service."
            )

        stmt = select(Service).where(
            Service.id == data.service_id,
            Service.provider_id == data.provider_id,
            Service.is_active.is_(True),
        )
        service = (await self.db.execute(stmt)).unique().scalars().first()
        if not service:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found.")

        amount = service.rate
        currency = settings.DEFAULT_CURRENCY
        provider_name = service.provider.display_name if service.provider else "Provider"
        logger.info(
            f"[PAYMENT] Client {session.user_id} starting checkout for service {service.id} "
            f"({amount} {currency})"
        )

        try:
            customer_id = await self.gateway.find_or_create_customer(session.email)
            checkout = await self.gateway.create_checkout_session(
                customer_id=customer_id,
                unit_amount=to_minor_units(amount),
                currency=currency,
                product_name=f"{service.title} - {provider_name}",
                success_url=settings.checkout_success_url,
                cancel_url=settings.checkout_cancel_url,
                metadata={
                    "serviceId": str(service.id),
                    "providerId": str(data.provider_id),
                    "clientId": str(session.user_id),
                    "amount": str(amount),
                    "currency": currency,
                },
            )
        except PaymentGatewayError as e:
            raise APIError(
                status.HTTP_502_BAD_GATEWAY,
                "Payment provider request failed.",
                code="payment_provider_error",
            ) from e

        booking = Booking(
            client_id=session.user_id,
            provider_id=data.provider_id,
            service_id=service.id,
            amount=amount,
            currency=currency,
            status=BookingStatus.PENDING,
            stripe_session_id=checkout.id,
            booking_date=data.booking_date,
            notes=data.notes,
            duration_minutes=service.duration_minutes,
        )
        self.db.add(booking)
        try:
            await self.db.commit()
            await self.db.refresh(booking)
        except Exception as e:
            await self.db.rollback()
            logger.error(
                f"[PAYMENT RECONCILE] Booking insert failed after checkout session {checkout.id} "
                f"was created (client={session.user_id}, service={service.id}): {e}",
                exc_info=True,
            )
            await self._expire_orphan(checkout.id)
            raise APIError(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Failed to record booking.",
                code="booking_record_failed",
            )

        if not checkout.url:
            logger.error(f"[PAYMENT] Checkout session {checkout.id} returned without a URL")
            raise APIError(
                status.HTTP_502_BAD_GATEWAY,
                "Payment provider request failed.",
                code="payment_provider_error",
            )

        logger.info(f"[PAYMENT] Booking {booking.id} pending on checkout session {checkout.id}")
        return schemas.CheckoutResponse(url=checkout.url, session_id=checkout.id, booking_id=booking.id)

    async def _expire_orphan(self, session_id: str) -> None:
        try:
            await self.gateway.expire_session(session_id)
        except PaymentGatewayError:
            logger.error(
                f"[PAYMENT RECONCILE] Could not expire orphaned checkout session {session_id}; "
                "manual reconciliation required"
            )

    # ---------------------------------------------------
    # Verification
    # ---------------------------------------------------
    async def verify_payment(
        self, session_id: str, caller: SessionContext | None = None
    ) -> schemas.VerifyPaymentResponse:
        """
        Confirm the booking behind a checkout session once Stripe reports it paid.
        When `caller` is given, only the booking's client or provider may verify.
        """
        try:
            checkout = await self.gateway.retrieve_session(session_id)
        except PaymentGatewayError as e:
            raise APIError(
                status.HTTP_502_BAD_GATEWAY,
                "Payment provider request failed.",
                code="payment_provider_error",
            ) from e
        if checkout is None:
            raise APIError(
                status.HTTP_404_NOT_FOUND, "Checkout session not found.", code="session_not_found"
            )
        return await self.confirm_session(checkout, caller)

    async def confirm_session(
        self, checkout: CheckoutSession, caller: SessionContext | None = None
    ) -> schemas.VerifyPaymentResponse:
        stmt = select(Booking).where(Booking.stripe_session_id == checkout.id)
        booking = (await self.db.execute(stmt)).scalars().first()
        if booking is None or (
            caller is not None and caller.user_id not in (booking.client_id, booking.provider_id)
        ):
            raise APIError(
                status.HTTP_404_NOT_FOUND,
                "No booking found for this checkout session.",
                code="booking_not_found",
            )

        if not checkout.is_paid:
            logger.info(
                f"[PAYMENT] Session {checkout.id} not paid (status={checkout.payment_status}); "
                "booking left unchanged"
            )
            return schemas.VerifyPaymentResponse(
                confirmed=booking.status == BookingStatus.CONFIRMED,
                payment_status=checkout.payment_status,
                booking=BookingRead.model_validate(booking),
            )

        confirm = (
            update(Booking)
            .where(
                Booking.stripe_session_id == checkout.id,
                Booking.status == BookingStatus.PENDING,
            )
            .values(status=BookingStatus.CONFIRMED)
            .returning(Booking)
        )
        try:
            confirmed = (await self.db.execute(confirm)).scalars().first()
            await self.db.commit()
            await self.db.refresh(booking)
        except Exception as e:
            await self.db.rollback()
            logger.error(
                f"[PAYMENT] Failed to confirm booking for session {checkout.id}: {e}", exc_info=True
            )
            raise APIError(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Failed to confirm booking.",
                code="confirmation_failed",
            )

        if confirmed is None:
            logger.info(
                f"[PAYMENT] Session {checkout.id} already processed "
                f"(booking {booking.id} is {booking.status.value}); no emails sent"
            )
            return schemas.VerifyPaymentResponse(
                confirmed=booking.status == BookingStatus.CONFIRMED,
                payment_status=checkout.payment_status,
                booking=BookingRead.model_validate(booking),
            )

        logger.info(f"[PAYMENT] Booking {booking.id} confirmed for session {checkout.id}")
        response = schemas.VerifyPaymentResponse(
            confirmed=True,
            payment_status=checkout.payment_status,
            booking=BookingRead.model_validate(booking),
            transitioned=True,
        )

        email_data = await self._build_email_data(booking)
        if email_data is None:
            return response

        try:
            result = await self.notifier.send_booking_emails(email_data)
        except EmailDeliveryError as e:
            logger.error(
                f"[PAYMENT] Booking {booking.id} confirmed but notification emails failed: {e}"
            )
            raise APIError(
                status.HTTP_502_BAD_GATEWAY,
                "Booking confirmed, but confirmation emails could not be sent.",
                code="notification_failed",
                extra={"booking_id": str(booking.id)},
            ) from e

        if not result.delivered:
            logger.info(f"[PAYMENT] Booking {booking.id} confirmed; email sending is disabled")
        response.emails_sent = result.delivered
        response.client_email_id = result.client_email_id
        response.provider_email_id = result.provider_email_id
        return response

    async def _build_email_data(self, booking: Booking) -> BookingEmailData | None:
        """Email payload, or None when a participant profile or the service is missing."""
        profiles: dict[UUID, Profile] = {}
        participant_ids = [pid for pid in (booking.client_id, booking.provider_id) if pid]
        if participant_ids:
            stmt = select(Profile).where(Profile.user_id.in_(participant_ids))
            profiles = {p.user_id: p for p in (await self.db.execute(stmt)).scalars().all()}

        client = profiles.get(booking.client_id)
        provider = profiles.get(booking.provider_id) if booking.provider_id else None
        service = await self.db.get(Service, booking.service_id) if booking.service_id else None

        if not (client and client.email and provider and provider.email and service):
            logger.warning(
                f"[PAYMENT] Skipping emails for booking {booking.id}: "
                f"client={'ok' if client and client.email else 'missing'}, "
                f"provider={'ok' if provider and provider.email else 'missing'}, "
                f"service={'ok' if service else 'missing'}"
            )
            return None

        return BookingEmailData(
            booking_id=booking.id,
            client_email=client.email,
            provider_email=provider.email,
            client_name=client.full_name or "Client",
            provider_name=provider.full_name or "Provider",
            service_title=service.title,
            amount=booking.amount,
            currency=booking.currency,
            booking_date=booking.booking_date,
        )

    # ---------------------------------------------------
    # Webhook
    # ---------------------------------------------------
    async def handle_webhook(self, payload: bytes, signature: str | None) -> schemas.WebhookAck:
        """
        Raises:
            WebhookSignatureError: the payload is not signed by Stripe.
        """
        event = self.gateway.construct_event(payload, signature)
        event_type = event["type"]
        if event_type != CHECKOUT_COMPLETED_EVENT:
            logger.debug(f"[PAYMENT] Ignoring webhook event {event_type}")
            return schemas.WebhookAck(handled=False)

        checkout = session_from_event(event)
        if not checkout.is_paid:
            logger.info(f"[PAYMENT] Webhook for unpaid session {checkout.id}; nothing to do")
            return schemas.WebhookAck(handled=False)

        await self.confirm_session(checkout)
        return schemas.WebhookAck(handled=True)
