"""
skillconnect/payment/gateway.py

Stripe Checkout Gateway

Thin async wrapper over the Stripe SDK used by the payment service:
- Customer lookup by email (create when absent)
- Hosted Checkout session creation / retrieval / expiry
- Webhook signature verification

The SDK is synchronous; calls run in the threadpool. Every Stripe failure is
re-raised as PaymentGatewayError so callers handle a single error type.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import stripe
from fastapi.concurrency import run_in_threadpool

from skillconnect.core.config import settings

logger = logging.getLogger(__name__)

PAID = "paid"


class PaymentGatewayError(Exception):
    """Stripe rejected or failed a request."""


class WebhookSignatureError(PaymentGatewayError):
    """Webhook payload could not be authenticated."""


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str | None
    payment_status: str
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAID


def _to_checkout_session(obj: Any) -> CheckoutSession:
    return CheckoutSession(
        id=obj["id"],
        url=obj.get("url"),
        payment_status=obj.get("payment_status") or "unpaid",
        metadata=dict(obj.get("metadata") or {}),
    )


class StripeGateway:
    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key or settings.STRIPE_SECRET_KEY

    async def _call(self, description: str, func: Any, *args: Any, **kwargs: Any) -> Any:
        if not self.api_key:
            logger.error("[STRIPE] STRIPE_SECRET_KEY is not configured")
            raise PaymentGatewayError("Payment provider is not configured")
        try:
            return await run_in_threadpool(func, *args, api_key=self.api_key, **kwargs)
        except stripe.StripeError as e:
            logger.error(f"[STRIPE] {description} failed: {e.user_message or e}")
            raise PaymentGatewayError(f"{description} failed") from e

    async def find_or_create_customer(self, email: str) -> str:
        customers = await self._call("Customer lookup", stripe.Customer.list, email=email, limit=1)
        if customers.data:
            return customers.data[0].id
        customer = await self._call("Customer creation", stripe.Customer.create, email=email)
        logger.info(f"[STRIPE] Created customer {customer.id}")
        return customer.id

    async def create_checkout_session(
        self,
        *,
        customer_id: str,
        unit_amount: int,
        currency: str,
        product_name: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> CheckoutSession:
        """One-line-item payment session; `unit_amount` is in minor units."""
        session = await self._call(
            "Checkout session creation",
            stripe.checkout.Session.create,
            customer=customer_id,
            mode="payment",
            line_items=[
                {
                    "price_data": {
                        "currency": currency,
                        "product_data": {"name": product_name},
                        "unit_amount": unit_amount,
                    },
                    "quantity": 1,
                }
            ],
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
        )
        return _to_checkout_session(session)

    async def retrieve_session(self, session_id: str) -> CheckoutSession | None:
        """Return the session, or None when Stripe has no session with this id."""
        try:
            session = await self._call(
                "Checkout session retrieval", stripe.checkout.Session.retrieve, session_id
            )
        except PaymentGatewayError as e:
            cause = e.__cause__
            if isinstance(cause, stripe.InvalidRequestError) and cause.code == "resource_missing":
                return None
            raise
        return _to_checkout_session(session)

    async def expire_session(self, session_id: str) -> None:
        await self._call("Checkout session expiry", stripe.checkout.Session.expire, session_id)
        logger.info(f"[STRIPE] Expired checkout session {session_id}")

    def construct_event(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        if not settings.STRIPE_WEBHOOK_SECRET:
            raise WebhookSignatureError("Webhook secret is not configured")
        try:
            event = stripe.Webhook.construct_event(
                payload, signature or "", settings.STRIPE_WEBHOOK_SECRET
            )
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"[STRIPE] Rejected webhook payload: {e}")
            raise WebhookSignatureError("Invalid webhook signature") from e
        return event


def session_from_event(event: dict[str, Any]) -> CheckoutSession:
    return _to_checkout_session(event["data"]["object"])
