"""
skillconnect/payment/routes.py

Payment Routes
- Start a hosted checkout for a service (client only)
- Verify a checkout after the success redirect
- Stripe webhook receiver (checkout.session.completed)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.core.dependencies import ClientDep, SessionDep
from skillconnect.core.limiter import limiter
from skillconnect.database.session import get_db
from skillconnect.payment import schemas
from skillconnect.payment.gateway import WebhookSignatureError
from skillconnect.payment.services import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])

DBDep = Annotated[AsyncSession, Depends(get_db)]


@router.post(
    "/checkout",
    response_model=schemas.CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Checkout Session",
    description=(
        "Create a Stripe Checkout session for an active service and record a pending booking. "
        "The amount is taken from the service rate."
    ),
)
@limiter.limit("10/minute")
async def create_checkout(
    request: Request,
    data: schemas.CheckoutRequest,
    db: DBDep,
    current_user: ClientDep,
) -> schemas.CheckoutResponse:
    return await PaymentService(db).create_checkout(current_user, data)


@router.post(
    "/verify",
    response_model=schemas.VerifyPaymentResponse,
    status_code=status.HTTP_200_OK,
    summary="Verify Payment",
    description=(
        "Check the checkout session with Stripe and confirm the booking when paid. "
        "Confirmation emails are sent only by the call that confirms the booking."
    ),
)
@limiter.limit("20/minute")
async def verify_payment(
    request: Request,
    data: schemas.VerifyPaymentRequest,
    db: DBDep,
    current_user: SessionDep,
) -> schemas.VerifyPaymentResponse:
    return await PaymentService(db).verify_payment(data.session_id, caller=current_user)


@router.post(
    "/webhook",
    response_model=schemas.WebhookAck,
    status_code=status.HTTP_200_OK,
    summary="Stripe Webhook",
    include_in_schema=False,
)
async def stripe_webhook(
    request: Request,
    db: DBDep,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
) -> schemas.WebhookAck:
    payload = await request.body()
    try:
        return await PaymentService(db).handle_webhook(payload, stripe_signature)
    except WebhookSignatureError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature")
