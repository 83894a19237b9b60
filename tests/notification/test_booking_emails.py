# tests/notification/test_booking_emails.py
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from skillconnect.core import email
from skillconnect.core.exceptions import EmailDeliveryError
from skillconnect.notification.schemas import BookingEmailData
from skillconnect.notification.services import BookingEmailService, format_amount


@pytest.fixture
def email_data() -> BookingEmailData:
    return BookingEmailData(
        booking_id=uuid4(),
        client_email="client.test@example.com",
        provider_email="provider.test@example.com",
        client_name="Nino Client",
        provider_name="Giorgi Provider",
        service_title="Deep Apartment Cleaning",
        amount=50.0,
        currency="gel",
        booking_date=datetime(2026, 11, 3, 10, 30, tzinfo=timezone.utc),
    )


@pytest.mark.parametrize(
    "amount, currency, expected",
    [
        (50.0, "gel", "₾50"),
        (49.5, "usd", "$49.5"),
        (1250.75, "EUR", "€1,250.75"),
        (10.0, "chf", "10 CHF"),
    ],
)
def test_format_amount(amount: float, currency: str, expected: str) -> None:
    assert format_amount(amount, currency) == expected


@pytest.mark.asyncio
@patch.object(email, "send_email", new_callable=AsyncMock)
async def test_sends_exactly_one_email_to_each_party(
    mock_send: AsyncMock, email_data: BookingEmailData
) -> None:
    mock_send.side_effect = ["msg-client", "msg-provider"]

    result = await BookingEmailService().send_booking_emails(email_data)

    assert mock_send.await_count == 2
    (client_to, client_subject, client_html), _ = mock_send.call_args_list[0]
    (provider_to, provider_subject, provider_html), _ = mock_send.call_args_list[1]

    assert client_to == "client.test@example.com"
    assert client_subject == "Booking Confirmed - Deep Apartment Cleaning"
    assert "Giorgi Provider" in client_html
    assert "₾50" in client_html

    assert provider_to == "provider.test@example.com"
    assert provider_subject == "New Booking Received - Deep Apartment Cleaning"
    assert "Nino Client" in provider_html
    assert "client.test@example.com" in provider_html

    assert result.client_email_id == "msg-client"
    assert result.provider_email_id == "msg-provider"


@pytest.mark.asyncio
@patch.object(email, "send_email", new_callable=AsyncMock)
async def test_client_email_failure_stops_before_provider_email(
    mock_send: AsyncMock, email_data: BookingEmailData
) -> None:
    mock_send.side_effect = EmailDeliveryError("Mail provider returned status 503")

    with pytest.raises(EmailDeliveryError):
        await BookingEmailService().send_booking_emails(email_data)

    assert mock_send.await_count == 1


@pytest.mark.asyncio
async def test_disabled_sending_returns_no_message_ids(email_data: BookingEmailData) -> None:
    with patch.object(email.settings, "EMAILS_ENABLED", False):
        result = await BookingEmailService().send_booking_emails(email_data)

    assert result.client_email_id is None
    assert result.provider_email_id is None


def test_render_template_escapes_user_content() -> None:
    html = email.render_template(
        "booking_received_provider.html",
        {
            "service_title": "Cleaning",
            "client_name": "<script>alert(1)</script>",
            "client_email": "client.test@example.com",
            "provider_name": "Giorgi",
            "amount_display": "₾50",
            "booking_id": "b-1",
            "booking_date": None,
        },
    )
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
