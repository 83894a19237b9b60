"""
skillconnect/core/email.py

Email Sending Utilities

Renders Jinja2 templates and hands the result to SendGrid. Returns the
provider's message id so callers can report delivery ids back to clients.
No retries: any failure surfaces as EmailDeliveryError.
"""

import logging
from datetime import datetime
from typing import Any

from fastapi.concurrency import run_in_threadpool
from jinja2 import Environment, FileSystemLoader, select_autoescape
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail, To

from skillconnect.core.config import settings
from skillconnect.core.exceptions import EmailDeliveryError

# Logger configuration
logger = logging.getLogger(__name__)

# Jinja2 template environment setup
jinja_env: Environment | None = None
try:
    template_dir = settings.mail_templates_path
    if not template_dir.is_dir():
        raise FileNotFoundError(f"Email template directory not found: {template_dir}")

    jinja_env = Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(["html", "xml"]),
    )
    logger.info(f"Jinja2 environment initialized with templates in: {template_dir}")
except FileNotFoundError:
    logger.exception("Failed to initialize Jinja2 environment")
    jinja_env = None


def render_template(template_name: str, context: dict[str, Any]) -> str:
    """
    Renders an email template using Jinja2 with provided context.

    Args:
        template_name (str): Name of the template file.
        context (dict[str, Any]): Variables to pass to the template.
    Returns:
        str: Rendered HTML content.
    """
    if not jinja_env:
        logger.error("Jinja2 environment not available")
        raise EmailDeliveryError("Email template environment not initialized")

    try:
        template = jinja_env.get_template(template_name)
        full_context = {
            "year": datetime.now().year,
            "company_name": settings.MAIL_FROM_NAME or settings.APP_NAME,
            "app_name": settings.APP_NAME,
            "base_url": str(settings.BASE_URL).rstrip("/"),
            "support_email": str(settings.SUPPORT_EMAIL),
            **context,
        }
        rendered_content = template.render(full_context)
        logger.debug(f"Successfully rendered template: {template_name}")
        return rendered_content
    except Exception as e:
        logger.error(f"Failed to render template '{template_name}': {str(e)}")
        raise EmailDeliveryError(f"Failed to render email template {template_name}") from e


async def send_email(to_email: str, subject: str, html_content: str) -> str | None:
    """
    Sends an email using the SendGrid API.

    Returns:
        The provider message id, or None when sending is disabled.
    Raises:
        EmailDeliveryError: configuration missing, transport failure or non-2xx status.
    """
    if not settings.EMAILS_ENABLED:
        logger.warning(
            f"Email sending disabled. Skipping send to {to_email} for subject '{subject}'"
        )
        return None

    if not all([settings.SENDGRID_API_KEY, settings.MAIL_FROM]):
        logger.error("SendGrid API Key or MAIL_FROM setting is missing")
        raise EmailDeliveryError("Email service configuration missing")

    message = Mail(
        from_email=From(
            email=str(settings.MAIL_FROM), name=settings.MAIL_FROM_NAME or settings.APP_NAME
        ),
        to_emails=To(str(to_email)),
        subject=subject,
        html_content=html_content,
    )

    try:
        sg = SendGridAPIClient(settings.SENDGRID_API_KEY)
        response = await run_in_threadpool(sg.send, message)
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {str(e)}")
        raise EmailDeliveryError(f"Failed to send email to {to_email}") from e

    if response.status_code >= 300:
        logger.error(f"SendGrid API error: Status={response.status_code}, Body={response.body}")
        raise EmailDeliveryError(f"Mail provider returned status {response.status_code}")

    message_id = response.headers.get("X-Message-Id") if response.headers else None
    logger.info(
        f"Email sent to {to_email} for subject '{subject}' "
        f"(status={response.status_code}, id={message_id})"
    )
    return message_id
