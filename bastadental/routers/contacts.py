"""Public contact form."""

from __future__ import annotations

import logging
import smtplib
from typing import Optional

from fastapi import APIRouter, Depends

from bastadental.errors import MailDeliveryError, ValidationFailed
from bastadental.routers.responses import CamelModel, ContactEnvelope
from bastadental.utils.config import Settings, get_settings
from mail_service.smtp_adapter import SMTPMailAdapter

LOGGER = logging.getLogger(__name__)

router = APIRouter()


class ContactRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None


SEND_FAILED_MESSAGE = "Failed to send your message. Please try again later."


def get_mail_adapter(settings: Settings = Depends(get_settings)) -> SMTPMailAdapter:
    try:
        return SMTPMailAdapter(
            smtp_url=settings.email_smtp,
            sender=settings.mail_sender,
            recipient=settings.mail_recipient,
            timeout_seconds=settings.mail_timeout_seconds,
        )
    except ValueError as exc:
        LOGGER.error("Mail relay misconfigured: %s", exc)
        raise MailDeliveryError(SEND_FAILED_MESSAGE) from exc


@router.post("/submit", response_model=ContactEnvelope)
def submit_contact_form(
    payload: ContactRequest,
    mailer: SMTPMailAdapter = Depends(get_mail_adapter),
) -> ContactEnvelope:
    """Forward a visitor's message to the clinic inbox."""

    if not payload.name or not payload.email or not payload.message:
        raise ValidationFailed("Name, email, and message are required")

    LOGGER.info("Processing contact form submission from %s", payload.email)
    try:
        result = mailer.send_contact_email(
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
            message=payload.message,
        )
    except (smtplib.SMTPException, OSError) as exc:
        LOGGER.error("Contact mail failed: %s", exc)
        raise MailDeliveryError(SEND_FAILED_MESSAGE) from exc

    if result["test_mode"]:
        return ContactEnvelope(
            message="Your message was processed in test mode.",
            test_mode=True,
        )
    return ContactEnvelope(message="Your message has been sent successfully!")
