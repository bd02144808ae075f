from __future__ import annotations

import smtplib
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from django.template.loader import render_to_string

from apps.common import get_logger
from apps.common.mail import MailerProtocol

logger = get_logger(__name__).bind(component="contact", layer="service")

ServiceError = Tuple[str, str, Optional[Any]]

HTML_TEMPLATE = "contact/contact_message.html"
TEXT_TEMPLATE = "contact/contact_message.txt"


@dataclass
class ContactMessageCommand:
    name: str
    email: str
    phone: str
    message: str


class ContactService:
    """Forwards contact-form messages to the shop inbox with the sender as reply-to."""

    def __init__(self, mailer: MailerProtocol, recipient: str):
        self.mailer = mailer
        self.recipient = recipient
        self.logger = logger.bind(service="ContactService")

    def send_message(self, cmd: ContactMessageCommand) -> Tuple[bool, Optional[ServiceError]]:
        if not self.recipient:
            self.logger.error("Contact message dropped: CONTACT_EMAIL is not set")
            return False, ("CONFIGURATION_ERROR", "Email service is not configured", None)
        context = {"name": cmd.name, "email": cmd.email, "phone": cmd.phone, "message": cmd.message}
        try:
            self.mailer.send(
                subject=f"New Contact Form Submission from {cmd.name}",
                text=render_to_string(TEXT_TEMPLATE, context),
                html=render_to_string(HTML_TEMPLATE, context),
                to=[self.recipient],
                reply_to=[cmd.email],
            )
        except (smtplib.SMTPException, OSError) as exc:
            self.logger.error("Contact message delivery failed", error=str(exc))
            return False, ("EMAIL_ERROR", "Failed to send message. Please try again.", None)
        self.logger.info("Contact message forwarded", sender=cmd.email)
        return True, None
