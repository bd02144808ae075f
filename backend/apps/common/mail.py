from typing import List, Optional, Protocol

from django.conf import settings
from django.core.mail import EmailMultiAlternatives


class MailerProtocol(Protocol):
    def send(
        self,
        *,
        subject: str,
        text: str,
        html: str,
        to: List[str],
        reply_to: Optional[List[str]] = None,
    ) -> int: ...


class DjangoMailer:
    """Multipart mail through the configured Django email backend."""

    def __init__(self, from_email: Optional[str] = None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def send(
        self,
        *,
        subject: str,
        text: str,
        html: str,
        to: List[str],
        reply_to: Optional[List[str]] = None,
    ) -> int:
        message = EmailMultiAlternatives(subject, text, self.from_email, to, reply_to=reply_to)
        message.attach_alternative(html, "text/html")
        return message.send()
