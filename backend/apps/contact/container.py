from __future__ import annotations

from django.conf import settings

from apps.common.mail import DjangoMailer
from .services import ContactService


def build_contact_service() -> ContactService:
    return ContactService(
        mailer=DjangoMailer(),
        recipient=getattr(settings, "CONTACT_EMAIL", ""),
    )
