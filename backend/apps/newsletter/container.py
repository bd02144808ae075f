from __future__ import annotations

from django.conf import settings

from .services import NewsletterService


def build_newsletter_service() -> NewsletterService:
    return NewsletterService(
        api_key=getattr(settings, "SYSTEME_API_KEY", ""),
        api_url=getattr(settings, "SYSTEME_API_URL", "https://api.systeme.io/api/contacts"),
        timeout=getattr(settings, "SYSTEME_TIMEOUT", 10.0),
    )
