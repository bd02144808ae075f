from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import httpx

from apps.common import get_logger

logger = get_logger(__name__).bind(component="newsletter", layer="service")

ServiceError = Tuple[str, str, Optional[Any]]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class SubscriptionDTO:
    id: Optional[int]
    email: str
    registered_at: Optional[str]
    needs_confirmation: bool


def _upstream_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        detail = payload.get("message") or payload.get("detail")
        if isinstance(detail, str) and detail:
            return detail
    text = response.text.strip()
    return text[:500] if text else f"Failed to subscribe ({response.status_code})"


class NewsletterService:
    """Registers newsletter contacts with Systeme.io."""

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.transport = transport
        self.logger = logger.bind(service="NewsletterService")

    def subscribe(
        self, email: str, locale: Optional[str] = None
    ) -> Tuple[Optional[SubscriptionDTO], Optional[ServiceError]]:
        email = (email or "").strip().lower()
        if not EMAIL_PATTERN.match(email):
            return None, ("VALIDATION_ERROR", "Invalid email address", {"email": email})
        if not self.api_key:
            self.logger.error("Newsletter subscription attempted without SYSTEME_API_KEY")
            return None, (
                "CONFIGURATION_ERROR",
                "Newsletter service is not configured",
                None,
            )
        body = {"email": email, "locale": locale or "en"}
        headers = {"X-API-Key": self.api_key, "Accept": "application/json"}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.api_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            self.logger.warning("Systeme.io unreachable", error=str(exc))
            return None, ("SERVICE_UNAVAILABLE", "Newsletter service is unavailable", {"reason": str(exc)})
        if response.status_code == 409:
            return None, ("CONFLICT", "This email is already subscribed to our newsletter.", None)
        if response.is_error:
            message = _upstream_message(response)
            self.logger.warning(
                "Systeme.io rejected contact", status=response.status_code, error=message
            )
            return None, (
                "SERVICE_UNAVAILABLE",
                message,
                {"upstreamStatus": response.status_code},
            )
        data = response.json()
        self.logger.info("Newsletter contact created", contact_id=data.get("id"))
        return (
            SubscriptionDTO(
                id=data.get("id"),
                email=data.get("email") or email,
                registered_at=data.get("registeredAt"),
                needs_confirmation=bool(data.get("needsConfirmation")),
            ),
            None,
        )
