from __future__ import annotations

from django.conf import settings

from apps.common.mail import DjangoMailer
from .gateway import StripeGateway
from .services import CheckoutService


def build_checkout_service() -> CheckoutService:
    return CheckoutService(
        gateway=StripeGateway(getattr(settings, "STRIPE_SECRET_KEY", "")),
        mailer=DjangoMailer(),
        currency_rates=getattr(settings, "CURRENCY_RATES", {}),
        default_currency=getattr(settings, "STRIPE_CURRENCY", "gbp"),
        notification_email=getattr(settings, "ORDER_NOTIFICATION_EMAIL", ""),
    )
