from __future__ import annotations

import json
import smtplib
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from django.utils import timezone

from apps.common import get_logger
from apps.common.mail import MailerProtocol
from .commands import OrderEmailCommand, OrderLine, PaymentIntentCommand
from .dtos import (
    CurrencyDTO,
    CurrencyRatesDTO,
    OrderEmailDTO,
    PaymentIntentDTO,
    ShippingRateDTO,
)
from .emails import build_order_details, order_number, order_subject, render_order_email
from .gateway import PaymentGatewayError
from .pricing import BASE_CURRENCY, CURRENCY_INFO, exchange_rate, is_supported, to_minor_units
from .protocols import PaymentGatewayProtocol
from .shipping import shipping_rates

logger = get_logger(__name__).bind(component="checkout", layer="service")

ServiceError = Tuple[str, str, Optional[Any]]

# Stripe caps metadata values at 500 characters.
METADATA_VALUE_LIMIT = 500


def items_metadata(items: List[OrderLine]) -> Tuple[str, bool]:
    """Serialise order lines for intent metadata, dropping trailing lines that do not fit."""
    rows = [item.as_metadata() for item in items]
    encoded = json.dumps(rows, separators=(",", ":"))
    truncated = False
    while rows and len(encoded) > METADATA_VALUE_LIMIT:
        rows.pop()
        truncated = True
        encoded = json.dumps(rows, separators=(",", ":"))
    return encoded, truncated


class CheckoutService:
    def __init__(
        self,
        gateway: PaymentGatewayProtocol,
        mailer: MailerProtocol,
        *,
        currency_rates: Mapping[str, Any],
        default_currency: str = BASE_CURRENCY,
        notification_email: str = "",
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.gateway = gateway
        self.mailer = mailer
        self.currency_rates = currency_rates or {}
        self.default_currency = default_currency.upper()
        self.notification_email = notification_email
        self.clock = clock
        self.logger = logger.bind(service="CheckoutService")

    # Reference data

    def shipping_rates(self, country: str) -> List[ShippingRateDTO]:
        rates = shipping_rates(country)
        self.logger.debug("Shipping rates resolved", country=country, rates=len(rates))
        return [
            ShippingRateDTO(
                id=rate.id,
                name=rate.name,
                description=rate.description,
                price=rate.price,
                estimated_days=rate.estimated_days,
            )
            for rate in rates
        ]

    def currency_rates_overview(self) -> CurrencyRatesDTO:
        currencies = []
        for code, info in CURRENCY_INFO.items():
            rate = Decimal("1") if code == BASE_CURRENCY else exchange_rate(code, self.currency_rates)
            currencies.append(
                CurrencyDTO(
                    code=code,
                    symbol=info.symbol,
                    name=info.name,
                    decimals=info.decimals,
                    rate=rate,
                )
            )
        return CurrencyRatesDTO(base=BASE_CURRENCY, currencies=currencies)

    # Payments

    def _gateway_error(self, exc: PaymentGatewayError) -> ServiceError:
        if exc.code == "CONFIGURATION_ERROR":
            return ("CONFIGURATION_ERROR", exc.message, None)
        return ("PAYMENT_ERROR", exc.message, {"providerCode": exc.code} if exc.code else None)

    def create_payment_intent(
        self,
        cmd: PaymentIntentCommand,
        *,
        user_id: Optional[int],
        customer_email: Optional[str] = None,
    ) -> Tuple[Optional[PaymentIntentDTO], Optional[ServiceError]]:
        if cmd.amount <= 0:
            return None, ("VALIDATION_ERROR", "Invalid amount", {"amount": str(cmd.amount)})
        currency = cmd.currency if is_supported(cmd.currency) else self.default_currency
        items_json, truncated = items_metadata(cmd.items)
        metadata: Dict[str, str] = {
            **cmd.metadata,
            "items": items_json,
            "originalAmount": str(cmd.amount),
            "currency": currency,
            "shippingCost": str(cmd.shipping_cost),
            "shippingMethod": cmd.shipping_method,
        }
        if truncated:
            metadata["itemsTruncated"] = "true"
        if user_id is not None:
            metadata.setdefault("userId", str(user_id))
        email = metadata.get("customerEmail") or customer_email
        try:
            intent = self.gateway.create_intent(
                amount=to_minor_units(cmd.amount, currency),
                currency=currency,
                metadata={k: v[:METADATA_VALUE_LIMIT] for k, v in metadata.items()},
                shipping=cmd.shipping_address.as_stripe() if cmd.shipping_address else None,
                receipt_email=email or None,
            )
        except PaymentGatewayError as exc:
            self.logger.warning(
                "Payment intent creation failed", user_id=user_id, currency=currency, error=exc.message
            )
            return None, self._gateway_error(exc)
        self.logger.info(
            "Payment intent ready",
            user_id=user_id,
            intent_id=intent.id,
            currency=currency,
            items=len(cmd.items),
        )
        return PaymentIntentDTO(client_secret=intent.client_secret, payment_intent_id=intent.id), None

    # Order email

    def _send(self, *, subject: str, text: str, html: str, to: List[str]) -> bool:
        try:
            self.mailer.send(subject=subject, text=text, html=html, to=to)
        except (smtplib.SMTPException, OSError) as exc:
            self.logger.error("Order email delivery failed", recipients=to, error=str(exc))
            return False
        return True

    def send_order_email(
        self, cmd: OrderEmailCommand
    ) -> Tuple[Optional[OrderEmailDTO], Optional[ServiceError]]:
        try:
            intent = self.gateway.retrieve_intent(cmd.payment_intent_id)
        except PaymentGatewayError as exc:
            if exc.code == "CONFIGURATION_ERROR":
                return None, self._gateway_error(exc)
            return None, (
                "PAYMENT_ERROR",
                "Failed to retrieve payment intent",
                {"paymentIntentId": cmd.payment_intent_id},
            )
        if intent.status != "succeeded":
            self.logger.info(
                "Order email refused for unpaid intent", intent_id=intent.id, status=intent.status
            )
            return None, (
                "PAYMENT_ERROR",
                f"Payment status is {intent.status}, not succeeded",
                {"status": intent.status},
            )
        details = build_order_details(intent, cmd, order_date=self.clock())
        text, html = render_order_email(details)
        subject = order_subject(intent.id)
        if not self._send(subject=subject, text=text, html=html, to=[cmd.customer_email]):
            return None, ("EMAIL_ERROR", "Failed to send order confirmation email", None)
        recipients = [cmd.customer_email]
        if self.notification_email:
            # Shop copy is best effort; the customer email already went out.
            if self._send(
                subject=f"New Order - #{order_number(intent.id)}",
                text=text,
                html=html,
                to=[self.notification_email],
            ):
                recipients.append(self.notification_email)
        self.logger.info("Order confirmation sent", intent_id=intent.id, recipients=len(recipients))
        return (
            OrderEmailDTO(
                success=True,
                message="Order confirmation email sent",
                order_id=intent.id,
                recipients=recipients,
            ),
            None,
        )
