from typing import Any, Dict, Optional

import stripe

from apps.common import get_logger
from .dtos import PaymentIntentRecord

logger = get_logger(__name__).bind(component="checkout", layer="gateway")


class PaymentGatewayError(Exception):
    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


def _plain(obj: Any) -> Dict[str, Any]:
    if obj is None:
        return {}
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


def _record(intent: Any) -> PaymentIntentRecord:
    shipping = getattr(intent, "shipping", None)
    return PaymentIntentRecord(
        id=intent.id,
        status=intent.status,
        amount=intent.amount,
        currency=(intent.currency or "").upper(),
        client_secret=getattr(intent, "client_secret", "") or "",
        metadata={str(k): str(v) for k, v in _plain(getattr(intent, "metadata", None)).items()},
        shipping=_plain(shipping) if shipping else None,
        payment_method_types=list(getattr(intent, "payment_method_types", None) or []),
    )


class StripeGateway:
    """PaymentIntents through the Stripe SDK; SDK errors become ``PaymentGatewayError``."""

    def __init__(self, api_key: str):
        self.api_key = api_key
        self.logger = logger.bind(gateway="stripe")

    def _require_key(self) -> None:
        if not self.api_key:
            raise PaymentGatewayError("Stripe is not configured", code="CONFIGURATION_ERROR")

    def create_intent(
        self,
        *,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
        shipping: Optional[Dict[str, Any]] = None,
        receipt_email: Optional[str] = None,
    ) -> PaymentIntentRecord:
        self._require_key()
        params: Dict[str, Any] = {
            "amount": amount,
            "currency": currency.lower(),
            "automatic_payment_methods": {"enabled": True, "allow_redirects": "always"},
            "metadata": metadata,
        }
        if shipping:
            params["shipping"] = shipping
        if receipt_email:
            params["receipt_email"] = receipt_email
        try:
            intent = stripe.PaymentIntent.create(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            self.logger.warning(
                "Stripe rejected payment intent", currency=currency, amount=amount, error=str(exc)
            )
            raise PaymentGatewayError(
                getattr(exc, "user_message", None) or str(exc), code=getattr(exc, "code", None)
            ) from exc
        self.logger.info("Payment intent created", intent_id=intent.id, amount=amount)
        return _record(intent)

    def retrieve_intent(self, intent_id: str) -> PaymentIntentRecord:
        self._require_key()
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            self.logger.warning("Stripe payment intent lookup failed", intent_id=intent_id, error=str(exc))
            raise PaymentGatewayError(str(exc), code=getattr(exc, "code", None)) from exc
        return _record(intent)
