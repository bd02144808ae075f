"""Client-side checkout: address, shipping, currency, payment intent and completion."""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Set

from apps.common import get_logger
from .api_client import ApiError
from .protocols import CartProtocol, CheckoutApiProtocol, Scheduler, SessionProtocol
from .scheduling import TimerScheduler
from .storage import KeyValueStorage
from .toasts import ToastChannel

logger = get_logger(__name__).bind(component="storefront", layer="store", store="CheckoutFlow")

CUSTOMER_INFO_KEY = "checkout-customer-info"
EMAIL_SENT_PREFIX = "order-email-sent-"
BASE_CURRENCY = "GBP"
DEFAULT_COUNTRY = "GB"
RETURN_URL = "/payment-success"
LOGIN_REDIRECT = "/login?redirect=/checkout"


def email_sent_key(payment_intent_id: str) -> str:
    return f"{EMAIL_SENT_PREFIX}{payment_intent_id}"


@dataclass
class CustomerInfo:
    name: str = ""
    email: str = ""
    line1: str = ""
    line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = DEFAULT_COUNTRY

    def address(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "state": self.state,
            "postalCode": self.postal_code,
            "country": self.country,
        }


@dataclass
class ConfirmationOutcome:
    """What the payment provider reported after confirming the intent.

    ``status`` is ``succeeded``, ``processing``, ``requires_action`` (the
    customer is sent to ``redirect_url``) or ``failed`` with ``error`` set.
    """

    status: str
    payment_intent_id: Optional[str] = None
    error: Optional[str] = None
    redirect_url: Optional[str] = None


class PaymentConfirmer(Protocol):
    def confirm(
        self,
        client_secret: str,
        *,
        billing_details: Dict[str, Any],
        shipping: Dict[str, Any],
        return_url: str,
    ) -> ConfirmationOutcome: ...


@dataclass
class CheckoutResult:
    status: str
    message: str = ""
    redirect: Optional[str] = None
    payment_intent_id: Optional[str] = None


@dataclass
class CurrencyRate:
    code: str
    rate: Optional[float]
    decimals: int = 2
    symbol: str = ""


@dataclass
class CheckoutState:
    customer: CustomerInfo = field(default_factory=CustomerInfo)
    currency: str = BASE_CURRENCY
    shipping_rates: List[Dict[str, Any]] = field(default_factory=list)
    shipping_rate: Optional[Dict[str, Any]] = None
    client_secret: Optional[str] = None
    payment_intent_id: Optional[str] = None
    intent_key: Optional[str] = None


class CheckoutFlow:
    def __init__(
        self,
        cart: CartProtocol,
        session: SessionProtocol,
        api: CheckoutApiProtocol,
        toasts: ToastChannel,
        storage: KeyValueStorage,
        confirmer: Optional[PaymentConfirmer] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        cleanup_delay: float = 5.0,
    ):
        self.cart = cart
        self.session = session
        self.api = api
        self.toasts = toasts
        self.storage = storage
        self.confirmer = confirmer
        self.scheduler = scheduler or TimerScheduler()
        self.cleanup_delay = cleanup_delay
        self.state = CheckoutState()
        self.currencies: Dict[str, CurrencyRate] = {
            BASE_CURRENCY: CurrencyRate(BASE_CURRENCY, 1.0, 2, "£")
        }
        self._emails_sent: Set[str] = set()
        self._completed: Set[str] = set()

    # Pre-conditions

    def check_preconditions(self) -> Optional[str]:
        """Return the page to redirect to, or ``None`` when checkout may proceed."""
        if not self.cart.items:
            return "/cart"
        if not self.session.is_authenticated:
            return LOGIN_REDIRECT
        return None

    # Currency

    def load_currency_rates(self) -> bool:
        try:
            data = self.api.currency_rates()
        except ApiError as exc:
            logger.warning("Currency rates unavailable", error=exc.message)
            return False
        for entry in data.get("currencies", []):
            rate = entry.get("rate")
            self.currencies[entry["code"]] = CurrencyRate(
                code=entry["code"],
                rate=float(rate) if rate is not None else None,
                decimals=int(entry.get("decimals", 2)),
                symbol=entry.get("symbol", ""),
            )
        return True

    def set_currency(self, code: str) -> None:
        self.state.currency = (code or BASE_CURRENCY).upper()

    def _decimals(self) -> int:
        info = self.currencies.get(self.state.currency)
        return info.decimals if info else 2

    def convert(self, amount: float) -> float:
        """GBP amount in the selected currency; unknown rates leave it unchanged."""
        info = self.currencies.get(self.state.currency)
        if self.state.currency == BASE_CURRENCY or info is None or not info.rate:
            converted = amount
        else:
            converted = amount / info.rate
        return round(converted, self._decimals())

    # Address and shipping

    def update_customer(self, **fields: Any) -> None:
        country_before = self.state.customer.country
        for name, value in fields.items():
            if not hasattr(self.state.customer, name):
                raise AttributeError(f"Unknown customer field: {name}")
            setattr(self.state.customer, name, value)
        if self.state.customer.country != country_before:
            self.load_shipping_rates()

    def load_shipping_rates(self) -> List[Dict[str, Any]]:
        country = self.state.customer.country or DEFAULT_COUNTRY
        try:
            data = self.api.shipping_rates(country)
        except ApiError as exc:
            logger.warning("Shipping rates unavailable", country=country, error=exc.message)
            self.toasts.error("Shipping Unavailable", exc.message or "Could not load shipping rates")
            self.state.shipping_rates = []
            self.state.shipping_rate = None
            return []
        self.state.shipping_rates = list(data.get("rates") or [])
        self.state.shipping_rate = self.state.shipping_rates[0] if self.state.shipping_rates else None
        return self.state.shipping_rates

    def select_shipping(self, rate_id: str) -> bool:
        for rate in self.state.shipping_rates:
            if rate["id"] == rate_id:
                self.state.shipping_rate = rate
                return True
        return False

    @property
    def shipping_cost(self) -> float:
        rate = self.state.shipping_rate
        return self.convert(float(rate["price"])) if rate else 0

    @property
    def subtotal(self) -> float:
        return self.convert(self.cart.get_total_price())

    @property
    def total(self) -> float:
        return round(self.subtotal + self.shipping_cost, self._decimals())

    # Payment intent

    def _line_items(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": line["id"],
                "name": line["name"],
                "quantity": line["quantity"],
                "price": line["price"],
            }
            for line in self.cart.items
        ]

    def intent_key(self) -> str:
        """Fingerprint of everything that affects the charged amount; name and email excluded."""
        address = self.state.customer.address()
        address.pop("name")
        rate = self.state.shipping_rate or {}
        return json.dumps(
            {
                "items": [(line["id"], line["quantity"], line["price"]) for line in self._line_items()],
                "total": self.total,
                "currency": self.state.currency,
                "shippingCost": self.shipping_cost,
                "shippingMethod": rate.get("id"),
                "address": address,
            },
            sort_keys=True,
            default=str,
        )

    def payment_intent_payload(self) -> Dict[str, Any]:
        customer = self.state.customer
        rate = self.state.shipping_rate or {}
        user = getattr(self.session, "user", None) or {}
        metadata = {
            "userId": str(user.get("id", "")),
            "customerEmail": customer.email,
            "customerName": customer.name,
            "shippingMethod": rate.get("id", ""),
        }
        return {
            "amount": self.total,
            "currency": self.state.currency,
            "shippingCost": self.shipping_cost,
            "shippingMethod": rate.get("id", ""),
            "shippingAddress": customer.address(),
            "items": self._line_items(),
            "metadata": {k: v for k, v in metadata.items() if v},
        }

    def ensure_payment_intent(self) -> bool:
        """Create a payment intent unless one already matches the current order."""
        if self.check_preconditions() is not None:
            return False
        key = self.intent_key()
        if self.state.client_secret and key == self.state.intent_key:
            return True
        try:
            data = self.api.create_payment_intent(self.payment_intent_payload())
        except ApiError as exc:
            logger.error("Payment intent creation failed", error=exc.message, status=exc.status)
            self.toasts.error("Payment Setup Failed", exc.message or "Could not start payment")
            return False
        self.state.client_secret = data["clientSecret"]
        self.state.payment_intent_id = data["paymentIntentId"]
        self.state.intent_key = key
        logger.info("Payment intent ready", payment_intent_id=self.state.payment_intent_id)
        return True

    # Submission

    def submit(self) -> CheckoutResult:
        redirect = self.check_preconditions()
        if redirect:
            return CheckoutResult("blocked", redirect=redirect)
        if self.confirmer is None:
            raise RuntimeError("CheckoutFlow has no payment confirmer")
        if not self.ensure_payment_intent():
            return CheckoutResult("failed", message="Could not start payment")
        customer = self.state.customer
        outcome = self.confirmer.confirm(
            self.state.client_secret,
            billing_details={"name": customer.name, "email": customer.email, "address": customer.address()},
            shipping=customer.address(),
            return_url=RETURN_URL,
        )
        intent_id = outcome.payment_intent_id or self.state.payment_intent_id
        if outcome.status == "failed" or outcome.error:
            message = outcome.error or "Payment failed"
            logger.info("Payment declined", payment_intent_id=intent_id, error=message)
            self.toasts.error("Payment Failed", message)
            return CheckoutResult("failed", message=message, payment_intent_id=intent_id)
        if outcome.status == "requires_action":
            self.storage.set_item(
                CUSTOMER_INFO_KEY, {"name": customer.name, "email": customer.email}
            )
            return CheckoutResult(
                "redirect", redirect=outcome.redirect_url, payment_intent_id=intent_id
            )
        if outcome.status != "succeeded":
            return CheckoutResult(
                outcome.status, message="Payment is processing", payment_intent_id=intent_id
            )
        self.send_confirmation(intent_id, customer.email, customer.name)
        self._finish(intent_id)
        self.toasts.success("Order Complete!", "Thank you for your purchase.")
        return CheckoutResult("succeeded", redirect=RETURN_URL, payment_intent_id=intent_id)

    def send_confirmation(self, payment_intent_id: str, email: str, name: Optional[str] = None) -> bool:
        """Send the order email at most once per payment intent."""
        if not payment_intent_id or not email:
            return False
        flag = email_sent_key(payment_intent_id)
        if payment_intent_id in self._emails_sent or self.storage.get_item(flag):
            return True
        self._emails_sent.add(payment_intent_id)
        try:
            self.api.send_order_email(payment_intent_id, email, name or None)
        except ApiError as exc:
            # The payment already went through; only the email is missing.
            self._emails_sent.discard(payment_intent_id)
            logger.warning(
                "Order email failed", payment_intent_id=payment_intent_id, error=exc.message
            )
            return False
        self.storage.set_item(flag, True)
        return True

    def _finish(self, payment_intent_id: Optional[str]) -> None:
        if payment_intent_id:
            self._completed.add(payment_intent_id)
        self.cart.clear_cart()
        self.state.client_secret = None
        self.state.payment_intent_id = None
        self.state.intent_key = None

    # Return page

    def complete_return(self, payment_intent_id: Optional[str], redirect_status: Optional[str] = None) -> CheckoutResult:
        """Handle the provider redirect back to the success page."""
        if redirect_status and redirect_status != "succeeded":
            self.toasts.error("Payment Failed", "Your payment was not completed.")
            return CheckoutResult("failed", message="Payment was not completed", payment_intent_id=payment_intent_id)
        if payment_intent_id in self._completed:
            return CheckoutResult("succeeded", payment_intent_id=payment_intent_id)
        info = self.storage.get_item(CUSTOMER_INFO_KEY) or {}
        user = getattr(self.session, "user", None) or {}
        email = info.get("email") or user.get("email")
        name = info.get("name") or " ".join(
            part for part in (user.get("firstName"), user.get("lastName")) if part
        )
        if payment_intent_id:
            self.send_confirmation(payment_intent_id, email, name)
        self._finish(payment_intent_id)
        self.toasts.success("Payment Successful", "Your order has been placed successfully!")
        self.scheduler.schedule(self.cleanup_delay, self._cleanup_customer_info)
        return CheckoutResult("succeeded", payment_intent_id=payment_intent_id)

    def _cleanup_customer_info(self) -> None:
        self.storage.remove_item(CUSTOMER_INFO_KEY)
