from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


@dataclass
class ShippingRateDTO:
    id: str
    name: str
    description: str
    price: Decimal
    estimated_days: str


@dataclass
class CurrencyDTO:
    code: str
    symbol: str
    name: str
    decimals: int
    rate: Optional[Decimal] = None


@dataclass
class CurrencyRatesDTO:
    base: str
    currencies: List[CurrencyDTO] = field(default_factory=list)


@dataclass
class PaymentIntentRecord:
    """Plain view of a provider payment intent."""

    id: str
    status: str
    amount: int
    currency: str
    client_secret: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)
    shipping: Optional[Dict[str, Any]] = None
    payment_method_types: List[str] = field(default_factory=list)


@dataclass
class PaymentIntentDTO:
    client_secret: str
    payment_intent_id: str


@dataclass
class OrderItemDTO:
    id: str
    name: str
    quantity: int
    price: Decimal


@dataclass
class OrderDetailsDTO:
    order_id: str
    customer_name: str
    customer_email: str
    items: List[OrderItemDTO]
    total_amount: Decimal
    currency: str
    order_date: str
    payment_method: str = "card"
    shipping_address: Optional[Dict[str, str]] = None


@dataclass
class OrderEmailDTO:
    success: bool
    message: str
    order_id: str
    recipients: List[str] = field(default_factory=list)
