from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

ADDRESS_FIELDS = ("line1", "line2", "city", "state", "postal_code", "country")


@dataclass
class ShippingAddress:
    name: str = ""
    line1: str = ""
    line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    @staticmethod
    def from_raw(data: Optional[Mapping[str, Any]]) -> Optional["ShippingAddress"]:
        if not data:
            return None
        return ShippingAddress(
            name=str(data.get("name") or ""),
            **{key: str(data.get(key) or "") for key in ADDRESS_FIELDS},
        )

    def as_stripe(self) -> Dict[str, Any]:
        address = {key: getattr(self, key) for key in ADDRESS_FIELDS if getattr(self, key)}
        return {"name": self.name or "Customer", "address": address}


@dataclass
class OrderLine:
    id: str
    name: str
    quantity: int
    price: Decimal

    def as_metadata(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "price": float(self.price),
        }


@dataclass
class PaymentIntentCommand:
    amount: Decimal
    currency: str
    shipping_cost: Decimal = Decimal("0")
    shipping_method: str = ""
    shipping_address: Optional[ShippingAddress] = None
    items: List[OrderLine] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)

    @staticmethod
    def from_raw(data: Mapping[str, Any]) -> "PaymentIntentCommand":
        return PaymentIntentCommand(
            amount=data["amount"],
            currency=str(data.get("currency") or "").upper(),
            shipping_cost=data.get("shipping_cost") or Decimal("0"),
            shipping_method=data.get("shipping_method") or "",
            shipping_address=ShippingAddress.from_raw(data.get("shipping_address")),
            items=[
                OrderLine(
                    id=str(row.get("id", "")),
                    name=str(row.get("name", "")),
                    quantity=int(row.get("quantity") or 1),
                    price=row.get("price") or Decimal("0"),
                )
                for row in data.get("items") or []
            ],
            metadata={
                str(k): "" if v is None else str(v)
                for k, v in (data.get("metadata") or {}).items()
            },
        )


@dataclass
class OrderEmailCommand:
    payment_intent_id: str
    customer_email: str
    customer_name: str = ""

    @staticmethod
    def from_raw(data: Mapping[str, Any]) -> "OrderEmailCommand":
        return OrderEmailCommand(
            payment_intent_id=data["payment_intent_id"].strip(),
            customer_email=data["customer_email"].strip(),
            customer_name=(data.get("customer_name") or "").strip(),
        )
