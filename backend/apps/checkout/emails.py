import json
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from django.template.loader import render_to_string

from .commands import OrderEmailCommand
from .dtos import OrderDetailsDTO, OrderItemDTO, PaymentIntentRecord
from .pricing import format_price, from_minor_units

HTML_TEMPLATE = "checkout/order_confirmation.html"
TEXT_TEMPLATE = "checkout/order_confirmation.txt"


def order_number(payment_intent_id: str) -> str:
    return payment_intent_id[3:13]


def order_subject(payment_intent_id: str) -> str:
    return f"Order Confirmation - Order #{order_number(payment_intent_id)}"


def _decimal(raw: Any) -> Decimal:
    try:
        return Decimal(str(raw))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal("0")


def parse_items(raw: Optional[str]) -> List[OrderItemDTO]:
    try:
        rows = json.loads(raw) if raw else []
    except json.JSONDecodeError:
        return []
    if not isinstance(rows, list):
        return []
    return [
        OrderItemDTO(
            id=str(row.get("id") or "unknown"),
            name=str(row.get("name") or "Unknown Item"),
            quantity=int(row.get("quantity") or 1),
            price=_decimal(row.get("price") or 0),
        )
        for row in rows
        if isinstance(row, dict)
    ]


def _shipping_address(
    shipping: Optional[Dict[str, Any]], fallback_name: str
) -> Optional[Dict[str, str]]:
    if not shipping:
        return None
    address = shipping.get("address") or {}
    return {
        "name": shipping.get("name") or fallback_name or "Customer",
        "address": address.get("line1") or "",
        "city": address.get("city") or "",
        "postalCode": address.get("postal_code") or "",
        "country": address.get("country") or "",
    }


def build_order_details(
    intent: PaymentIntentRecord, cmd: OrderEmailCommand, *, order_date: datetime
) -> OrderDetailsDTO:
    metadata = intent.metadata or {}
    currency = (metadata.get("currency") or intent.currency or "GBP").upper()
    return OrderDetailsDTO(
        order_id=intent.id,
        customer_name=cmd.customer_name or metadata.get("customerName") or "Valued Customer",
        customer_email=cmd.customer_email,
        items=parse_items(metadata.get("items")),
        total_amount=from_minor_units(intent.amount, currency),
        currency=currency,
        order_date=order_date.strftime("%d %B %Y"),
        payment_method=(intent.payment_method_types or ["card"])[0],
        shipping_address=_shipping_address(intent.shipping, cmd.customer_name),
    )


def render_order_email(details: OrderDetailsDTO) -> Tuple[str, str]:
    """Render the (text, html) bodies of the confirmation email."""
    context = {
        "order": details,
        "order_number": order_number(details.order_id),
        "lines": [
            {
                "name": item.name,
                "quantity": item.quantity,
                "price": format_price(item.price * item.quantity, details.currency),
            }
            for item in details.items
        ],
        "total": format_price(details.total_amount, details.currency),
    }
    return render_to_string(TEXT_TEMPLATE, context), render_to_string(HTML_TEMPLATE, context)
