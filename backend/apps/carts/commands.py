from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

CUSTOM_BASKET_PREFIX = "custom-basket-"

MERGE_STRATEGIES = ("local", "server", "merge")


def _decimal(raw: Any) -> Decimal:
    try:
        return Decimal(str(raw))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal("0")


@dataclass
class CartItemInput:
    """A cart line as submitted by a client; prices are advisory only."""

    id: str
    product_id: str
    name: str = ""
    price: Decimal = Decimal("0")
    image: str = ""
    category: str = ""
    description: str = ""
    quantity: int = 1
    variant_name: str = ""
    custom_items: Optional[List[Dict[str, Any]]] = None
    basket_items: Optional[List[Dict[str, Any]]] = None

    @property
    def is_custom_basket(self) -> bool:
        return bool(self.custom_items) or self.id.startswith(CUSTOM_BASKET_PREFIX)

    @staticmethod
    def from_raw(data: Mapping[str, Any], *, quantity: Optional[int] = None) -> "CartItemInput":
        item_id = str(data.get("id", "")).strip()
        return CartItemInput(
            id=item_id,
            product_id=str(data.get("product_id") or item_id).strip(),
            name=str(data.get("name", "")).strip(),
            price=_decimal(data.get("price", "0")),
            image=str(data.get("image") or ""),
            category=str(data.get("category") or ""),
            description=str(data.get("description") or ""),
            quantity=int(quantity if quantity is not None else data.get("quantity") or 1),
            variant_name=str(data.get("variant_name") or ""),
            custom_items=[dict(i) for i in data["custom_items"]]
            if data.get("custom_items")
            else None,
            basket_items=[dict(i) for i in data["basket_items"]]
            if data.get("basket_items")
            else None,
        )

    @staticmethod
    def many_from_raw(rows) -> List["CartItemInput"]:
        return [CartItemInput.from_raw(row) for row in rows or []]


@dataclass
class CartSyncCommand:
    local_items: List[CartItemInput] = field(default_factory=list)
    last_synced_at: Optional[datetime] = None
    strategy: str = "merge"

    @staticmethod
    def from_raw(data: Mapping[str, Any]) -> "CartSyncCommand":
        return CartSyncCommand(
            local_items=CartItemInput.many_from_raw(data.get("local_cart")),
            last_synced_at=data.get("last_synced_at"),
            strategy=data.get("merge_strategy") or "merge",
        )
