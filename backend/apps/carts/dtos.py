from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


@dataclass
class CartLineDTO:
    id: str
    product_id: str
    name: str
    price: Decimal
    image: str
    category: str
    description: str
    quantity: int
    variant_name: Optional[str] = None
    custom_items: Optional[List[Dict[str, Any]]] = None
    basket_items: Optional[List[Dict[str, Any]]] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class CartDTO:
    id: str
    user_id: Optional[str]
    session_id: Optional[str]
    items: List[CartLineDTO] = field(default_factory=list)
    total_price: Decimal = Decimal("0")
    total_items: int = 0
    last_synced_at: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class CartConflictDTO:
    item_id: str
    local_quantity: int
    server_quantity: int
    resolution: str


@dataclass
class CartSyncDTO:
    cart: CartDTO
    synced_at: str
    conflicts: List[CartConflictDTO] = field(default_factory=list)


@dataclass
class CartMergeDTO:
    cart: CartDTO
    merged_items: List[str] = field(default_factory=list)


@dataclass
class CartItemResultDTO:
    cart: CartDTO
    item_id: str
    quantity: int
