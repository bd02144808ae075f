import copy
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from apps.common import get_logger
from . import catalog
from .protocols import CartProtocol
from .storage import KeyValueStorage
from .toasts import ToastChannel

logger = get_logger(__name__).bind(
    component="storefront", layer="store", store="CustomBasketBuilder"
)

BASKET_STORAGE_KEY = "custom-basket-storage"
MIN_SELECTION = 3
MAX_SELECTION = 5
BASKET_TYPES = ("natural", "black")
BASKET_IMAGES = {
    "natural": "https://res.cloudinary.com/dygrsvya5/image/upload/f_auto/v1761523697/WICKER_BASKET_jy5cs6.jpg",
    "black": "https://res.cloudinary.com/dygrsvya5/image/upload/f_auto/v1761523728/BLACK_WICKER_BASKET_xhdnno.jpg",
}
CUSTOM_BASKET_CATEGORY = "Custom Basket"

BasketItem = Dict[str, Any]


@dataclass
class ConversionResult:
    ok: bool
    redirect: Optional[str] = None
    cart_item: Optional[Dict[str, Any]] = None


class CustomBasketBuilder:
    """Build-your-own basket: 3 to 5 distinct products in a natural or black wicker basket."""

    def __init__(
        self,
        storage: KeyValueStorage,
        toasts: ToastChannel,
        cart: Optional[CartProtocol] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.storage = storage
        self.toasts = toasts
        self.cart = cart
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.id_factory = id_factory or (lambda: f"custom-basket-{uuid.uuid4()}")
        state = storage.get_item(BASKET_STORAGE_KEY) or {}
        self.current_basket: Optional[Dict[str, Any]] = state.get("currentBasket")
        self.pending_items: List[BasketItem] = list(state.get("pendingItems") or [])
        self.selected_variants: Dict[str, int] = {}

    def _persist(self) -> None:
        self.storage.set_item(
            BASKET_STORAGE_KEY,
            {"currentBasket": self.current_basket, "pendingItems": self.pending_items},
        )

    @property
    def selected_items(self) -> List[BasketItem]:
        return list(self.current_basket["selectedItems"]) if self.current_basket else []

    @property
    def total_price(self):
        return self.current_basket["totalPrice"] if self.current_basket else 0

    def _contains(self, item_id: str) -> bool:
        return any(entry["id"] == item_id for entry in self.selected_items)

    def _append(self, item: BasketItem) -> bool:
        basket = self.current_basket
        if basket is None or self._contains(item["id"]):
            return False
        if len(basket["selectedItems"]) >= MAX_SELECTION:
            return False
        basket["selectedItems"].append(copy.deepcopy(item))
        basket["totalPrice"] = round(sum(entry["price"] for entry in basket["selectedItems"]), 2)
        return True

    def set_basket_type(self, basket_type: str) -> None:
        """Start (or restart) a basket and move queued items into it."""
        if basket_type not in BASKET_TYPES:
            raise ValueError(f"Unknown basket type: {basket_type}")
        self.current_basket = {
            "id": self.id_factory(),
            "basketType": basket_type,
            "selectedItems": [],
            "totalPrice": 0,
            "createdAt": self.clock().isoformat(),
        }
        added = sum(1 for item in self.pending_items if self._append(item))
        self.pending_items = []
        self._persist()
        if added == 1:
            self.toasts.success("Item Added", "1 item has been added to your basket.")
        elif added > 1:
            self.toasts.success("Items Added", f"{added} items have been added to your basket.")
        logger.info("Basket type chosen", basket_type=basket_type, flushed=added)

    def queue_item(self, item: BasketItem) -> bool:
        if self.current_basket is not None:
            return self.add_item(item)
        if any(pending["id"] == item["id"] for pending in self.pending_items):
            return False
        self.pending_items.append(copy.deepcopy(item))
        self._persist()
        return True

    def add_item(self, item: BasketItem) -> bool:
        if self.current_basket is None:
            return False
        if self._contains(item["id"]):
            self.toasts.info("Already Added", "This product is already in your basket.")
            return False
        if len(self.selected_items) >= MAX_SELECTION:
            self.toasts.info(
                "Selection Limit Reached",
                f"You can select up to {MAX_SELECTION} products in your custom basket.",
            )
            return False
        self._append(item)
        self._persist()
        self.toasts.success("Item Added", "Product has been added to your custom basket.")
        return True

    def remove_item(self, item_id: str) -> None:
        if self.current_basket is None:
            return
        basket = self.current_basket
        basket["selectedItems"] = [e for e in basket["selectedItems"] if e["id"] != item_id]
        basket["totalPrice"] = round(sum(entry["price"] for entry in basket["selectedItems"]), 2)
        self._persist()

    def clear_basket(self) -> None:
        self.current_basket = None
        self.pending_items = []
        self._persist()

    # Variant selection

    def select_variant(self, product_id: str, index: int) -> None:
        self.selected_variants[product_id] = index

    def build_item(self, product: Dict[str, Any]) -> BasketItem:
        has_variants = bool(product.get("variants"))
        variant = catalog.variant_at(product, self.selected_variants.get(product["id"], 0))
        variant_name = variant["name"] if has_variants else None
        item: BasketItem = {
            "id": catalog.compose_item_id(product["id"], variant_name),
            "name": catalog.display_name(product, variant),
            "description": product.get("description") or "",
            "image": variant.get("image") or product.get("image") or "",
            "price": variant["price"],
            "category": product.get("category") or "",
        }
        if variant_name:
            item["variantName"] = variant_name
        if product.get("details"):
            item["details"] = copy.deepcopy(product["details"])
        return item

    def add_product(self, product: Dict[str, Any]) -> bool:
        return self.queue_item(self.build_item(product))

    # Conversion into a cart line

    def to_cart_item(self) -> Optional[Dict[str, Any]]:
        basket = self.current_basket
        if basket is None:
            return None
        count = len(basket["selectedItems"])
        label = "Natural" if basket["basketType"] == "natural" else "Black"
        return {
            "id": basket["id"],
            "name": f"Custom {label} Basket",
            "price": basket["totalPrice"],
            "image": BASKET_IMAGES[basket["basketType"]],
            "category": CUSTOM_BASKET_CATEGORY,
            "description": f"Custom basket with {count} selected items (includes wicker basket)",
            "customItems": copy.deepcopy(basket["selectedItems"]),
        }

    def add_to_cart(self) -> ConversionResult:
        if self.current_basket is None:
            return ConversionResult(ok=False)
        if len(self.selected_items) < MIN_SELECTION:
            self.toasts.warning(
                "Select Three Items",
                "Please choose at least three products to build your custom basket.",
            )
            return ConversionResult(ok=False)
        if self.cart is None:
            raise RuntimeError("CustomBasketBuilder has no cart to add to")
        cart_item = self.to_cart_item()
        if not self.cart.add_item(cart_item):
            logger.info("Cart rejected custom basket", basket_id=cart_item["id"])
            return ConversionResult(ok=False, cart_item=cart_item)
        self.clear_basket()
        return ConversionResult(ok=True, redirect="/cart", cart_item=cart_item)
