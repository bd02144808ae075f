import copy
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from apps.common import get_logger
from .api_client import ApiError
from .optimistic import OptimisticUpdater
from .protocols import CartApiProtocol, SessionProtocol
from .storage import KeyValueStorage
from .toasts import ToastChannel

logger = get_logger(__name__).bind(component="storefront", layer="store", store="CartStore")

CART_STORAGE_KEY = "cart-storage"

LINE_FIELDS = (
    "id",
    "productId",
    "name",
    "price",
    "image",
    "category",
    "description",
    "quantity",
    "variantName",
    "customItems",
    "basketItems",
)

CartItem = Dict[str, Any]


def line_from_server(line: Dict[str, Any]) -> CartItem:
    return {key: line[key] for key in LINE_FIELDS if line.get(key) is not None}


def item_payload(item: CartItem) -> Dict[str, Any]:
    """Request body for a cart line; the backend rejects nulls in text fields."""
    return {key: value for key, value in item.items() if key in LINE_FIELDS and value is not None}


class CartStore:
    """Cart lines with optimistic local mutation and server sync for signed-in sessions.

    Guests never touch the network; every change is persisted under
    ``cart-storage`` as ``{items, lastSyncedAt}``.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        session: SessionProtocol,
        api: CartApiProtocol,
        toasts: ToastChannel,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        self.session = session
        self.api = api
        self.toasts = toasts
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        state = storage.get_item(CART_STORAGE_KEY) or {}
        self.items: List[CartItem] = list(state.get("items") or [])
        self.last_synced_at: Optional[str] = state.get("lastSyncedAt")
        self._updater = OptimisticUpdater(lambda: self.items, self._set_items, logger)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.session is not None and self.session.is_authenticated)

    def _persist(self) -> None:
        self.storage.set_item(
            CART_STORAGE_KEY, {"items": self.items, "lastSyncedAt": self.last_synced_at}
        )

    def _set_items(self, items: List[CartItem]) -> None:
        self.items = items
        self._persist()

    def _adopt(self, response: Dict[str, Any]) -> List[CartItem]:
        self.last_synced_at = self.clock().isoformat()
        return [line_from_server(line) for line in response["cart"]["items"]]

    def _find(self, item_id: str) -> Optional[CartItem]:
        for line in self.items:
            if line["id"] == item_id:
                return line
        return None

    def get_item(self, item_id: str) -> Optional[CartItem]:
        line = self._find(item_id)
        return copy.deepcopy(line) if line else None

    def add_item(self, item: CartItem) -> bool:
        item = {key: value for key, value in item.items() if key != "quantity"}
        existing = self._find(item["id"])
        target = existing["quantity"] + 1 if existing else 1

        def apply(items: List[CartItem]) -> List[CartItem]:
            if existing:
                for line in items:
                    if line["id"] == item["id"]:
                        line["quantity"] = target
            else:
                items.append({**item, "quantity": 1})
            return items

        def remote():
            if existing:
                return self.api.update_cart_item(item["id"], target)
            return self.api.add_cart_item(item_payload(item), 1)

        if self.is_authenticated:
            result = self._updater.run(apply, remote, self._adopt, action="add_item")
            if not result.ok:
                self.toasts.error(
                    "Failed to Add Item", result.error.message or "Could not add item to cart"
                )
                return False
        else:
            self._set_items(apply(copy.deepcopy(self.items)))

        if existing:
            self.toasts.success("Item Updated", f"{item['name']} quantity increased")
        else:
            self.toasts.success("Added to Cart", f"{item['name']} has been added to your cart")
        logger.debug("Item added", item_id=item["id"], quantity=target)
        return True

    def remove_item(self, item_id: str) -> bool:
        line = self._find(item_id)
        if line is None:
            return False

        def apply(items: List[CartItem]) -> List[CartItem]:
            return [entry for entry in items if entry["id"] != item_id]

        if self.is_authenticated:
            result = self._updater.run(
                apply,
                lambda: self.api.remove_cart_item(item_id),
                self._adopt,
                action="remove_item",
            )
            if not result.ok:
                self.toasts.error(
                    "Failed to Remove Item",
                    result.error.message or "Could not remove item from cart",
                )
                return False
        else:
            self._set_items(apply(copy.deepcopy(self.items)))
        self.toasts.info("Item Removed", f"{line['name']} has been removed from your cart")
        return True

    def update_quantity(self, item_id: str, quantity: int) -> bool:
        if quantity <= 0:
            return self.remove_item(item_id)
        if self._find(item_id) is None:
            return False

        def apply(items: List[CartItem]) -> List[CartItem]:
            for line in items:
                if line["id"] == item_id:
                    line["quantity"] = quantity
            return items

        if not self.is_authenticated:
            self._set_items(apply(copy.deepcopy(self.items)))
            return True
        result = self._updater.run(
            apply,
            lambda: self.api.update_cart_item(item_id, quantity),
            self._adopt,
            action="update_quantity",
        )
        if not result.ok:
            self.toasts.error(
                "Failed to Update Quantity",
                result.error.message or "Could not update item quantity",
            )
            return False
        return True

    def clear_cart(self) -> bool:
        if self.is_authenticated:
            result = self._updater.run(
                lambda items: [], self.api.clear_cart, self._adopt, action="clear_cart"
            )
            if not result.ok:
                self.toasts.error("Failed to Clear Cart", result.error.message or "Could not clear cart")
                return False
        else:
            self._set_items([])
        self.toasts.info("Cart Cleared", "All items have been removed from your cart")
        return True

    def sync_with_server(self) -> bool:
        """Push local lines with the ``merge`` strategy and adopt the server's answer."""
        if not self.is_authenticated:
            return False
        try:
            response = self.api.sync_cart(
                [item_payload(line) for line in self.items], self.last_synced_at, "merge"
            )
        except ApiError as exc:
            logger.warning("Cart sync failed", error=exc.message)
            self.toasts.error("Failed to Sync Cart", exc.message or "Could not sync cart")
            return False
        self.items = [line_from_server(line) for line in response["cart"]["items"]]
        self.last_synced_at = response.get("syncedAt") or self.clock().isoformat()
        self._persist()
        if response.get("conflicts"):
            logger.info("Cart sync resolved conflicts", count=len(response["conflicts"]))
        return True

    def _fetch_server_cart(self) -> bool:
        try:
            response = self.api.get_cart()
        except ApiError as exc:
            logger.warning("Cart fetch failed", error=exc.message)
            return False
        self._set_items(self._adopt(response))
        return True

    def merge_guest_cart(self) -> bool:
        """Fold the guest cart into the account cart after sign-in."""
        if not self.is_authenticated:
            return False
        if not self.items:
            if self._fetch_server_cart():
                return True
            self.toasts.error("Failed to Merge Cart", "Could not merge guest cart")
            return False
        try:
            response = self.api.merge_guest_cart([item_payload(line) for line in self.items])
        except ApiError as exc:
            logger.warning("Guest cart merge failed, falling back to fetch", error=exc.message)
            if self._fetch_server_cart():
                return True
            self.toasts.error("Failed to Merge Cart", exc.message or "Could not merge guest cart")
            return False
        self._set_items(self._adopt(response))
        merged = len(response.get("mergedItems") or [])
        if merged > 0:
            self.toasts.success(
                "Cart Merged", f"{merged} item(s) from your guest cart have been added"
            )
        return True

    def get_total_price(self) -> float:
        return sum(line["price"] * line["quantity"] for line in self.items)

    def get_total_items(self) -> int:
        return sum(line["quantity"] for line in self.items)
