from typing import Any, Callable, Dict, List, Optional, Protocol


class SessionProtocol(Protocol):
    @property
    def token(self) -> Optional[str]: ...

    @property
    def refresh_token(self) -> Optional[str]: ...

    @property
    def is_authenticated(self) -> bool: ...

    def set_tokens(self, token: str, refresh_token: str) -> None: ...

    def clear(self) -> None: ...


class CartApiProtocol(Protocol):
    def get_cart(self) -> Dict[str, Any]: ...

    def add_cart_item(self, item: Dict[str, Any], quantity: int = 1) -> Dict[str, Any]: ...

    def update_cart_item(self, item_id: str, quantity: int) -> Dict[str, Any]: ...

    def remove_cart_item(self, item_id: str) -> Dict[str, Any]: ...

    def clear_cart(self) -> Dict[str, Any]: ...

    def sync_cart(
        self,
        items: List[Dict[str, Any]],
        last_synced_at: Optional[str] = None,
        merge_strategy: str = "merge",
    ) -> Dict[str, Any]: ...

    def merge_guest_cart(self, items: List[Dict[str, Any]]) -> Dict[str, Any]: ...


class CheckoutApiProtocol(Protocol):
    def shipping_rates(self, country: str) -> Dict[str, Any]: ...

    def currency_rates(self) -> Dict[str, Any]: ...

    def create_payment_intent(self, payload: Dict[str, Any]) -> Dict[str, Any]: ...

    def send_order_email(
        self, payment_intent_id: str, customer_email: str, customer_name: Optional[str] = None
    ) -> Dict[str, Any]: ...


class CartProtocol(Protocol):
    items: List[Dict[str, Any]]

    def get_total_price(self) -> float: ...

    def add_item(self, item: Dict[str, Any]) -> bool: ...

    def clear_cart(self) -> bool: ...

    def merge_guest_cart(self) -> bool: ...


class Scheduler(Protocol):
    def schedule(self, delay: float, callback: Callable[[], None]) -> Any: ...
