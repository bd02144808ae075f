from typing import Any, Dict, List, Optional, Protocol

from apps.catalog.variants import ResolvedItem
from .models import Cart, CartLine


class CartRepositoryProtocol(Protocol):
    def for_user(self, user_id: int) -> Cart: ...

    def for_session(self, session_id: str) -> Cart: ...

    def delete_session_cart(self, session_id: str) -> int: ...

    def lines(self, cart: Cart) -> List[CartLine]: ...

    def get_line(self, cart: Cart, item_id: str) -> Optional[CartLine]: ...

    def add_line(self, cart: Cart, **fields: Any) -> CartLine: ...

    def update_line(self, line: CartLine, **fields: Any) -> CartLine: ...

    def delete_line(self, line: CartLine) -> None: ...

    def clear(self, cart: Cart) -> None: ...

    def replace_lines(self, cart: Cart, rows: List[Dict[str, Any]]) -> None: ...

    def touch(self, cart: Cart, **fields: Any) -> Cart: ...


class CatalogResolverProtocol(Protocol):
    def resolve_item(self, item_id: str) -> Optional[ResolvedItem]: ...
