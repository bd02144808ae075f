from typing import Any, Dict, List, Optional

from apps.common.repository import GenericRepository
from .models import Cart, CartLine


class CartRepository(GenericRepository[Cart]):
    def __init__(self):
        super().__init__(Cart)

    def for_user(self, user_id: int) -> Cart:
        cart, _ = self.model.objects.get_or_create(user_id=user_id)
        return cart

    def for_session(self, session_id: str) -> Cart:
        cart, _ = self.model.objects.get_or_create(session_id=session_id, user=None)
        return cart

    def delete_session_cart(self, session_id: str) -> int:
        return self.delete_where(session_id=session_id, user__isnull=True)

    def lines(self, cart: Cart) -> List[CartLine]:
        return list(cart.lines.all())

    def get_line(self, cart: Cart, item_id: str) -> Optional[CartLine]:
        return cart.lines.filter(item_id=item_id).first()

    def add_line(self, cart: Cart, **fields: Any) -> CartLine:
        return CartLine.objects.create(cart=cart, **fields)

    def update_line(self, line: CartLine, **fields: Any) -> CartLine:
        for k, v in fields.items():
            setattr(line, k, v)
        line.save()
        return line

    def delete_line(self, line: CartLine) -> None:
        line.delete()

    def clear(self, cart: Cart) -> None:
        cart.lines.all().delete()

    def replace_lines(self, cart: Cart, rows: List[Dict[str, Any]]) -> None:
        cart.lines.all().delete()
        CartLine.objects.bulk_create([CartLine(cart=cart, **row) for row in rows])

    def touch(self, cart: Cart, **fields: Any) -> Cart:
        # Saving bumps updated_at even when no field changes.
        return self.update(cart, **fields)
