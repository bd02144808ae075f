from decimal import Decimal
from typing import Iterable

from .dtos import CartDTO, CartLineDTO
from .models import Cart, CartLine


def _iso(value):
    return value.isoformat() if value else None


class CartMapper:
    @staticmethod
    def line_to_dto(line: CartLine) -> CartLineDTO:
        return CartLineDTO(
            id=line.item_id,
            product_id=line.product_id,
            name=line.name,
            price=line.price,
            image=line.image,
            category=line.category,
            description=line.description,
            quantity=line.quantity,
            variant_name=line.variant_name or None,
            custom_items=line.custom_items,
            basket_items=line.basket_items,
            created_at=_iso(line.created_at) or "",
            updated_at=_iso(line.updated_at) or "",
        )

    @classmethod
    def to_dto(cls, cart: Cart, lines: Iterable[CartLine]) -> CartDTO:
        items = [cls.line_to_dto(line) for line in lines]
        user_id = str(cart.user_id) if cart.user_id else None
        return CartDTO(
            id=user_id or cart.session_id or "",
            user_id=user_id,
            session_id=cart.session_id,
            items=items,
            total_price=sum((i.price * i.quantity for i in items), Decimal("0")),
            total_items=sum(i.quantity for i in items),
            last_synced_at=_iso(cart.last_synced_at),
            created_at=_iso(cart.created_at) or "",
            updated_at=_iso(cart.updated_at) or "",
        )
