from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.db import transaction
from django.utils import timezone

from apps.catalog.variants import compose_item_id
from apps.common import get_logger
from .commands import CartItemInput, CartSyncCommand
from .dtos import (
    CartConflictDTO,
    CartDTO,
    CartItemResultDTO,
    CartMergeDTO,
    CartSyncDTO,
)
from .mappers import CartMapper
from .models import Cart, CartLine
from .protocols import CartRepositoryProtocol, CatalogResolverProtocol

logger = get_logger(__name__).bind(component="carts", layer="service")

ServiceError = Tuple[str, str, Optional[Any]]

LINE_FIELDS = (
    "item_id",
    "product_id",
    "name",
    "price",
    "image",
    "category",
    "description",
    "quantity",
    "variant_name",
    "custom_items",
    "basket_items",
)


class CartService:
    """Authoritative per-user carts. The catalog price always wins over client prices."""

    def __init__(
        self,
        carts: CartRepositoryProtocol,
        catalog: CatalogResolverProtocol,
        *,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.carts = carts
        self.catalog = catalog
        self.clock = clock
        self.logger = logger.bind(service="CartService")

    # Pricing

    def _not_found(self, item_id: str) -> ServiceError:
        return ("PRODUCT_NOT_FOUND", "Product not found", {"itemId": item_id})

    def _out_of_stock(self, item_id: str) -> ServiceError:
        return ("PRODUCT_OUT_OF_STOCK", "Product is out of stock", {"itemId": item_id})

    def _price_custom_basket(
        self, item: CartItemInput
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ServiceError]]:
        if not item.custom_items:
            return None, (
                "VALIDATION_ERROR",
                "Custom basket has no items",
                {"itemId": item.id},
            )
        total = Decimal("0")
        components = []
        for component in item.custom_items:
            component_id = str(component.get("id", ""))
            resolved = self.catalog.resolve_item(component_id)
            if resolved is None:
                return None, self._not_found(component_id)
            if not resolved.product.in_stock:
                return None, self._out_of_stock(component_id)
            total += resolved.price
            components.append({**component, "price": float(resolved.price)})
        return self._row(item, price=total, custom_items=components), None

    def price_item(
        self, item: CartItemInput
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ServiceError]]:
        """Build a storable line for ``item`` using catalog prices."""
        if item.is_custom_basket:
            return self._price_custom_basket(item)
        resolved = self.catalog.resolve_item(item.id)
        if resolved is None and item.product_id != item.id:
            resolved = self.catalog.resolve_item(
                compose_item_id(item.product_id, item.variant_name or None)
            )
        if resolved is None:
            return None, self._not_found(item.id)
        product = resolved.product
        if not product.in_stock:
            return None, self._out_of_stock(item.id)
        return (
            self._row(
                item,
                price=resolved.price,
                product_id=product.id,
                name=item.name or resolved.name,
                image=item.image or resolved.image,
                category=item.category or product.category or "",
                description=item.description or product.description,
                variant_name=item.variant_name
                or (resolved.variant.name if resolved.variant else ""),
            ),
            None,
        )

    @staticmethod
    def _row(item: CartItemInput, **overrides: Any) -> Dict[str, Any]:
        row = {
            "item_id": item.id,
            "product_id": item.product_id,
            "name": item.name,
            "price": item.price,
            "image": item.image,
            "category": item.category,
            "description": item.description,
            "quantity": item.quantity,
            "variant_name": item.variant_name,
            "custom_items": item.custom_items,
            "basket_items": item.basket_items,
        }
        row.update(overrides)
        return row

    @staticmethod
    def _line_row(line: CartLine) -> Dict[str, Any]:
        row = {name: getattr(line, name) for name in LINE_FIELDS}
        row["created_at"] = line.created_at
        return row

    def _dto(self, cart: Cart) -> CartDTO:
        return CartMapper.to_dto(cart, self.carts.lines(cart))

    # Reads

    def get_cart(self, user_id: int) -> CartDTO:
        self.logger.debug("Fetching cart", user_id=user_id)
        return self._dto(self.carts.for_user(user_id))

    def guest_cart(self, session_id: str) -> CartDTO:
        self.logger.debug("Fetching guest cart", session_id=session_id)
        return self._dto(self.carts.for_session(session_id))

    # Mutations

    def add_item(
        self, user_id: int, item: CartItemInput, quantity: Optional[int] = None
    ) -> Tuple[Optional[CartItemResultDTO], Optional[ServiceError]]:
        increment = quantity if quantity is not None else (item.quantity or 1)
        if increment < 1:
            return None, (
                "INVALID_QUANTITY",
                "Quantity must be at least 1",
                {"quantity": increment},
            )
        row, error = self.price_item(item)
        if error:
            self.logger.info("Add to cart rejected", user_id=user_id, item_id=item.id, code=error[0])
            return None, error
        with transaction.atomic():
            cart = self.carts.for_user(user_id)
            line = self.carts.get_line(cart, item.id)
            if line:
                line = self.carts.update_line(
                    line, quantity=line.quantity + increment, price=row["price"]
                )
            else:
                row["quantity"] = increment
                line = self.carts.add_line(cart, **row)
            self.carts.touch(cart)
        self.logger.info(
            "Cart item added", user_id=user_id, item_id=item.id, quantity=line.quantity
        )
        return CartItemResultDTO(cart=self._dto(cart), item_id=item.id, quantity=line.quantity), None

    def update_quantity(
        self, user_id: int, item_id: str, quantity: int
    ) -> Tuple[Optional[CartItemResultDTO], Optional[ServiceError]]:
        if quantity < 0:
            return None, (
                "INVALID_QUANTITY",
                "Quantity cannot be negative",
                {"quantity": quantity},
            )
        cart = self.carts.for_user(user_id)
        line = self.carts.get_line(cart, item_id)
        if not line:
            self.logger.info("Cart item not found", user_id=user_id, item_id=item_id)
            return None, ("CART_ITEM_NOT_FOUND", "Item not found in cart", {"itemId": item_id})
        if quantity == 0:
            self.carts.delete_line(line)
        else:
            self.carts.update_line(line, quantity=quantity)
        self.carts.touch(cart)
        self.logger.info("Cart item quantity set", user_id=user_id, item_id=item_id, quantity=quantity)
        return CartItemResultDTO(cart=self._dto(cart), item_id=item_id, quantity=quantity), None

    def remove_item(
        self, user_id: int, item_id: str
    ) -> Tuple[Optional[CartDTO], Optional[ServiceError]]:
        cart = self.carts.for_user(user_id)
        line = self.carts.get_line(cart, item_id)
        if not line:
            self.logger.info("Cart item not found", user_id=user_id, item_id=item_id)
            return None, ("CART_ITEM_NOT_FOUND", "Item not found in cart", {"itemId": item_id})
        self.carts.delete_line(line)
        self.carts.touch(cart)
        self.logger.info("Cart item removed", user_id=user_id, item_id=item_id)
        return self._dto(cart), None

    def clear(self, user_id: int) -> CartDTO:
        cart = self.carts.for_user(user_id)
        self.carts.clear(cart)
        self.carts.touch(cart)
        self.logger.info("Cart cleared", user_id=user_id)
        return self._dto(cart)

    # Reconciliation

    def _merge_rows(
        self, server_lines: List[CartLine], local_items: List[CartItemInput]
    ) -> Tuple[List[Dict[str, Any]], List[CartConflictDTO]]:
        rows = {line.item_id: self._line_row(line) for line in server_lines}
        conflicts: List[CartConflictDTO] = []
        for local in local_items:
            existing = rows.get(local.id)
            if existing:
                if existing["quantity"] != local.quantity:
                    conflicts.append(
                        CartConflictDTO(
                            item_id=local.id,
                            local_quantity=local.quantity,
                            server_quantity=existing["quantity"],
                            resolution="higher_quantity",
                        )
                    )
                existing["quantity"] = max(existing["quantity"], local.quantity)
                continue
            row, error = self.price_item(local)
            if error:
                self.logger.info("Dropping local cart item", item_id=local.id, code=error[0])
                continue
            rows[local.id] = row
        return list(rows.values()), conflicts

    def _local_rows(self, local_items: List[CartItemInput]) -> List[Dict[str, Any]]:
        rows: Dict[str, Dict[str, Any]] = {}
        for local in local_items:
            row, error = self.price_item(local)
            if error:
                self.logger.info("Dropping local cart item", item_id=local.id, code=error[0])
                continue
            rows[local.id] = row
        return list(rows.values())

    def sync(self, user_id: int, cmd: CartSyncCommand) -> CartSyncDTO:
        now = self.clock()
        self.logger.info(
            "Syncing cart",
            user_id=user_id,
            strategy=cmd.strategy,
            local_items=len(cmd.local_items),
            last_synced_at=cmd.last_synced_at,
        )
        conflicts: List[CartConflictDTO] = []
        with transaction.atomic():
            cart = self.carts.for_user(user_id)
            if cmd.strategy == "local":
                self.carts.replace_lines(cart, self._local_rows(cmd.local_items))
            elif cmd.strategy == "merge":
                rows, conflicts = self._merge_rows(self.carts.lines(cart), cmd.local_items)
                self.carts.replace_lines(cart, rows)
            self.carts.touch(cart, last_synced_at=now)
        if conflicts:
            self.logger.info("Cart sync resolved conflicts", user_id=user_id, conflicts=len(conflicts))
        return CartSyncDTO(cart=self._dto(cart), synced_at=now.isoformat(), conflicts=conflicts)

    def merge_guest(
        self,
        user_id: int,
        guest_items: List[CartItemInput],
        session_id: Optional[str] = None,
    ) -> CartMergeDTO:
        merged: List[str] = []
        with transaction.atomic():
            cart = self.carts.for_user(user_id)
            for guest in guest_items:
                line = self.carts.get_line(cart, guest.id)
                if line:
                    if guest.quantity > line.quantity:
                        self.carts.update_line(line, quantity=guest.quantity)
                    continue
                row, error = self.price_item(guest)
                if error:
                    self.logger.info("Skipping guest cart item", item_id=guest.id, code=error[0])
                    continue
                self.carts.add_line(cart, **row)
                merged.append(guest.id)
            if session_id:
                self.carts.delete_session_cart(session_id)
            self.carts.touch(cart)
        self.logger.info(
            "Guest cart merged", user_id=user_id, merged=len(merged), session_id=session_id
        )
        return CartMergeDTO(cart=self._dto(cart), merged_items=merged)
