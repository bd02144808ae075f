import itertools
import types
import unittest
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

from apps.carts.commands import CartItemInput, CartSyncCommand
from apps.carts.services import CartService
from apps.catalog.dtos import ProductDTO, VariantDTO
from apps.catalog.variants import resolve_item_id


class DummyAtomic:
    def __call__(self, *args, **kwargs):
        return self

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=dt_timezone.utc)


def product(product_id, price, in_stock=True, variants=None, name=None):
    return ProductDTO(
        id=product_id,
        name=name or product_id.title(),
        description=f"{product_id} description",
        category="Gifts",
        price=Decimal(price),
        image=f"{product_id}.jpg",
        in_stock=in_stock,
        variants=list(variants or []),
    )


class FakeCatalog:
    def __init__(self, products):
        self.products = {p.id: p for p in products}

    def resolve_item(self, item_id):
        return resolve_item_id(item_id, self.products.get)


class FakeCartRepository:
    def __init__(self):
        self.carts = {}
        self.lines_by_cart = {}
        self.deleted_sessions = []
        self._ids = itertools.count(1)

    def _cart(self, **owner):
        key = tuple(sorted(owner.items()))
        if key not in self.carts:
            cart = types.SimpleNamespace(
                id=next(self._ids),
                user_id=owner.get("user_id"),
                session_id=owner.get("session_id"),
                last_synced_at=None,
                created_at=NOW,
                updated_at=NOW,
            )
            self.carts[key] = cart
            self.lines_by_cart[cart.id] = []
        return self.carts[key]

    def for_user(self, user_id):
        return self._cart(user_id=user_id)

    def for_session(self, session_id):
        return self._cart(session_id=session_id)

    def delete_session_cart(self, session_id):
        self.deleted_sessions.append(session_id)
        return 1

    def lines(self, cart):
        return list(self.lines_by_cart[cart.id])

    def get_line(self, cart, item_id):
        for line in self.lines_by_cart[cart.id]:
            if line.item_id == item_id:
                return line
        return None

    def add_line(self, cart, **fields):
        fields.setdefault("created_at", NOW)
        line = types.SimpleNamespace(updated_at=NOW, **fields)
        self.lines_by_cart[cart.id].append(line)
        return line

    def update_line(self, line, **fields):
        for k, v in fields.items():
            setattr(line, k, v)
        return line

    def delete_line(self, line):
        for lines in self.lines_by_cart.values():
            if line in lines:
                lines.remove(line)

    def clear(self, cart):
        self.lines_by_cart[cart.id] = []

    def replace_lines(self, cart, rows):
        self.lines_by_cart[cart.id] = []
        for row in rows:
            self.add_line(cart, **row)

    def touch(self, cart, **fields):
        for k, v in fields.items():
            setattr(cart, k, v)
        return cart


def item(item_id, quantity=1, **extra):
    data = {"id": item_id, "name": extra.pop("name", item_id), "price": "1.00"}
    data.update(extra)
    return CartItemInput.from_raw(data, quantity=quantity)


class CartServiceTests(unittest.TestCase):
    def setUp(self):
        self.catalog = FakeCatalog(
            [
                product("tea", "10.00"),
                product("jam", "6.50"),
                product("sold-out", "3.00", in_stock=False),
                product(
                    "rose-candle",
                    "30.00",
                    variants=[VariantDTO("Large Red", "lr.jpg", Decimal("45.00"))],
                    name="Rose Candle",
                ),
            ]
        )
        self.repo = FakeCartRepository()
        self.service = CartService(carts=self.repo, catalog=self.catalog, clock=lambda: NOW)
        patcher = patch("apps.carts.services.transaction.atomic", DummyAtomic())
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_add_uses_catalog_price_and_increments(self):
        result, error = self.service.add_item(1, item("tea", price="0.01"))
        self.assertIsNone(error)
        self.assertEqual(result.cart.items[0].price, Decimal("10.00"))
        result, _ = self.service.add_item(1, item("tea"), quantity=2)
        self.assertEqual(result.quantity, 3)
        self.assertEqual(result.cart.total_items, 3)
        self.assertEqual(result.cart.total_price, Decimal("30.00"))
        self.assertEqual(result.cart.id, "1")

    def test_add_variant_line_resolves_variant_price(self):
        result, error = self.service.add_item(
            1, item("rose-candle-large-red", product_id="rose-candle", variant_name="Large Red")
        )
        self.assertIsNone(error)
        line = result.cart.items[0]
        self.assertEqual(line.price, Decimal("45.00"))
        self.assertEqual(line.product_id, "rose-candle")
        self.assertEqual(line.variant_name, "Large Red")

    def test_add_unknown_and_out_of_stock(self):
        _, error = self.service.add_item(1, item("ghost"))
        self.assertEqual(error[0], "PRODUCT_NOT_FOUND")
        _, error = self.service.add_item(1, item("sold-out"))
        self.assertEqual(error[0], "PRODUCT_OUT_OF_STOCK")
        self.assertEqual(self.service.get_cart(1).items, [])

    def test_custom_basket_priced_from_components(self):
        basket = item(
            "custom-basket-abc",
            name="Custom Natural Basket",
            custom_items=[
                {"id": "tea", "name": "Tea", "price": 1},
                {"id": "jam", "name": "Jam", "price": 1},
                {"id": "rose-candle-large-red", "name": "Rose Candle - Large Red", "price": 1},
            ],
        )
        result, error = self.service.add_item(1, basket)
        self.assertIsNone(error)
        line = result.cart.items[0]
        self.assertEqual(line.price, Decimal("61.50"))
        self.assertEqual([c["price"] for c in line.custom_items], [10.0, 6.5, 45.0])

    def test_custom_basket_with_missing_component(self):
        basket = item("custom-basket-x", custom_items=[{"id": "ghost"}])
        _, error = self.service.add_item(1, basket)
        self.assertEqual(error[0], "PRODUCT_NOT_FOUND")
        self.assertEqual(error[2], {"itemId": "ghost"})

    def test_update_quantity_rules(self):
        self.service.add_item(1, item("tea"))
        _, error = self.service.update_quantity(1, "tea", -1)
        self.assertEqual(error[0], "INVALID_QUANTITY")
        _, error = self.service.update_quantity(1, "jam", 2)
        self.assertEqual(error[0], "CART_ITEM_NOT_FOUND")
        result, _ = self.service.update_quantity(1, "tea", 4)
        self.assertEqual(result.cart.total_items, 4)
        result, _ = self.service.update_quantity(1, "tea", 0)
        self.assertEqual(result.cart.items, [])

    def test_remove_and_clear(self):
        self.service.add_item(1, item("tea"))
        self.service.add_item(1, item("jam"))
        cart, error = self.service.remove_item(1, "tea")
        self.assertIsNone(error)
        self.assertEqual([i.id for i in cart.items], ["jam"])
        _, error = self.service.remove_item(1, "tea")
        self.assertEqual(error[0], "CART_ITEM_NOT_FOUND")
        self.assertEqual(self.service.clear(1).items, [])

    def test_sync_merge_keeps_higher_quantity_and_reports_conflicts(self):
        self.service.add_item(1, item("tea"), quantity=3)
        result = self.service.sync(
            1,
            CartSyncCommand(
                local_items=[item("tea", quantity=5), item("jam", 2), item("ghost"), item("sold-out")],
                strategy="merge",
            ),
        )
        quantities = {i.id: i.quantity for i in result.cart.items}
        self.assertEqual(quantities, {"tea": 5, "jam": 2})
        self.assertEqual(len(result.conflicts), 1)
        conflict = result.conflicts[0]
        self.assertEqual(
            (conflict.item_id, conflict.local_quantity, conflict.server_quantity, conflict.resolution),
            ("tea", 5, 3, "higher_quantity"),
        )
        self.assertEqual(result.synced_at, NOW.isoformat())
        self.assertEqual(result.cart.last_synced_at, NOW.isoformat())

    def test_sync_local_replaces_server(self):
        self.service.add_item(1, item("tea"))
        result = self.service.sync(
            1, CartSyncCommand(local_items=[item("jam", 2, price="99")], strategy="local")
        )
        self.assertEqual([(i.id, i.price) for i in result.cart.items], [("jam", Decimal("6.50"))])
        self.assertEqual(result.conflicts, [])

    def test_sync_server_keeps_server(self):
        self.service.add_item(1, item("tea"))
        result = self.service.sync(
            1, CartSyncCommand(local_items=[item("jam")], strategy="server")
        )
        self.assertEqual([i.id for i in result.cart.items], ["tea"])

    def test_merge_guest(self):
        self.service.add_item(1, item("tea"), quantity=2)
        result = self.service.merge_guest(
            1, [item("tea", 1), item("jam", 3), item("ghost")], session_id="sess-1"
        )
        quantities = {i.id: i.quantity for i in result.cart.items}
        self.assertEqual(quantities, {"tea": 2, "jam": 3})
        self.assertEqual(result.merged_items, ["jam"])
        self.assertEqual(self.repo.deleted_sessions, ["sess-1"])

    def test_guest_cart_is_keyed_by_session(self):
        cart = self.service.guest_cart("sess-9")
        self.assertEqual(cart.id, "sess-9")
        self.assertIsNone(cart.user_id)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
