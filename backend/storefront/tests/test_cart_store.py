import unittest
from datetime import datetime, timezone

from storefront.auth import AuthStore
from storefront.cart_store import CART_STORAGE_KEY, CartStore
from storefront.storage import MemoryStorage
from storefront.tests.fakes import FakeCartApi, signed_in_session
from storefront.toasts import ToastChannel

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def product_item(item_id="p1", price=50, **extra):
    return {
        "id": item_id,
        "productId": item_id.split("-")[0],
        "name": f"Product {item_id}",
        "price": price,
        "image": "",
        "category": "Hampers",
        "description": "",
        **extra,
    }


class GuestCartTests(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.api = FakeCartApi()
        self.toasts = ToastChannel()
        self.cart = CartStore(self.storage, AuthStore(MemoryStorage()), self.api, self.toasts, clock=lambda: NOW)

    def test_add_update_remove_scenario(self):
        self.assertTrue(self.cart.add_item(product_item()))
        self.assertEqual(self.cart.get_total_items(), 1)
        self.assertEqual(self.cart.get_total_price(), 50)
        self.cart.add_item(product_item())
        self.assertEqual(self.cart.items[0]["quantity"], 2)
        self.assertEqual(self.cart.get_total_price(), 100)
        self.assertEqual(self.toasts.last.title, "Item Updated")
        self.cart.update_quantity("p1", 0)
        self.assertEqual(self.cart.items, [])
        self.assertEqual(self.toasts.last.title, "Item Removed")

    def test_variants_are_separate_lines(self):
        self.cart.add_item(product_item("candle-red", price=20, variantName="Red"))
        self.cart.add_item(product_item("candle-blue", price=25, variantName="Blue"))
        self.assertEqual(len(self.cart.items), 2)
        self.assertEqual(self.cart.get_total_price(), 45)

    def test_totals_hold_after_mixed_operations(self):
        self.cart.add_item(product_item("a", price=10))
        self.cart.add_item(product_item("b", price=3))
        self.cart.add_item(product_item("a", price=10))
        self.cart.update_quantity("b", 4)
        self.cart.remove_item("a")
        self.cart.add_item(product_item("c", price=7))
        expected_price = sum(i["price"] * i["quantity"] for i in self.cart.items)
        self.assertEqual(self.cart.get_total_price(), expected_price)
        self.assertEqual(self.cart.get_total_items(), 5)

    def test_guest_never_calls_backend(self):
        self.cart.add_item(product_item())
        self.cart.clear_cart()
        self.assertFalse(self.cart.sync_with_server())
        self.assertFalse(self.cart.merge_guest_cart())
        self.assertEqual(self.api.calls, [])
        self.assertEqual(self.toasts.last.title, "Cart Cleared")

    def test_state_is_persisted_and_rehydrated(self):
        self.cart.add_item(product_item(quantity=9))
        self.assertEqual(self.storage.get_item(CART_STORAGE_KEY)["items"][0]["quantity"], 1)
        reloaded = CartStore(self.storage, AuthStore(MemoryStorage()), self.api, ToastChannel())
        self.assertEqual(reloaded.get_total_items(), 1)

    def test_unknown_line_operations_return_false(self):
        self.assertFalse(self.cart.remove_item("ghost"))
        self.assertFalse(self.cart.update_quantity("ghost", 3))


class SignedInCartTests(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.toasts = ToastChannel()

    def build(self, api):
        self.api = api
        return CartStore(self.storage, signed_in_session(), api, self.toasts, clock=lambda: NOW)

    def test_add_adopts_server_cart(self):
        cart = self.build(FakeCartApi())
        self.assertTrue(cart.add_item(product_item()))
        self.assertEqual(self.api.calls, ["add_cart_item"])
        self.assertNotIn("createdAt", cart.items[0])
        self.assertEqual(cart.last_synced_at, NOW.isoformat())
        self.assertEqual(self.toasts.last.title, "Added to Cart")

    def test_readd_sends_target_quantity(self):
        line = {**product_item(), "quantity": 1}
        self.storage.set_item(CART_STORAGE_KEY, {"items": [line], "lastSyncedAt": None})
        cart = self.build(FakeCartApi(lines=[line]))
        cart.add_item(product_item())
        self.assertEqual(self.api.calls, ["update_cart_item"])
        self.assertEqual(cart.items[0]["quantity"], 2)

    def test_remote_failure_restores_exact_items(self):
        existing = [{**product_item("a", price=10), "quantity": 3}]
        self.storage.set_item(CART_STORAGE_KEY, {"items": existing, "lastSyncedAt": None})
        cart = self.build(FakeCartApi(fail={"add_cart_item"}))
        self.assertFalse(cart.add_item(product_item("b")))
        self.assertEqual(cart.items, existing)
        self.assertEqual(self.storage.get_item(CART_STORAGE_KEY)["items"], existing)
        self.assertEqual(self.toasts.last.type, "error")
        self.assertEqual(self.toasts.last.title, "Failed to Add Item")
        self.assertEqual(self.toasts.last.message, "add_cart_item exploded")

    def test_failed_remove_and_update_roll_back(self):
        existing = [{**product_item("a", price=10), "quantity": 3}]
        self.storage.set_item(CART_STORAGE_KEY, {"items": existing, "lastSyncedAt": None})
        cart = self.build(FakeCartApi(fail={"remove_cart_item", "update_cart_item"}))
        self.assertFalse(cart.remove_item("a"))
        self.assertEqual(self.toasts.last.title, "Failed to Remove Item")
        self.assertFalse(cart.update_quantity("a", 5))
        self.assertEqual(self.toasts.last.title, "Failed to Update Quantity")
        self.assertEqual(cart.items, existing)

    def test_clear_failure_keeps_items(self):
        existing = [{**product_item("a", price=10), "quantity": 1}]
        self.storage.set_item(CART_STORAGE_KEY, {"items": existing, "lastSyncedAt": None})
        cart = self.build(FakeCartApi(fail={"clear_cart"}))
        self.assertFalse(cart.clear_cart())
        self.assertEqual(cart.items, existing)
        self.assertEqual(self.toasts.last.title, "Failed to Clear Cart")

    def test_sync_adopts_server_result(self):
        local = [{**product_item("a", price=10), "quantity": 4}]
        self.storage.set_item(CART_STORAGE_KEY, {"items": local, "lastSyncedAt": "2026-02-01T00:00:00+00:00"})
        api = FakeCartApi(lines=[{**product_item("b", price=5), "quantity": 1}])
        cart = self.build(api)
        self.assertTrue(cart.sync_with_server())
        self.assertEqual(api.synced[1], "2026-02-01T00:00:00+00:00")
        self.assertEqual(api.synced[2], "merge")
        self.assertEqual({line["id"] for line in cart.items}, {"a", "b"})
        self.assertEqual(cart.last_synced_at, "2026-03-01T12:00:00+00:00")

    def test_sync_failure_leaves_state(self):
        local = [{**product_item("a", price=10), "quantity": 4}]
        self.storage.set_item(CART_STORAGE_KEY, {"items": local, "lastSyncedAt": None})
        cart = self.build(FakeCartApi(fail={"sync_cart"}))
        self.assertFalse(cart.sync_with_server())
        self.assertEqual(cart.items, local)
        self.assertIsNone(cart.last_synced_at)
        self.assertEqual(self.toasts.last.title, "Failed to Sync Cart")

    def test_merge_with_empty_local_cart_fetches_server(self):
        api = FakeCartApi(lines=[{**product_item("b", price=5), "quantity": 2}])
        cart = self.build(api)
        self.assertTrue(cart.merge_guest_cart())
        self.assertEqual(api.calls, ["get_cart"])
        self.assertEqual(cart.get_total_items(), 2)

    def test_merge_reports_added_items(self):
        self.storage.set_item(
            CART_STORAGE_KEY, {"items": [{**product_item("a", price=10), "quantity": 1}], "lastSyncedAt": None}
        )
        cart = self.build(FakeCartApi(lines=[{**product_item("b", price=5), "quantity": 1}]))
        self.assertTrue(cart.merge_guest_cart())
        self.assertEqual(len(cart.items), 2)
        self.assertEqual(self.toasts.last.title, "Cart Merged")
        self.assertEqual(self.toasts.last.message, "1 item(s) from your guest cart have been added")

    def test_merge_failure_falls_back_to_fetch(self):
        self.storage.set_item(
            CART_STORAGE_KEY, {"items": [{**product_item("a", price=10), "quantity": 1}], "lastSyncedAt": None}
        )
        api = FakeCartApi(lines=[{**product_item("b", price=5), "quantity": 1}], fail={"merge_guest_cart"})
        cart = self.build(api)
        self.assertTrue(cart.merge_guest_cart())
        self.assertEqual([line["id"] for line in cart.items], ["b"])
        self.assertEqual(api.calls, ["merge_guest_cart", "get_cart"])

    def test_merge_and_fetch_failure_keeps_local(self):
        local = [{**product_item("a", price=10), "quantity": 1}]
        self.storage.set_item(CART_STORAGE_KEY, {"items": local, "lastSyncedAt": None})
        cart = self.build(FakeCartApi(fail={"merge_guest_cart", "get_cart"}))
        self.assertFalse(cart.merge_guest_cart())
        self.assertEqual(cart.items, local)
        self.assertEqual(self.toasts.last.title, "Failed to Merge Cart")
