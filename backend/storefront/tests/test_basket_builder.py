import unittest
from unittest.mock import Mock

from storefront.basket_builder import BASKET_STORAGE_KEY, CustomBasketBuilder
from storefront.storage import MemoryStorage
from storefront.toasts import ToastChannel


def basket_item(item_id, price=10):
    return {"id": item_id, "name": item_id.title(), "description": "", "image": "", "price": price, "category": "Candles"}


class CustomBasketBuilderTests(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.toasts = ToastChannel()
        self.cart = Mock()
        self.cart.add_item.return_value = True
        self.builder = CustomBasketBuilder(
            self.storage, self.toasts, self.cart, id_factory=lambda: "custom-basket-1234"
        )

    def fill(self, count, price=10):
        self.builder.set_basket_type("natural")
        for index in range(count):
            self.builder.add_item(basket_item(f"item-{index}", price))

    def test_sixth_distinct_item_rejected(self):
        self.fill(5)
        self.assertFalse(self.builder.add_item(basket_item("item-5")))
        self.assertEqual(len(self.builder.selected_items), 5)
        self.assertEqual(self.toasts.last.title, "Selection Limit Reached")
        self.assertEqual(self.toasts.last.type, "info")

    def test_duplicate_rejected(self):
        self.fill(1)
        self.assertFalse(self.builder.add_item(basket_item("item-0")))
        self.assertEqual(self.toasts.last.title, "Already Added")

    def test_total_tracks_add_and_remove(self):
        self.builder.set_basket_type("black")
        self.builder.add_item(basket_item("a", 12))
        self.builder.add_item(basket_item("b", 8))
        self.builder.remove_item("a")
        self.assertEqual(self.builder.total_price, 8)

    def test_total_rounded_to_pence(self):
        self.builder.set_basket_type("natural")
        for item_id, price in (("a", 9.99), ("b", 14.99), ("c", 12.5)):
            self.builder.add_item(basket_item(item_id, price))
        self.assertEqual(self.builder.total_price, 37.48)
        self.assertEqual(self.builder.to_cart_item()["price"], 37.48)
        self.builder.remove_item("c")
        self.assertEqual(self.builder.total_price, 24.98)

    def test_pending_items_flushed_when_type_chosen(self):
        self.builder.queue_item(basket_item("a"))
        self.builder.queue_item(basket_item("b"))
        self.builder.queue_item(basket_item("a"))
        self.assertEqual(len(self.builder.pending_items), 2)
        self.builder.set_basket_type("natural")
        self.assertEqual([i["id"] for i in self.builder.selected_items], ["a", "b"])
        self.assertEqual(self.builder.pending_items, [])
        self.assertEqual(self.toasts.last.title, "Items Added")
        self.assertEqual(self.toasts.last.message, "2 items have been added to your basket.")

    def test_single_pending_item_message(self):
        self.builder.queue_item(basket_item("a"))
        self.builder.set_basket_type("black")
        self.assertEqual(self.toasts.last.title, "Item Added")
        self.assertEqual(self.toasts.last.message, "1 item has been added to your basket.")

    def test_queue_with_active_basket_adds_directly(self):
        self.builder.set_basket_type("natural")
        self.builder.queue_item(basket_item("a"))
        self.assertEqual(len(self.builder.selected_items), 1)

    def test_conversion_needs_three_items(self):
        self.fill(2)
        result = self.builder.add_to_cart()
        self.assertFalse(result.ok)
        self.cart.add_item.assert_not_called()
        self.assertEqual(self.toasts.last.title, "Select Three Items")
        self.assertEqual(self.toasts.last.type, "warning")

    def test_conversion_pushes_one_line_priced_at_total(self):
        self.fill(3, price=15)
        result = self.builder.add_to_cart()
        self.assertTrue(result.ok)
        self.assertEqual(result.redirect, "/cart")
        self.cart.add_item.assert_called_once()
        line = self.cart.add_item.call_args[0][0]
        self.assertEqual(line["id"], "custom-basket-1234")
        self.assertEqual(line["name"], "Custom Natural Basket")
        self.assertEqual(line["price"], 45)
        self.assertEqual(line["category"], "Custom Basket")
        self.assertEqual(len(line["customItems"]), 3)
        self.assertEqual(line["description"], "Custom basket with 3 selected items (includes wicker basket)")
        self.assertIsNone(self.builder.current_basket)

    def test_basket_kept_when_cart_rejects(self):
        self.cart.add_item.return_value = False
        self.fill(3)
        result = self.builder.add_to_cart()
        self.assertFalse(result.ok)
        self.assertEqual(len(self.builder.selected_items), 3)

    def test_state_persisted(self):
        self.builder.queue_item(basket_item("a"))
        reloaded = CustomBasketBuilder(self.storage, ToastChannel())
        self.assertEqual(reloaded.pending_items[0]["id"], "a")
        self.fill(1)
        self.assertEqual(
            self.storage.get_item(BASKET_STORAGE_KEY)["currentBasket"]["basketType"], "natural"
        )

    def test_build_item_uses_selected_variant(self):
        product = {
            "id": "rose-candle",
            "name": "Rose Candle",
            "description": "Hand poured",
            "category": "Candles",
            "price": 20,
            "variants": [
                {"name": "Small Jar", "image": "small.jpg", "price": 20},
                {"name": "Large Jar", "image": "large.jpg", "price": 32},
            ],
            "details": {"burnTime": "40h"},
        }
        self.builder.select_variant("rose-candle", 1)
        item = self.builder.build_item(product)
        self.assertEqual(item["id"], "rose-candle-large-jar")
        self.assertEqual(item["name"], "Rose Candle - Large Jar")
        self.assertEqual(item["price"], 32)
        self.assertEqual(item["image"], "large.jpg")
        self.assertEqual(item["details"], {"burnTime": "40h"})

    def test_switching_variant_leaves_basket_untouched(self):
        product = {
            "id": "tea",
            "name": "Tea",
            "price": 5,
            "variants": [{"name": "Default", "image": "", "price": 5}, {"name": "Loose Leaf", "image": "", "price": 7}],
        }
        self.builder.set_basket_type("natural")
        self.builder.add_product(product)
        self.builder.select_variant("tea", 1)
        self.assertEqual(self.builder.selected_items[0]["name"], "Tea")
        self.assertEqual(self.builder.selected_items[0]["id"], "tea-default")
