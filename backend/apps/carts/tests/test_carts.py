from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.activities.models import Activity
from apps.carts.models import Cart
from apps.catalog.models import Product, ProductVariant
from apps.users.models import User


class CartApiTests(APITestCase):
    def setUp(self):
        candle = Product.objects.create(id="rose-candle", name="Rose Candle", price="30.00")
        ProductVariant.objects.create(product=candle, name="Large Red", price="45.00")
        Product.objects.create(id="tea", name="Tea", price="10.00")
        self.user = User.objects.create_user(
            username="shopper", email="shopper@example.com", password="ShopPass1"
        )
        self.client.force_authenticate(self.user)

    def test_add_update_remove_flow(self):
        items_url = reverse("api-cart-items")
        added = self.client.post(
            items_url,
            {
                "item": {
                    "id": "rose-candle-large-red",
                    "productId": "rose-candle",
                    "name": "Rose Candle - Large Red",
                    "price": 1,
                    "variantName": "Large Red",
                }
            },
            format="json",
        )
        self.assertEqual(added.status_code, status.HTTP_200_OK)
        self.assertEqual(added.data["cart"]["totalPrice"], 45)
        detail = reverse("api-cart-item-detail", args=["rose-candle-large-red"])
        updated = self.client.put(detail, {"quantity": 3}, format="json")
        self.assertEqual(updated.data["cart"]["totalItems"], 3)
        removed = self.client.delete(detail)
        self.assertEqual(removed.data["removedItemId"], "rose-candle-large-red")
        self.assertEqual(removed.data["cart"]["items"], [])
        types = list(Activity.objects.values_list("type", flat=True))
        self.assertIn("cart.item_added", types)
        self.assertIn("cart.item_removed", types)

    def test_merge_guest_deletes_session_cart(self):
        Cart.objects.create(session_id="sess-1")
        response = self.client.post(
            reverse("api-cart-merge-guest"),
            {"guestCart": [{"id": "tea", "name": "Tea", "price": 10, "quantity": 2}]},
            format="json",
            HTTP_X_SESSION_ID="sess-1",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["mergedItems"], ["tea"])
        self.assertFalse(Cart.objects.filter(session_id="sess-1").exists())
        self.assertEqual(self.client.get(reverse("api-cart")).data["cart"]["totalItems"], 2)
