import types
import unittest
from decimal import Decimal
from unittest.mock import Mock, patch

from rest_framework.test import APIRequestFactory, force_authenticate

from apps.carts.dtos import CartConflictDTO, CartDTO, CartItemResultDTO, CartSyncDTO
from apps.carts.views import (
    CartItemDetailView,
    CartItemListView,
    CartSyncView,
    GuestCartView,
)


def make_user(user_id=7):
    return types.SimpleNamespace(
        id=user_id, pk=user_id, is_authenticated=True, is_superuser=False, role="customer"
    )


def empty_cart(cart_id="7"):
    return CartDTO(id=cart_id, user_id=cart_id, session_id=None)


class CartViewsUnitTests(unittest.TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.activities = Mock()
        for view in (CartItemListView, CartItemDetailView):
            patcher = patch.object(view, "activities", self.activities)
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_add_item_requires_authentication(self):
        request = self.factory.post("/api/cart/items/", {"item": {"id": "tea"}}, format="json")
        response = CartItemListView.as_view()(request)
        self.assertEqual(response.status_code, 401)

    def test_add_item_passes_snake_case_item_and_records_activity(self):
        service = Mock()
        service.add_item.return_value = (
            CartItemResultDTO(cart=empty_cart(), item_id="tea", quantity=2),
            None,
        )
        with patch.object(CartItemListView, "service", service):
            request = self.factory.post(
                "/api/cart/items/",
                {"item": {"id": "tea", "productId": "tea", "name": "Tea", "price": 9}, "quantity": 2},
                format="json",
            )
            force_authenticate(request, user=make_user())
            response = CartItemListView.as_view()(request)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["item"], {"id": "tea", "quantity": 2})
        user_id, item, quantity = service.add_item.call_args[0]
        self.assertEqual((user_id, item.product_id, quantity), (7, "tea", 2))
        self.assertEqual(item.price, Decimal("9"))
        self.assertEqual(self.activities.record_from_request.call_args[0][1], "cart.item_added")

    def test_add_item_error_maps_status(self):
        service = Mock()
        service.add_item.return_value = (
            None,
            ("PRODUCT_OUT_OF_STOCK", "Product is out of stock", {"itemId": "tea"}),
        )
        with patch.object(CartItemListView, "service", service):
            request = self.factory.post("/api/cart/items/", {"item": {"id": "tea"}}, format="json")
            force_authenticate(request, user=make_user())
            response = CartItemListView.as_view()(request)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "PRODUCT_OUT_OF_STOCK")
        self.activities.record_from_request.assert_not_called()

    def test_update_to_zero_records_removal(self):
        service = Mock()
        service.update_quantity.return_value = (
            CartItemResultDTO(cart=empty_cart(), item_id="tea", quantity=0),
            None,
        )
        with patch.object(CartItemDetailView, "service", service):
            request = self.factory.put("/api/cart/items/tea/", {"quantity": 0}, format="json")
            force_authenticate(request, user=make_user())
            response = CartItemDetailView.as_view()(request, item_id="tea")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.activities.record_from_request.call_args[0][1], "cart.item_removed")

    def test_sync_omits_conflicts_when_none(self):
        service = Mock()
        service.sync.return_value = CartSyncDTO(cart=empty_cart(), synced_at="2026-01-01T00:00:00+00:00")
        with patch.object(CartSyncView, "service", service):
            request = self.factory.post(
                "/api/cart/sync/", {"localCart": [], "mergeStrategy": "server"}, format="json"
            )
            force_authenticate(request, user=make_user())
            response = CartSyncView.as_view()(request)
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("conflicts", response.data)
        self.assertEqual(service.sync.call_args[0][1].strategy, "server")

    def test_sync_reports_conflicts(self):
        service = Mock()
        service.sync.return_value = CartSyncDTO(
            cart=empty_cart(),
            synced_at="2026-01-01T00:00:00+00:00",
            conflicts=[CartConflictDTO("tea", 5, 3, "higher_quantity")],
        )
        with patch.object(CartSyncView, "service", service):
            request = self.factory.post("/api/cart/sync/", {"localCart": []}, format="json")
            force_authenticate(request, user=make_user())
            response = CartSyncView.as_view()(request)
        self.assertEqual(
            response.data["conflicts"][0],
            {"itemId": "tea", "localQuantity": 5, "serverQuantity": 3, "resolution": "higher_quantity"},
        )

    def test_sync_rejects_unknown_strategy(self):
        request = self.factory.post(
            "/api/cart/sync/", {"localCart": [], "mergeStrategy": "newest"}, format="json"
        )
        force_authenticate(request, user=make_user())
        response = CartSyncView.as_view()(request)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")

    def test_guest_cart_requires_session_header(self):
        response = GuestCartView.as_view()(self.factory.get("/api/cart/guest/"))
        self.assertEqual(response.status_code, 400)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
