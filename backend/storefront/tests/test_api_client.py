import json
import unittest

import httpx

from storefront.api_client import ApiClient, ApiError, error_message
from storefront.auth import AuthStore
from storefront.storage import MemoryStorage
from storefront.tests.fakes import signed_in_session


class ErrorMessageTests(unittest.TestCase):
    def test_envelope_message_first(self):
        payload = {"error": {"code": "X", "message": "From envelope"}, "message": "Top level"}
        self.assertEqual(error_message(payload, "fallback"), "From envelope")

    def test_top_level_message_then_error_string(self):
        self.assertEqual(error_message({"message": "Top level", "error": "str"}, "f"), "Top level")
        self.assertEqual(error_message({"error": "Just a string"}, "f"), "Just a string")

    def test_fallback(self):
        self.assertEqual(error_message("<html>", "Bad Gateway"), "Bad Gateway")
        self.assertEqual(error_message({}, "Bad Gateway"), "Bad Gateway")


class ApiClientTests(unittest.TestCase):
    def client(self, handler, session=None):
        self.requests = []

        def recording(request):
            self.requests.append(request)
            return handler(request)

        return ApiClient(
            "https://shop.example.com", session, transport=httpx.MockTransport(recording)
        )

    def test_bearer_token_attached(self):
        session = signed_in_session()
        api = self.client(lambda r: httpx.Response(200, json={"cart": {"items": []}}), session)
        api.get_cart()
        self.assertEqual(self.requests[0].headers["Authorization"], "Bearer access-1")
        self.assertEqual(self.requests[0].url.path, "/api/cart/")

    def test_public_endpoints_skip_token(self):
        session = signed_in_session()
        api = self.client(lambda r: httpx.Response(200, json={"country": "GB", "rates": []}), session)
        api.shipping_rates("GB")
        self.assertNotIn("Authorization", self.requests[0].headers)
        self.assertEqual(self.requests[0].url.params["country"], "GB")

    def test_error_envelope_becomes_api_error(self):
        api = self.client(
            lambda r: httpx.Response(
                404, json={"error": {"code": "CART_ITEM_NOT_FOUND", "message": "Cart item not found", "status": 404}}
            ),
            signed_in_session(),
        )
        with self.assertRaises(ApiError) as ctx:
            api.update_cart_item("tea", 2)
        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(ctx.exception.code, "CART_ITEM_NOT_FOUND")
        self.assertEqual(ctx.exception.message, "Cart item not found")

    def test_non_json_error_uses_reason_phrase(self):
        api = self.client(lambda r: httpx.Response(502, text="upstream down"))
        with self.assertRaises(ApiError) as ctx:
            api.currency_rates()
        self.assertEqual(ctx.exception.message, "Bad Gateway")

    def test_refreshes_once_and_retries_on_401(self):
        session = signed_in_session()

        def handler(request):
            if request.url.path == "/api/auth/refresh/":
                self.assertEqual(json.loads(request.content), {"refreshToken": "refresh-1"})
                return httpx.Response(200, json={"token": "access-2", "refreshToken": "refresh-2"})
            if request.headers.get("Authorization") == "Bearer access-2":
                return httpx.Response(200, json={"cart": {"items": []}})
            return httpx.Response(401, json={"error": {"code": "UNAUTHORIZED", "message": "Token expired"}})

        api = self.client(handler, session)
        self.assertEqual(api.get_cart(), {"cart": {"items": []}})
        self.assertEqual(session.token, "access-2")
        self.assertEqual(session.refresh_token, "refresh-2")
        self.assertEqual([r.url.path for r in self.requests], ["/api/cart/", "/api/auth/refresh/", "/api/cart/"])

    def test_failed_refresh_logs_out(self):
        storage = MemoryStorage()
        session = signed_in_session(storage)
        api = self.client(
            lambda r: httpx.Response(401, json={"error": {"code": "UNAUTHORIZED", "message": "Token expired"}}),
            session,
        )
        with self.assertRaises(ApiError) as ctx:
            api.get_cart()
        self.assertEqual(ctx.exception.status, 401)
        self.assertFalse(session.is_authenticated)
        self.assertIsNone(storage.get_item("auth-storage"))
        self.assertEqual(len(self.requests), 2)

    def test_transport_failure_is_network_error(self):
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = self.client(boom, AuthStore(MemoryStorage()))
        with self.assertRaises(ApiError) as ctx:
            api.products()
        self.assertEqual(ctx.exception.status, 0)
        self.assertEqual(ctx.exception.code, "NETWORK_ERROR")

    def test_sync_cart_body(self):
        api = self.client(lambda r: httpx.Response(200, json={"cart": {"items": []}, "syncedAt": "x"}), signed_in_session())
        api.sync_cart([{"id": "tea", "quantity": 1}], "2026-03-01T12:00:00+00:00")
        self.assertEqual(
            json.loads(self.requests[0].content),
            {
                "localCart": [{"id": "tea", "quantity": 1}],
                "lastSyncedAt": "2026-03-01T12:00:00+00:00",
                "mergeStrategy": "merge",
            },
        )

    def test_password_reset_calls_are_anonymous(self):
        api = self.client(lambda r: httpx.Response(200, json={"success": True, "message": "ok"}), signed_in_session())
        api.forgot_password("ada@example.com")
        api.reset_password("NDI.signed", "NewPass456")
        self.assertEqual(
            [r.url.path for r in self.requests], ["/api/auth/forgot-password/", "/api/auth/reset-password/"]
        )
        self.assertNotIn("Authorization", self.requests[0].headers)
        self.assertEqual(json.loads(self.requests[1].content), {"token": "NDI.signed", "newPassword": "NewPass456"})

    def test_contact_message_body(self):
        api = self.client(lambda r: httpx.Response(200, json={"success": True, "message": "ok"}))
        api.send_contact_message("Ada", "ada@example.com", "0123", "Hello")
        self.assertEqual(self.requests[0].url.path, "/api/contact/")
        self.assertEqual(
            json.loads(self.requests[0].content),
            {"name": "Ada", "email": "ada@example.com", "phone": "0123", "message": "Hello"},
        )
