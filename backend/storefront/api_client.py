from typing import Any, Dict, List, Optional

import httpx

from apps.common import get_logger
from .protocols import SessionProtocol

logger = get_logger(__name__).bind(component="storefront", layer="client")

REFRESH_PATH = "/api/auth/refresh/"


class ApiError(Exception):
    """HTTP or transport failure talking to the backend."""

    def __init__(
        self,
        message: str,
        status: int = 0,
        code: Optional[str] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.payload = payload

    def __repr__(self):
        return f"ApiError(status={self.status}, code={self.code!r}, message={self.message!r})"


def error_message(payload: Any, fallback: str) -> str:
    """Pick the most specific message out of an error body."""
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
            return error["message"]
        if isinstance(payload.get("message"), str) and payload["message"]:
            return payload["message"]
        if isinstance(error, str) and error:
            return error
    return fallback


def error_code(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            return error.get("code")
        return payload.get("code")
    return None


class ApiClient:
    """Backend client: JSON in and out, bearer auth, one refresh-and-retry on 401."""

    def __init__(
        self,
        base_url: str,
        session: Optional[SessionProtocol] = None,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
        session_id: Optional[str] = None,
    ):
        self.session = session
        self.session_id = session_id
        self.http = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self.logger = logger.bind(service="ApiClient")

    @classmethod
    def from_config(cls, config, session=None, **kwargs) -> "ApiClient":
        return cls(config.api_url, session, timeout=config.timeout, **kwargs)

    def close(self) -> None:
        self.http.close()

    def _headers(self, authenticated: bool) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if authenticated and self.session is not None and self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        if self.session_id:
            headers["X-Session-ID"] = self.session_id
        return headers

    def _send(self, method: str, path: str, *, authenticated: bool, **kwargs) -> httpx.Response:
        try:
            return self.http.request(method, path, headers=self._headers(authenticated), **kwargs)
        except httpx.HTTPError as exc:
            self.logger.warning("Request failed", method=method, path=path, error=str(exc))
            raise ApiError(str(exc) or "Network error", status=0, code="NETWORK_ERROR") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if not response.is_error:
            return
        try:
            payload = response.json()
        except ValueError:
            payload = response.text or None
        raise ApiError(
            error_message(payload, response.reason_phrase or f"HTTP {response.status_code}"),
            status=response.status_code,
            code=error_code(payload),
            payload=payload,
        )

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        kwargs: Dict[str, Any] = {}
        if json is not None:
            kwargs["json"] = json
        if params:
            kwargs["params"] = params
        response = self._send(method, path, authenticated=authenticated, **kwargs)
        if (
            response.status_code == 401
            and authenticated
            and self.session is not None
            and self.session.refresh_token
        ):
            if self.refresh_tokens():
                response = self._send(method, path, authenticated=True, **kwargs)
            else:
                self.logger.info("Refresh failed, logging out", path=path)
                self.session.clear()
        self._raise_for_status(response)
        return self._json(response)

    def refresh_tokens(self) -> bool:
        """Rotate the token pair; returns False when the refresh token is rejected."""
        if self.session is None or not self.session.refresh_token:
            return False
        try:
            response = self._send(
                "POST",
                REFRESH_PATH,
                authenticated=False,
                json={"refreshToken": self.session.refresh_token},
            )
        except ApiError:
            return False
        if response.is_error:
            return False
        data = response.json()
        self.session.set_tokens(data["token"], data["refreshToken"])
        self.logger.debug("Tokens refreshed")
        return True

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PUT", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request("DELETE", path, **kwargs)

    # Auth
    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self.post(
            "/api/auth/login/", {"email": email, "password": password}, authenticated=False
        )

    def logout(self, refresh_token: Optional[str]) -> Any:
        return self.post("/api/auth/logout/", {"refreshToken": refresh_token or ""})

    def me(self) -> Dict[str, Any]:
        return self.get("/api/auth/me/")

    def forgot_password(self, email: str) -> Dict[str, Any]:
        return self.post("/api/auth/forgot-password/", {"email": email}, authenticated=False)

    def reset_password(self, token: str, new_password: str) -> Dict[str, Any]:
        return self.post(
            "/api/auth/reset-password/",
            {"token": token, "newPassword": new_password},
            authenticated=False,
        )

    # Catalog
    def products(self, **params) -> Dict[str, Any]:
        return self.get("/api/products/", params=params, authenticated=False)

    def product(self, product_id: str) -> Dict[str, Any]:
        return self.get(f"/api/products/{product_id}/", authenticated=False)

    # Cart
    def get_cart(self) -> Dict[str, Any]:
        return self.get("/api/cart/")

    def add_cart_item(self, item: Dict[str, Any], quantity: int = 1) -> Dict[str, Any]:
        return self.post("/api/cart/items/", {"item": item, "quantity": quantity})

    def update_cart_item(self, item_id: str, quantity: int) -> Dict[str, Any]:
        return self.put(f"/api/cart/items/{item_id}/", {"quantity": quantity})

    def remove_cart_item(self, item_id: str) -> Dict[str, Any]:
        return self.delete(f"/api/cart/items/{item_id}/")

    def clear_cart(self) -> Dict[str, Any]:
        return self.delete("/api/cart/")

    def sync_cart(
        self,
        items: List[Dict[str, Any]],
        last_synced_at: Optional[str] = None,
        merge_strategy: str = "merge",
    ) -> Dict[str, Any]:
        return self.post(
            "/api/cart/sync/",
            {"localCart": items, "lastSyncedAt": last_synced_at, "mergeStrategy": merge_strategy},
        )

    def merge_guest_cart(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self.post("/api/cart/merge-guest/", {"guestCart": items})

    # Checkout
    def shipping_rates(self, country: str) -> Dict[str, Any]:
        return self.get(
            "/api/checkout/shipping-rates/", params={"country": country}, authenticated=False
        )

    def currency_rates(self) -> Dict[str, Any]:
        return self.get("/api/checkout/currency-rates/", authenticated=False)

    def create_payment_intent(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.post("/api/checkout/payment-intent/", payload)

    def send_order_email(
        self, payment_intent_id: str, customer_email: str, customer_name: Optional[str] = None
    ) -> Dict[str, Any]:
        body = {"paymentIntentId": payment_intent_id, "customerEmail": customer_email}
        if customer_name:
            body["customerName"] = customer_name
        return self.post("/api/checkout/order-email/", body)

    # Newsletter
    def subscribe_newsletter(self, email: str, locale: Optional[str] = None) -> Dict[str, Any]:
        body = {"email": email}
        if locale:
            body["locale"] = locale
        return self.post("/api/newsletter/", body, authenticated=False)

    # Contact
    def send_contact_message(self, name: str, email: str, phone: str, message: str) -> Dict[str, Any]:
        return self.post(
            "/api/contact/",
            {"name": name, "email": email, "phone": phone, "message": message},
            authenticated=False,
        )
