from typing import Any, Dict, Optional

from apps.common import get_logger
from .api_client import ApiError
from .protocols import CartProtocol
from .storage import KeyValueStorage

logger = get_logger(__name__).bind(component="storefront", layer="store")

AUTH_STORAGE_KEY = "auth-storage"


class AuthStore:
    """Persisted session: ``{user, token, refreshToken}`` under ``auth-storage``."""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self.logger = logger.bind(store="AuthStore")
        state = storage.get_item(AUTH_STORAGE_KEY) or {}
        self.user: Optional[Dict[str, Any]] = state.get("user")
        self._token: Optional[str] = state.get("token")
        self._refresh_token: Optional[str] = state.get("refreshToken")

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._refresh_token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token and self.user)

    @property
    def user_id(self) -> Optional[str]:
        if not self.user:
            return None
        user_id = self.user.get("id")
        return str(user_id) if user_id is not None else None

    def _persist(self) -> None:
        self.storage.set_item(
            AUTH_STORAGE_KEY,
            {"user": self.user, "token": self._token, "refreshToken": self._refresh_token},
        )

    def set_session(self, user: Dict[str, Any], token: str, refresh_token: str) -> None:
        self.user = user
        self._token = token
        self._refresh_token = refresh_token
        self._persist()

    def set_tokens(self, token: str, refresh_token: str) -> None:
        self._token = token
        self._refresh_token = refresh_token
        self._persist()

    def clear(self) -> None:
        self.user = None
        self._token = None
        self._refresh_token = None
        self.storage.remove_item(AUTH_STORAGE_KEY)
        self.logger.info("Session cleared")


class AuthClient:
    def __init__(self, api, store: AuthStore, cart: Optional[CartProtocol] = None):
        self.api = api
        self.store = store
        self.cart = cart
        self.logger = logger.bind(store="AuthClient")

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Start a session and fold the guest cart into the account cart.

        Raises ``ApiError`` when the credentials are rejected.
        """
        data = self.api.login(email, password)
        self.store.set_session(data["user"], data["token"], data["refreshToken"])
        self.logger.info("Logged in", user_id=self.store.user_id)
        if self.cart is not None:
            self.cart.merge_guest_cart()
        return data["user"]

    def logout(self) -> None:
        refresh_token = self.store.refresh_token
        if self.store.is_authenticated:
            try:
                self.api.logout(refresh_token)
            except ApiError as exc:
                # The local session ends regardless of the blacklist call.
                self.logger.warning("Logout call failed", error=exc.message)
        self.store.clear()

    def refresh(self) -> bool:
        return self.api.refresh_tokens()
