"""Client core of the Tassel & Wicker storefront.

Holds the state a browser session would hold (cart, custom basket, checkout
progress, auth tokens) and talks to the backend over HTTP.
"""
from .api_client import ApiClient, ApiError
from .app import Storefront, build_storefront
from .auth import AuthClient, AuthStore
from .basket_builder import CustomBasketBuilder
from .cart_store import CartStore
from .checkout import CheckoutFlow
from .config import StorefrontConfig
from .scheduling import TimerScheduler
from .storage import FileStorage, MemoryStorage
from .toasts import ToastChannel

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthClient",
    "AuthStore",
    "CartStore",
    "CheckoutFlow",
    "CustomBasketBuilder",
    "FileStorage",
    "MemoryStorage",
    "Storefront",
    "StorefrontConfig",
    "TimerScheduler",
    "ToastChannel",
    "build_storefront",
]
