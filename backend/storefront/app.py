"""Composition root wiring the stores of one storefront session."""
import uuid
from dataclasses import dataclass
from typing import Optional

import httpx

from apps.common import get_logger
from .api_client import ApiClient
from .auth import AuthClient, AuthStore
from .basket_builder import CustomBasketBuilder
from .cart_store import CartStore
from .checkout import CheckoutFlow, PaymentConfirmer
from .config import StorefrontConfig
from .protocols import Scheduler
from .scheduling import TimerScheduler
from .storage import FileStorage, KeyValueStorage, MemoryStorage
from .toasts import ToastChannel

logger = get_logger(__name__).bind(component="storefront", layer="bootstrap")

SESSION_ID_KEY = "storefront-session-id"


@dataclass
class Storefront:
    config: StorefrontConfig
    storage: KeyValueStorage
    toasts: ToastChannel
    session: AuthStore
    api: ApiClient
    cart: CartStore
    basket: CustomBasketBuilder
    checkout: CheckoutFlow
    auth: AuthClient

    def close(self) -> None:
        self.api.close()


def _storage_for(config: StorefrontConfig) -> KeyValueStorage:
    if config.storage_path:
        return FileStorage(config.storage_path)
    return MemoryStorage()


def _guest_session_id(storage: KeyValueStorage) -> str:
    session_id = storage.get_item(SESSION_ID_KEY)
    if not session_id:
        session_id = uuid.uuid4().hex
        storage.set_item(SESSION_ID_KEY, session_id)
    return session_id


def build_storefront(
    config: Optional[StorefrontConfig] = None,
    *,
    storage: Optional[KeyValueStorage] = None,
    transport: Optional[httpx.BaseTransport] = None,
    confirmer: Optional[PaymentConfirmer] = None,
    scheduler: Optional[Scheduler] = None,
) -> Storefront:
    """
    Build every store for one session from ``config``.

    State is kept in ``config.storage_path`` when set and in memory otherwise,
    unless ``storage`` is given. One scheduler drives toast expiry and the
    checkout cleanup.
    """
    config = config or StorefrontConfig.from_env()
    storage = storage if storage is not None else _storage_for(config)
    scheduler = scheduler or TimerScheduler()
    toasts = ToastChannel(scheduler=scheduler)
    session = AuthStore(storage)
    api = ApiClient.from_config(
        config, session, transport=transport, session_id=_guest_session_id(storage)
    )
    cart = CartStore(storage, session, api, toasts)
    storefront = Storefront(
        config=config,
        storage=storage,
        toasts=toasts,
        session=session,
        api=api,
        cart=cart,
        basket=CustomBasketBuilder(storage, toasts, cart),
        checkout=CheckoutFlow(
            cart,
            session,
            api,
            toasts,
            storage,
            confirmer,
            scheduler=scheduler,
            cleanup_delay=config.checkout_cleanup_delay,
        ),
        auth=AuthClient(api, session, cart),
    )
    logger.info(
        "Storefront ready",
        api_url=config.api_url,
        persistent=config.storage_path is not None,
        signed_in=session.is_authenticated,
    )
    return storefront
