"""Storefront composition root.

Wires settings, client storage, the shared cart, the backend adapter and wallet
sign-in, and opens a checkout orchestrator per store. There is exactly one
``CartStore`` per ``Storefront``; every surface receives that instance.

Usage:
    storefront = Storefront.create(signer=my_signer)
    storefront.cart.add_to_cart(product)
    await storefront.wallet.connect()
    checkout = await storefront.open_checkout("demo-store")
    await checkout.submit("buyer@example.com")
"""

import structlog

from storefront.api.client import HttpBackend
from storefront.api.port import StorefrontBackend
from storefront.cart.store import CartStore
from storefront.checkout.orchestrator import CheckoutOrchestrator
from storefront.config import Settings
from storefront.storage.file import JsonFileStorage
from storefront.storage.port import KeyValueStorage
from storefront.utils.logging import configure_logging
from storefront.wallet.authenticator import AUTH_TOKEN_KEY, WalletAuthenticator
from storefront.wallet.signer import Signer

logger = structlog.get_logger(__name__)


class Storefront:
    def __init__(
        self,
        settings: Settings,
        storage: KeyValueStorage,
        backend: StorefrontBackend,
        signer: Signer,
    ) -> None:
        self.settings = settings
        self.storage = storage
        self.backend = backend
        self.cart = CartStore.load(storage)
        self.wallet = WalletAuthenticator(signer, backend, storage)
        self._checkouts: dict[str, CheckoutOrchestrator] = {}

    @classmethod
    def create(
        cls,
        signer: Signer,
        settings: Settings | None = None,
        storage: KeyValueStorage | None = None,
        backend: StorefrontBackend | None = None,
    ) -> "Storefront":
        settings = settings or Settings.from_env()
        configure_logging(settings.log_level)
        storage = storage or JsonFileStorage(settings.storage_path)

        if backend is None:
            backend = HttpBackend(
                settings.api_base_url,
                timeout=settings.request_timeout,
                token_provider=lambda: storage.get_item(AUTH_TOKEN_KEY),
            )

        storefront = cls(settings, storage, backend, signer)
        if isinstance(backend, HttpBackend):
            backend.on_unauthorized = storefront.wallet.invalidate_token

        logger.info("Storefront ready", api_base_url=settings.api_base_url, environment=settings.environment)
        return storefront

    async def open_checkout(self, store_slug: str) -> CheckoutOrchestrator:
        """Resolve the store and open (or reopen) its checkout."""
        existing = self._checkouts.pop(store_slug, None)
        if existing is not None:
            existing.close()

        store = await self.backend.get_store_by_slug(store_slug)
        checkout = CheckoutOrchestrator(
            store,
            self.cart,
            self.backend,
            self.wallet,
            poll_interval=self.settings.poll_interval,
            tick_interval=self.settings.expiry_tick,
        )
        self._checkouts[store_slug] = checkout
        return checkout

    async def aclose(self) -> None:
        for checkout in self._checkouts.values():
            checkout.close()
        self._checkouts.clear()
        if isinstance(self.backend, HttpBackend):
            await self.backend.aclose()
