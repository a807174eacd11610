"""Storefront backend port (abstract interface).

Defines the contract that all backend adapters must implement. This enables
swapping between FakeBackend (dev/test) and HttpBackend (production) without
changing the cart, checkout or wallet code.
"""

from abc import ABC, abstractmethod

from storefront.api.schemas import (
    AuthResult,
    CheckoutRequest,
    CheckoutSession,
    PaymentStatus,
    PaymentVerification,
    StoreSummary,
    TokenVerification,
)


class StorefrontBackend(ABC):
    """Abstract storefront backend interface."""

    @abstractmethod
    async def get_store_by_slug(self, slug: str) -> StoreSummary:
        """Resolve a store slug to the store record (and its id)."""
        ...

    @abstractmethod
    async def create_checkout_session(self, store_id: str, request: CheckoutRequest) -> CheckoutSession:
        """Create an order and its pending payment session."""
        ...

    @abstractmethod
    async def get_checkout_status(self, store_id: str, order_id: str) -> PaymentStatus:
        """Fetch the authoritative payment status of an order."""
        ...

    @abstractmethod
    async def verify_payment(self, store_id: str, order_id: str, signature: str | None = None) -> PaymentVerification:
        """Ask the backend to look for the on-chain payment of an order."""
        ...

    @abstractmethod
    async def connect_wallet(self, wallet_address: str, signature: str, message: str) -> AuthResult:
        """Exchange a signed challenge for a session token."""
        ...

    @abstractmethod
    async def verify_token(self) -> TokenVerification:
        """Check that the current session token is still valid."""
        ...
