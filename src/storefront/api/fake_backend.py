"""Configurable in-memory storefront backend for development and testing.

This adapter simulates the real backend without any network calls. It can be
configured at runtime to fail requests or to move orders to a given payment
status, making it useful for:
- Automated tests with predictable outcomes
- The FastAPI stub server used for local development
"""

from collections import defaultdict, deque
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

from storefront.api.port import StorefrontBackend
from storefront.api.schemas import (
    AuthResult,
    CheckoutRequest,
    CheckoutSession,
    OrderLine,
    PaymentStatus,
    PaymentVerification,
    ProductSnapshot,
    StoreSnapshot,
    StoreSummary,
    TokenVerification,
    UserProfile,
)
from storefront.errors import ApiError, AuthError, NotFoundError


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FakeBackend(StorefrontBackend):
    """In-memory backend holding stores, products and orders."""

    def __init__(
        self,
        session_ttl: timedelta = timedelta(minutes=10),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.session_ttl = session_ttl
        self.clock = clock
        self.stores: dict[str, StoreSummary] = {}
        self.products: dict[str, ProductSnapshot] = {}
        self.orders: dict[str, dict] = {}
        self.tokens: dict[str, UserProfile] = {}
        self.current_token: str | None = None
        self.calls: list[dict] = []
        self._errors: dict[str, deque] = defaultdict(deque)
        self._status_script: dict[str, deque] = defaultdict(deque)

    @classmethod
    def seeded(cls) -> "FakeBackend":
        """A backend pre-loaded with one demo store and two products."""
        backend = cls()
        backend.add_store(StoreSummary(id="store-001", name="Demo Store", slug="demo-store"))
        backend.add_product(ProductSnapshot(id="prod-001", name="Sticker Pack", price="1.50"))
        backend.add_product(ProductSnapshot(id="prod-002", name="Hoodie", price="12.00"))
        return backend

    # -------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------
    def add_store(self, store: StoreSummary) -> None:
        self.stores[store.slug] = store

    def add_product(self, product: ProductSnapshot) -> None:
        self.products[product.id] = product

    def fail_next(self, method: str, error: Exception) -> None:
        """Make the next call to ``method`` raise ``error``."""
        self._errors[method].append(error)

    def script_statuses(self, order_id: str, *statuses: str) -> None:
        """Queue statuses that successive status checks will move the order to."""
        self._status_script[order_id].extend(statuses)

    def set_status(self, order_id: str, status: str, transaction_signature: str | None = None) -> None:
        order = self._order(order_id)
        order["status"] = status
        order["transaction_signature"] = transaction_signature
        order["updated_at"] = self.clock()

    def _record(self, method: str, **kwargs) -> None:
        self.calls.append({"method": method, **kwargs})
        if self._errors[method]:
            raise self._errors[method].popleft()

    def _order(self, order_id: str) -> dict:
        if order_id not in self.orders:
            raise NotFoundError("The requested resource was not found.")
        return self.orders[order_id]

    def _store_by_id(self, store_id: str) -> StoreSummary:
        store = next((s for s in self.stores.values() if s.id == store_id), None)
        if store is None:
            raise NotFoundError("The requested resource was not found.")
        return store

    def calls_to(self, method: str) -> list[dict]:
        return [c for c in self.calls if c["method"] == method]

    # -------------------------------------------------------------------
    # Backend contract
    # -------------------------------------------------------------------
    async def get_store_by_slug(self, slug: str) -> StoreSummary:
        self._record("get_store_by_slug", slug=slug)
        if slug not in self.stores:
            raise NotFoundError("The requested resource was not found.")
        return self.stores[slug]

    async def create_checkout_session(self, store_id: str, request: CheckoutRequest) -> CheckoutSession:
        self._record("create_checkout_session", store_id=store_id, request=request)
        store = self._store_by_id(store_id)
        product = self.products.get(request.product_id)
        if product is None:
            raise ApiError("Product not found", code="PRODUCT_NOT_FOUND")

        order_id = f"ord-{uuid4().hex[:12]}"
        reference = uuid4().hex
        amount = str(Decimal(product.price) * request.quantity)
        now = self.clock()
        payment_url = f"solana:fake-recipient?amount={amount}&reference={reference}"
        self.orders[order_id] = {
            "order_id": order_id,
            "order_number": f"ORD-{len(self.orders) + 1:05d}",
            "store_id": store.id,
            "product": product,
            "quantity": request.quantity,
            "amount": amount,
            "currency": request.currency,
            "payment_url": payment_url,
            "reference": reference,
            "status": "pending",
            "transaction_signature": None,
            "expires_at": now + self.session_ttl,
            "created_at": now,
            "updated_at": now,
        }
        order = self.orders[order_id]
        return CheckoutSession(
            order_id=order_id,
            order_number=order["order_number"],
            payment_url=payment_url,
            qr_code=f"data:image/png;base64,{reference}",
            amount=amount,
            currency=request.currency,
            reference=reference,
            expires_at=order["expires_at"],
            product=product,
            store=StoreSnapshot(id=store.id, name=store.name),
        )

    async def get_checkout_status(self, store_id: str, order_id: str) -> PaymentStatus:
        self._record("get_checkout_status", store_id=store_id, order_id=order_id)
        order = self._order(order_id)
        if self._status_script[order_id]:
            self.set_status(order_id, self._status_script[order_id].popleft())
        return self._status_of(order)

    async def verify_payment(self, store_id: str, order_id: str, signature: str | None = None) -> PaymentVerification:
        self._record("verify_payment", store_id=store_id, order_id=order_id, signature=signature)
        order = self._order(order_id)
        if signature and order["status"] == "pending":
            self.set_status(order_id, "completed", transaction_signature=signature)
        confirmed = order["status"] == "completed"
        return PaymentVerification(
            order_id=order_id,
            order_number=order["order_number"],
            status=order["status"],
            payment_confirmed=confirmed,
            transaction_signature=order["transaction_signature"],
            paid_amount=order["amount"] if confirmed else None,
            paid_at=order["updated_at"] if confirmed else None,
            message=None if confirmed else "Payment not found yet",
        )

    async def connect_wallet(self, wallet_address: str, signature: str, message: str) -> AuthResult:
        self._record("connect_wallet", wallet_address=wallet_address, signature=signature, message=message)
        token = f"token-{uuid4().hex}"
        user = UserProfile(id=f"user-{wallet_address[:8]}", wallet_address=wallet_address, created_at=self.clock())
        self.tokens[token] = user
        return AuthResult(token=token, user=user)

    async def verify_token(self) -> TokenVerification:
        self._record("verify_token")
        user = self.tokens.get(self.current_token or "")
        if user is None:
            raise AuthError("Authentication required. Please connect your wallet.")
        return TokenVerification(valid=True, user=user)

    def _status_of(self, order: dict) -> PaymentStatus:
        return PaymentStatus(
            order_id=order["order_id"],
            order_number=order["order_number"],
            status=order["status"],
            amount=order["amount"],
            currency=order["currency"],
            payment_url=order["payment_url"],
            expires_at=order["expires_at"],
            transaction_signature=order["transaction_signature"],
            items=[
                OrderLine(
                    product=order["product"],
                    quantity=order["quantity"],
                    price=order["product"].price,
                )
            ],
            created_at=order["created_at"],
            updated_at=order["updated_at"],
        )
