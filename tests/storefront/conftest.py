import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from protean.integrations.pytest import DomainFixture
from storefront.api.fake_backend import FakeBackend
from storefront.cart.items import Product
from storefront.cart.store import CartStore
from storefront.storage.memory import MemoryStorage
from storefront.wallet.authenticator import (
    AUTH_TOKEN_KEY,
    WALLET_ADDRESS_KEY,
    WALLET_CONNECTED_KEY,
    WALLET_PUBLIC_KEY_KEY,
    WalletAuthenticator,
)
from storefront.wallet.fake_signer import DEFAULT_ADDRESS, FakeSigner

STORE_SLUG = "demo-store"


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_product(id="prod-001", name="Sticker Pack", price="1.50", currency="SOL", store_slug=STORE_SLUG, images=None):
    return Product(
        id=id,
        name=name,
        price=price,
        currency=currency,
        store_slug=store_slug,
        images=images or [],
    )


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cart(storage):
    return CartStore.load(storage)


@pytest.fixture
def backend(clock):
    backend = FakeBackend.seeded()
    backend.clock = clock
    return backend


@pytest.fixture
def signer():
    return FakeSigner()


@pytest.fixture
def wallet(signer, backend, storage):
    return WalletAuthenticator(signer, backend, storage, detect_delay=0)


@pytest.fixture
def signed_in(storage):
    """Persist a signed-in wallet session, as a completed handshake would."""
    storage.set_item(WALLET_ADDRESS_KEY, DEFAULT_ADDRESS)
    storage.set_item(WALLET_CONNECTED_KEY, "true")
    storage.set_item(WALLET_PUBLIC_KEY_KEY, DEFAULT_ADDRESS)
    storage.set_item(AUTH_TOKEN_KEY, "token-test")
    return storage


@pytest.fixture
def wait_until():
    """Yield to the event loop until ``predicate()`` holds or the timeout passes."""

    async def _wait(predicate, timeout: float = 1.0) -> bool:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() >= deadline:
                return False
            await asyncio.sleep(0.005)
        return True

    return _wait
