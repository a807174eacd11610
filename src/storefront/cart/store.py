"""CartStore: the one cart every surface reads and edits.

One instance is created by the composition root and handed to every surface
that reads or edits the cart. All changes go through ``mutate``, which in one
synchronous step computes the new items, rebuilds the aggregates, persists the
record and notifies subscribers.
"""

from collections.abc import Callable, Iterable

import structlog

from storefront.cart.cart import CART_STORAGE_KEY, Cart
from storefront.cart.items import CartItem, Product
from storefront.storage.port import KeyValueStorage

logger = structlog.get_logger(__name__)

Listener = Callable[[Cart], None]


class CartStore:
    def __init__(self, storage: KeyValueStorage, initial: Cart | None = None) -> None:
        self._storage = storage
        self._cart = initial if initial is not None else Cart.empty()
        self._listeners: list[Listener] = []

    @classmethod
    def load(cls, storage: KeyValueStorage) -> "CartStore":
        """Create a store from whatever cart is persisted in ``storage``."""
        return cls(storage, initial=read_persisted_cart(storage))

    # -------------------------------------------------------------------
    # Store protocol
    # -------------------------------------------------------------------
    def get_snapshot(self) -> Cart:
        return self._cart

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mutate(self, fn: Callable[[tuple[CartItem, ...]], Iterable[CartItem]]) -> Cart:
        """Replace the items with ``fn(items)`` as one atomic step."""
        cart = Cart.of(fn(self._cart.items))
        self._cart = cart
        self._persist(cart)
        self._notify(cart)
        return cart

    # -------------------------------------------------------------------
    # Cart operations
    # -------------------------------------------------------------------
    def add_to_cart(self, product: Product) -> Cart:
        """Add one unit of ``product``; existing lines are incremented by 1."""

        def add(items):
            if any(i.product_id == product.id for i in items):
                return [i.with_quantity(i.quantity + 1) if i.product_id == product.id else i for i in items]
            return [*items, product.to_cart_item()]

        cart = self.mutate(add)
        logger.debug("Added product to cart", product_id=product.id, item_count=cart.item_count)
        return cart

    def remove_from_cart(self, product_id: str) -> Cart:
        product_id = str(product_id)
        return self.mutate(lambda items: [i for i in items if i.product_id != product_id])

    def update_quantity(self, product_id: str, quantity: int) -> Cart:
        if quantity <= 0:
            return self.remove_from_cart(product_id)

        product_id = str(product_id)
        return self.mutate(
            lambda items: [i.with_quantity(quantity) if i.product_id == product_id else i for i in items]
        )

    def clear_cart(self) -> Cart:
        return self.mutate(lambda items: [])

    def clear_store_items(self, store_slug: str) -> Cart:
        return self.mutate(lambda items: [i for i in items if i.store_slug != store_slug])

    def get_store_items(self, store_slug: str) -> list[CartItem]:
        return self._cart.store_items(store_slug)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _persist(self, cart: Cart) -> None:
        try:
            self._storage.set_item(CART_STORAGE_KEY, cart.to_json())
        except Exception as exc:
            # The in-memory cart stays authoritative for this session
            logger.error("Failed to persist cart", error=str(exc))

    def _notify(self, cart: Cart) -> None:
        for listener in list(self._listeners):
            try:
                listener(cart)
            except Exception as exc:
                logger.error("Cart subscriber failed", listener=repr(listener), error=str(exc))


def read_persisted_cart(storage: KeyValueStorage) -> Cart:
    """Read the persisted cart, falling back to an empty one."""
    try:
        raw = storage.get_item(CART_STORAGE_KEY)
    except Exception as exc:
        logger.error("Error loading cart from storage", error=str(exc))
        return Cart.empty()

    if not raw:
        return Cart.empty()

    try:
        return Cart.from_json(raw)
    except Exception as exc:
        logger.error("Error loading cart from storage", error=str(exc))
        return Cart.empty()
