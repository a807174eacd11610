"""Property tests: cart aggregates agree with the items after any sequence of edits."""

import json
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, rule, run_state_machine_as_test
from storefront.cart.cart import CART_STORAGE_KEY
from storefront.cart.items import Product
from storefront.cart.store import CartStore, read_persisted_cart
from storefront.storage.memory import MemoryStorage


def make_product(id, price, name="Sticker Pack", store_slug="demo-store"):
    return Product(id=id, name=name, price=price, currency="SOL", store_slug=store_slug)


CATALOGUE = {
    "prod-001": make_product(id="prod-001", price="1.50"),
    "prod-002": make_product(id="prod-002", name="Hoodie", price="19.99"),
    "prod-003": make_product(id="prod-003", name="Free Sample", price="0"),
    "prod-004": make_product(id="prod-004", name="Poster", price="0.01", store_slug="other-store"),
}

product_ids = st.sampled_from(sorted(CATALOGUE))
quantities = st.integers(min_value=-2, max_value=12)

operations = st.lists(
    st.one_of(
        st.tuples(st.just("add"), product_ids),
        st.tuples(st.just("remove"), product_ids),
        st.tuples(st.just("update"), product_ids, quantities),
        st.tuples(st.just("clear_store"), st.sampled_from(["demo-store", "other-store"])),
    ),
    max_size=40,
)


def assert_aggregates_match(cart):
    assert cart.item_count == sum(item.quantity for item in cart.items)
    assert cart.total == sum((Decimal(item.price) * item.quantity for item in cart.items), Decimal("0"))


class CartEditing(RuleBasedStateMachine):
    """Mirrors the cart in a plain dict of product id to quantity."""

    def __init__(self):
        super().__init__()
        self.storage = MemoryStorage()
        self.store = CartStore.load(self.storage)
        self.quantities = {}

    @rule(product_id=product_ids)
    def add(self, product_id):
        self.store.add_to_cart(CATALOGUE[product_id])
        self.quantities[product_id] = self.quantities.get(product_id, 0) + 1

    @rule(product_id=product_ids)
    def remove(self, product_id):
        self.store.remove_from_cart(product_id)
        self.quantities.pop(product_id, None)

    @rule(product_id=product_ids, quantity=quantities)
    def update(self, product_id, quantity):
        self.store.update_quantity(product_id, quantity)
        if quantity <= 0:
            self.quantities.pop(product_id, None)
        elif product_id in self.quantities:
            self.quantities[product_id] = quantity

    @rule()
    def clear(self):
        self.store.clear_cart()
        self.quantities.clear()

    @invariant()
    def aggregates_match_items(self):
        assert_aggregates_match(self.store.get_snapshot())

    @invariant()
    def lines_match_model(self):
        cart = self.store.get_snapshot()
        assert {item.product_id: item.quantity for item in cart.items} == self.quantities

    @invariant()
    def persisted_cart_matches_snapshot(self):
        record = json.loads(self.storage.get_item(CART_STORAGE_KEY) or '{"items": []}')
        snapshot = self.store.get_snapshot()
        assert record.get("itemCount", 0) == snapshot.item_count
        assert read_persisted_cart(self.storage).to_record() == snapshot.to_record()


def test_aggregates_hold_across_edit_sequences():
    run_state_machine_as_test(
        CartEditing,
        settings=settings(max_examples=50, stateful_step_count=30, deadline=None),
    )


@given(steps=operations)
@settings(max_examples=100, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
def test_every_step_keeps_totals_consistent(steps):
    store = CartStore.load(MemoryStorage())

    for step in steps:
        action, *args = step
        if action == "add":
            cart = store.add_to_cart(CATALOGUE[args[0]])
        elif action == "remove":
            cart = store.remove_from_cart(args[0])
        elif action == "update":
            cart = store.update_quantity(*args)
        else:
            cart = store.clear_store_items(args[0])

        assert_aggregates_match(cart)
        assert all(item.quantity >= 1 for item in cart.items)
        assert len({item.product_id for item in cart.items}) == len(cart.items)
