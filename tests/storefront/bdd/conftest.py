"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from pytest_bdd import given, parsers, then
from storefront.cart.items import Product
from storefront.cart.store import CartStore
from storefront.storage.memory import MemoryStorage


@pytest.fixture()
def bdd_storage():
    return MemoryStorage()


@pytest.fixture()
def shared_cart(bdd_storage):
    return {"store": CartStore.load(bdd_storage)}


def _product(product_id, price, store_slug):
    return Product(id=product_id, name=f"Product {product_id}", price=price, currency="SOL", store_slug=store_slug)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty cart")
def empty_cart(shared_cart):
    assert shared_cart["store"].get_snapshot().items == ()


@given(parsers.cfparse('product "{product_id}" priced "{price}" from store "{store_slug}" is in the cart'))
def product_in_cart(shared_cart, product_id, price, store_slug):
    shared_cart["store"].add_to_cart(_product(product_id, price, store_slug))


@given("client storage rejects writes")
def storage_rejects_writes(bdd_storage):
    bdd_storage.fail_writes = True


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line"))
def cart_has_one_line(shared_cart, count):
    assert len(shared_cart["store"].get_snapshot().items) == count


@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_n_lines(shared_cart, count):
    assert len(shared_cart["store"].get_snapshot().items) == count
