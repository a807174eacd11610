"""BDD tests for the shared cart."""

from decimal import Decimal

from pytest_bdd import parsers, scenarios, then, when
from storefront.cart.items import Product
from storefront.cart.store import CartStore

scenarios("features/cart_items.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('product "{product_id}" priced "{price}" from store "{store_slug}" is added'))
def add_product(shared_cart, product_id, price, store_slug):
    product = Product(id=product_id, name=f"Product {product_id}", price=price, currency="SOL", store_slug=store_slug)
    shared_cart["store"].add_to_cart(product)


@when(parsers.cfparse('the quantity of "{product_id}" is set to {quantity:d}'))
def set_quantity(shared_cart, product_id, quantity):
    shared_cart["store"].update_quantity(product_id, quantity)


@when(parsers.cfparse('the items of store "{store_slug}" are cleared'))
def clear_store(shared_cart, store_slug):
    shared_cart["store"].clear_store_items(store_slug)


@when("the cart is reloaded from storage")
def reload_cart(shared_cart, bdd_storage):
    shared_cart["store"] = CartStore.load(bdd_storage)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the cart holds {units:d} units totalling "{total}"'))
def cart_totals(shared_cart, units, total):
    snapshot = shared_cart["store"].get_snapshot()
    assert snapshot.item_count == units
    assert snapshot.total == Decimal(total)


@then(parsers.cfparse('store "{store_slug}" still has {count:d} line'))
def store_lines(shared_cart, store_slug, count):
    assert len(shared_cart["store"].get_store_items(store_slug)) == count
