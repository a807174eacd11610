from decimal import Decimal

import pytest
from protean.exceptions import ValidationError
from storefront.cart.items import CartItem, Product, parse_price


def _item(**overrides):
    values = {
        "product_id": "prod-001",
        "name": "Sticker Pack",
        "price": "1.50",
        "currency": "SOL",
        "quantity": 2,
        "store_slug": "demo-store",
    }
    values.update(overrides)
    return CartItem(**values)


class TestParsePrice:
    def test_parses_decimal_string(self):
        assert parse_price("1.50") == Decimal("1.50")

    def test_zero_is_allowed(self):
        assert parse_price("0") == Decimal("0")

    @pytest.mark.parametrize("price", ["-1", "abc", "", "NaN", "Infinity"])
    def test_rejects_invalid_prices(self, price):
        with pytest.raises(ValidationError):
            parse_price(price)


class TestCartItem:
    def test_line_total_is_price_times_quantity(self):
        item = _item(price="1.50", quantity=2)
        assert item.unit_price == Decimal("1.50")
        assert item.line_total == Decimal("3.00")

    def test_quantity_must_be_at_least_one(self):
        with pytest.raises(ValidationError):
            _item(quantity=0)

    def test_negative_price_is_rejected(self):
        with pytest.raises(ValidationError):
            _item(price="-2.00")

    def test_store_slug_is_required(self):
        with pytest.raises(ValidationError):
            _item(store_slug=None)

    def test_with_quantity_returns_a_new_item(self):
        item = _item(quantity=1)
        updated = item.with_quantity(5)
        assert updated.quantity == 5
        assert item.quantity == 1
        assert updated.product_id == item.product_id

    def test_record_uses_persisted_field_names(self):
        record = _item(image="https://cdn.example.com/a.png").to_record()
        assert record == {
            "id": "prod-001",
            "name": "Sticker Pack",
            "price": "1.50",
            "currency": "SOL",
            "quantity": 2,
            "storeSlug": "demo-store",
            "image": "https://cdn.example.com/a.png",
        }

    def test_record_omits_missing_image(self):
        assert "image" not in _item().to_record()

    def test_from_record_accepts_numeric_fields(self):
        item = CartItem.from_record(
            {"id": 7, "name": "Mug", "price": 4.5, "currency": "SOL", "quantity": "3", "storeSlug": "s"}
        )
        assert item.product_id == "7"
        assert item.price == "4.5"
        assert item.quantity == 3


class TestProduct:
    def test_from_api_reads_store_slug_from_nested_store(self):
        product = Product.from_api(
            {
                "id": "prod-9",
                "name": "Poster",
                "price": "2.25",
                "currency": "SOL",
                "images": ["https://cdn.example.com/p.png"],
                "store": {"slug": "poster-shop"},
            }
        )
        assert product.store_slug == "poster-shop"
        assert product.images == ["https://cdn.example.com/p.png"]

    def test_from_api_defaults_currency(self):
        product = Product.from_api({"id": "p", "name": "n", "price": "1"}, store_slug="s")
        assert product.currency == "SOL"

    def test_to_cart_item_uses_first_image(self, product_factory):
        product = product_factory(images=["a.png", "b.png"])
        item = product.to_cart_item()
        assert item.image == "a.png"
        assert item.quantity == 1
        assert item.store_slug == product.store_slug
