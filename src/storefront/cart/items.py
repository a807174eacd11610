"""Cart line items and the product summaries they are created from."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Integer, String

from storefront.domain import storefront


def parse_price(price: str) -> Decimal:
    """Parse a decimal price string, rejecting negatives and non-numbers."""
    try:
        value = Decimal(str(price).strip())
    except InvalidOperation:
        raise ValidationError({"price": [f"Invalid price: {price!r}"]}) from None
    if not value.is_finite() or value < 0:
        raise ValidationError({"price": [f"Invalid price: {price!r}"]})
    return value


@storefront.value_object
class CartItem:
    """One product line in the cart, keyed by product id."""

    product_id: String(required=True, max_length=255)
    name: String(required=True, max_length=500)
    price: String(required=True, max_length=50)
    currency: String(required=True, max_length=10)
    image: String(max_length=2048)
    quantity: Integer(required=True, min_value=1)
    store_slug: String(required=True, max_length=100)

    @invariant.post
    def price_must_be_a_non_negative_decimal(self):
        parse_price(self.price)

    @property
    def unit_price(self) -> Decimal:
        return parse_price(self.price)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> "CartItem":
        return CartItem(**{**self.to_dict(), "quantity": quantity})

    def to_record(self) -> dict:
        """Serialize using the persisted (camelCase) cart format."""
        record = {
            "id": self.product_id,
            "name": self.name,
            "price": self.price,
            "currency": self.currency,
            "quantity": self.quantity,
            "storeSlug": self.store_slug,
        }
        if self.image:
            record["image"] = self.image
        return record

    @classmethod
    def from_record(cls, record: dict) -> "CartItem":
        return cls(
            product_id=str(record["id"]),
            name=record["name"],
            price=str(record["price"]),
            currency=record["currency"],
            image=record.get("image") or None,
            quantity=int(record["quantity"]),
            store_slug=record["storeSlug"],
        )


@dataclass(frozen=True)
class Product:
    """The slice of a catalogue product needed to put it in the cart."""

    id: str
    name: str
    price: str
    currency: str
    store_slug: str
    images: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict, store_slug: str | None = None) -> "Product":
        """Build from a catalogue API payload (camelCase keys)."""
        images = data.get("images") or ([data["image"]] if data.get("image") else [])
        return cls(
            id=str(data["id"]),
            name=data["name"],
            price=str(data["price"]),
            currency=data.get("currency") or "SOL",
            store_slug=store_slug or data.get("storeSlug") or data["store"]["slug"],
            images=list(images),
        )

    def to_cart_item(self, quantity: int = 1) -> CartItem:
        return CartItem(
            product_id=self.id,
            name=self.name,
            price=self.price,
            currency=self.currency,
            image=self.images[0] if self.images else None,
            quantity=quantity,
            store_slug=self.store_slug,
        )
