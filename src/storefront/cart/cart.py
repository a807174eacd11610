"""Immutable view of the cart with derived aggregates.

A ``Cart`` is only ever built through ``Cart.of(items)``, which computes
``total`` and ``item_count`` from the items. No caller can hold a cart whose
aggregates disagree with its items.
"""

import json
from dataclasses import dataclass
from decimal import Decimal

import structlog

from storefront.cart.items import CartItem

logger = structlog.get_logger(__name__)

CART_STORAGE_KEY = "solstore_cart"


@dataclass(frozen=True)
class Cart:
    items: tuple[CartItem, ...] = ()
    total: Decimal = Decimal("0")
    item_count: int = 0

    @classmethod
    def of(cls, items) -> "Cart":
        items = tuple(items)
        seen = set()
        for item in items:
            if item.product_id in seen:
                raise ValueError(f"Duplicate cart item: {item.product_id}")
            seen.add(item.product_id)

        return cls(
            items=items,
            total=sum((item.line_total for item in items), Decimal("0")),
            item_count=sum(item.quantity for item in items),
        )

    @classmethod
    def empty(cls) -> "Cart":
        return cls.of(())

    def find(self, product_id: str) -> CartItem | None:
        return next((i for i in self.items if i.product_id == str(product_id)), None)

    def store_items(self, store_slug: str) -> list[CartItem]:
        return [item for item in self.items if item.store_slug == store_slug]

    # -------------------------------------------------------------------
    # Persistence format: {"items": [...], "total": ..., "itemCount": ...}
    # -------------------------------------------------------------------
    def to_record(self) -> dict:
        return {
            "items": [item.to_record() for item in self.items],
            "total": str(self.total),
            "itemCount": self.item_count,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_record())

    @classmethod
    def from_json(cls, raw: str) -> "Cart":
        """Rebuild a cart from its persisted form.

        Stored aggregates are ignored and recomputed from the items.
        """
        data = json.loads(raw)
        return cls.of(CartItem.from_record(record) for record in data.get("items", []))
