"""Pydantic schemas for the storefront backend wire contract.

These are external contracts (anti-corruption layer): the backend speaks
camelCase JSON wrapped in a ``{success, data, error}`` envelope. Models accept
both the camelCase aliases and the snake_case field names.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TERMINAL_STATUSES = frozenset({"completed", "failed"})


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------
class ErrorBody(WireModel):
    code: str = "API_ERROR"
    message: str = "An error occurred"
    details: Any = None


class Envelope(WireModel):
    success: bool
    data: Any = None
    error: ErrorBody | None = None


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ProductSnapshot(WireModel):
    id: str
    name: str
    price: str


class StoreSnapshot(WireModel):
    id: str
    name: str


class StoreSummary(WireModel):
    id: str
    name: str
    slug: str
    description: str | None = None


class OrderLine(WireModel):
    product: ProductSnapshot
    quantity: int
    price: str


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequest(WireModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)
    customer_wallet: str
    customer_email: str | None = None
    currency: str = "SOL"

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "productId": "prod-001",
                    "quantity": 2,
                    "customerWallet": "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin",
                    "customerEmail": "buyer@example.com",
                    "currency": "SOL",
                }
            ]
        },
    )


class CheckoutSession(WireModel):
    order_id: str
    order_number: str
    payment_url: str = Field(alias="paymentURL")
    qr_code: str
    amount: str
    currency: str
    reference: str
    expires_at: datetime
    product: ProductSnapshot
    store: StoreSnapshot


class PaymentStatus(WireModel):
    order_id: str
    order_number: str | None = None
    status: Literal["pending", "completed", "failed"]
    amount: str
    currency: str
    payment_url: str | None = Field(default=None, alias="paymentURL")
    expires_at: datetime | None = None
    transaction_signature: str | None = None
    items: list[OrderLine] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class VerifyPaymentRequest(WireModel):
    order_id: str
    signature: str | None = None


class PaymentVerification(WireModel):
    order_id: str
    order_number: str | None = None
    status: str
    payment_confirmed: bool = False
    transaction_signature: str | None = None
    paid_amount: str | None = None
    paid_at: datetime | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------
class WalletConnectRequest(WireModel):
    wallet_address: str
    signature: str
    message: str


class UserProfile(WireModel):
    id: str
    wallet_address: str
    email: str | None = None
    created_at: datetime | None = None


class AuthResult(WireModel):
    token: str
    user: UserProfile


class TokenVerification(WireModel):
    valid: bool
    user: UserProfile | None = None
