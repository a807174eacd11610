"""Checkout state, one immutable value per step of an attempt."""

from dataclasses import dataclass
from enum import Enum

from storefront.api.schemas import CheckoutSession, PaymentStatus


class CheckoutStep(Enum):
    FORM = "form"
    PROCESSING = "processing"
    PAYMENT = "payment"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class CheckoutState:
    step: CheckoutStep = CheckoutStep.FORM
    email: str = ""
    session: CheckoutSession | None = None
    last_status: PaymentStatus | None = None
    remaining_seconds: float | None = None
    expired: bool = False
    error: str | None = None
    attempts: int = 0

    @property
    def order_id(self) -> str | None:
        return self.session.order_id if self.session else None

    @property
    def is_busy(self) -> bool:
        return self.step in (CheckoutStep.PROCESSING, CheckoutStep.PAYMENT)
