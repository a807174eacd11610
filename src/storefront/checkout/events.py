"""Events fed into the checkout reducer.

Timers, backend calls and user actions never touch checkout state directly;
they describe what happened with one of these events and the orchestrator
reduces it.
"""

from dataclasses import dataclass

from storefront.api.schemas import CheckoutSession, PaymentStatus
from storefront.errors import ExpiryError


@dataclass(frozen=True)
class CheckoutSubmitted:
    email: str


@dataclass(frozen=True)
class SubmissionRejected:
    email: str
    message: str


@dataclass(frozen=True)
class SessionCreated:
    session: CheckoutSession


@dataclass(frozen=True)
class SessionCreationFailed:
    message: str


@dataclass(frozen=True)
class CountdownTicked:
    order_id: str
    remaining_seconds: float


@dataclass(frozen=True)
class StatusTerminal:
    status: PaymentStatus


@dataclass(frozen=True)
class ExpiryReached:
    order_id: str
    error: ExpiryError


@dataclass(frozen=True)
class UserCancelled:
    pass
