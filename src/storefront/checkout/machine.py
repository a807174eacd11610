"""Checkout state machine as a pure reducer over checkout events.

Flow:
    1. form       + CheckoutSubmitted      → processing
    2. form       + SubmissionRejected     → form (inline error)
    3. processing + SessionCreated         → payment
    4. processing + SessionCreationFailed  → form (mapped error)
    5a. payment   + StatusTerminal(completed) → success
    5b. payment   + StatusTerminal(failed)    → failed
    5c. payment   + ExpiryReached             → failed (expired)
    6. processing/payment/failed + UserCancelled → form (email kept)

Any other combination returns the state unchanged, which is how results that
arrive after their attempt is over become no-ops.
"""

from dataclasses import replace

from storefront.checkout.events import (
    CheckoutSubmitted,
    CountdownTicked,
    ExpiryReached,
    SessionCreated,
    SessionCreationFailed,
    StatusTerminal,
    SubmissionRejected,
    UserCancelled,
)
from storefront.checkout.state import CheckoutState, CheckoutStep

PAYMENT_FAILED_MESSAGE = "Payment failed. Please try again."


def reduce(state: CheckoutState, event) -> CheckoutState:
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unknown checkout event: {event!r}")
    return handler(state, event)


def on_checkout_submitted(state: CheckoutState, event: CheckoutSubmitted) -> CheckoutState:
    if state.step != CheckoutStep.FORM:
        return state
    return replace(state, step=CheckoutStep.PROCESSING, email=event.email, error=None)


def on_submission_rejected(state: CheckoutState, event: SubmissionRejected) -> CheckoutState:
    if state.step != CheckoutStep.FORM:
        return state
    return replace(state, email=event.email, error=event.message)


def on_session_created(state: CheckoutState, event: SessionCreated) -> CheckoutState:
    if state.step != CheckoutStep.PROCESSING:
        return state
    return replace(
        state,
        step=CheckoutStep.PAYMENT,
        session=event.session,
        last_status=None,
        remaining_seconds=None,
        expired=False,
        error=None,
        attempts=state.attempts + 1,
    )


def on_session_creation_failed(state: CheckoutState, event: SessionCreationFailed) -> CheckoutState:
    if state.step != CheckoutStep.PROCESSING:
        return state
    return replace(state, step=CheckoutStep.FORM, error=event.message)


def on_countdown_ticked(state: CheckoutState, event: CountdownTicked) -> CheckoutState:
    if state.step != CheckoutStep.PAYMENT or state.order_id != event.order_id:
        return state
    return replace(state, remaining_seconds=event.remaining_seconds)


def on_status_terminal(state: CheckoutState, event: StatusTerminal) -> CheckoutState:
    status = event.status
    if state.step != CheckoutStep.PAYMENT or state.order_id != status.order_id:
        return state

    if status.status == "completed":
        return replace(state, step=CheckoutStep.SUCCESS, last_status=status, error=None)
    if status.status == "failed":
        return replace(state, step=CheckoutStep.FAILED, last_status=status, error=PAYMENT_FAILED_MESSAGE)
    return state


def on_expiry_reached(state: CheckoutState, event: ExpiryReached) -> CheckoutState:
    if state.step != CheckoutStep.PAYMENT or state.order_id != event.order_id:
        return state
    return replace(
        state,
        step=CheckoutStep.FAILED,
        remaining_seconds=0,
        expired=True,
        error=event.error.message,
    )


def on_user_cancelled(state: CheckoutState, event: UserCancelled) -> CheckoutState:
    if state.step not in (CheckoutStep.PROCESSING, CheckoutStep.PAYMENT, CheckoutStep.FAILED):
        return state
    return CheckoutState(email=state.email, attempts=state.attempts)


_HANDLERS = {
    CheckoutSubmitted: on_checkout_submitted,
    SubmissionRejected: on_submission_rejected,
    SessionCreated: on_session_created,
    SessionCreationFailed: on_session_creation_failed,
    CountdownTicked: on_countdown_ticked,
    StatusTerminal: on_status_terminal,
    ExpiryReached: on_expiry_reached,
    UserCancelled: on_user_cancelled,
}
