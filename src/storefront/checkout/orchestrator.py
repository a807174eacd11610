"""CheckoutOrchestrator owns one store's checkout attempt.

Reads the store's cart subset, creates the payment session, runs the payment
poller and the expiry countdown together, and clears the store's items once
the payment completes. Every change goes through ``dispatch``: events are
reduced one at a time by ``storefront.checkout.machine.reduce`` and side
effects are applied only for transitions that actually happened.
"""

from collections import deque
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

import structlog
from protean.exceptions import ValidationError

from storefront.api.port import StorefrontBackend
from storefront.api.schemas import CheckoutRequest, PaymentStatus, StoreSummary
from storefront.cart.items import CartItem
from storefront.cart.store import CartStore
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
from storefront.checkout.expiry import ExpiryTimer, utcnow
from storefront.checkout.formatting import DEFAULT_CURRENCY, format_amount, format_countdown
from storefront.checkout.machine import reduce
from storefront.checkout.policies import SESSION_CREATION_POLICY, FailFast
from storefront.checkout.poller import POLL_INTERVAL_SECONDS, PaymentPoller
from storefront.checkout.state import CheckoutState, CheckoutStep
from storefront.checkout.validation import first_message, validate_submission
from storefront.errors import ApiError, AuthError, ExpiryError
from storefront.wallet.authenticator import WalletAuthenticator

logger = structlog.get_logger(__name__)

Listener = Callable[[CheckoutState], None]

_ERROR_MESSAGES = {
    "NETWORK_ERROR": "Unable to connect to payment service. Please check your connection and try again.",
    "UNAUTHORIZED": "Authentication failed. Please reconnect your wallet and try again.",
    "PRODUCT_OUT_OF_STOCK": "This product is currently out of stock.",
    "TIMEOUT_ERROR": "Request timed out. Please try again.",
    "INVALID_RESPONSE": "Unexpected response from payment service. Please try again.",
}


def checkout_error_message(exc: Exception) -> str:
    """Map a session-creation failure to the message shown on the form."""
    if isinstance(exc, ApiError):
        return _ERROR_MESSAGES.get(exc.code, exc.message)
    return "Failed to create checkout session"


class CheckoutOrchestrator:
    def __init__(
        self,
        store: StoreSummary,
        cart: CartStore,
        backend: StorefrontBackend,
        wallet: WalletAuthenticator,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        tick_interval: float = 1.0,
        clock: Callable[[], datetime] = utcnow,
        session_policy: FailFast = SESSION_CREATION_POLICY,
    ) -> None:
        self.store = store
        self._cart = cart
        self._backend = backend
        self._wallet = wallet
        self._session_policy = session_policy
        self._state = CheckoutState()
        self._listeners: list[Listener] = []
        self._pending: deque = deque()
        self._dispatching = False
        self._closed = False
        self._submissions = 0

        self.poller = PaymentPoller(backend, store.id, on_status=self._on_status, interval=poll_interval)
        self.timer = ExpiryTimer(
            on_tick=self._on_tick,
            on_expired=self._on_expired,
            clock=clock,
            interval=tick_interval,
        )

    # -------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------
    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def items(self) -> list[CartItem]:
        return self._cart.get_store_items(self.store.slug)

    @property
    def total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def display_total(self) -> str:
        """Total of the store's items, in the currency of the first item."""
        items = self.items
        return format_amount(self.total, items[0].currency if items else DEFAULT_CURRENCY)

    @property
    def countdown(self) -> str:
        return format_countdown(self._state.remaining_seconds)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------
    # User actions
    # -------------------------------------------------------------------
    async def submit(self, email: str) -> CheckoutState:
        """Place the order: validate, create the session, start tracking payment."""
        if self._state.step != CheckoutStep.FORM:
            return self._state

        items = self.items
        wallet_session = self._wallet.session
        try:
            contact = validate_submission(wallet_session.address if wallet_session else None, items, email)
        except ValidationError as exc:
            self.dispatch(SubmissionRejected(email=email, message=first_message(exc)))
            return self._state

        self.dispatch(CheckoutSubmitted(email=contact.address))
        self._submissions += 1
        submission = self._submissions

        # Sessions are single-product: only the first item of the store is checked out
        item = items[0]
        request = CheckoutRequest(
            product_id=item.product_id,
            quantity=item.quantity,
            customer_wallet=wallet_session.address,
            customer_email=contact.address,
            currency=item.currency or DEFAULT_CURRENCY,
        )
        if len(items) > 1:
            logger.warning(
                "Only the first cart item is checked out",
                store=self.store.slug,
                product_id=item.product_id,
                skipped=len(items) - 1,
            )

        try:
            session = await self._session_policy.run(
                lambda: self._backend.create_checkout_session(self.store.id, request),
                store=self.store.slug,
            )
        except ApiError as exc:
            if isinstance(exc, AuthError):
                self._wallet.invalidate_token()
            if submission == self._submissions:
                self.dispatch(SessionCreationFailed(message=checkout_error_message(exc)))
            return self._state
        except Exception as exc:
            logger.error(
                "Checkout session creation failed unexpectedly",
                store=self.store.slug,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            if submission == self._submissions:
                self.dispatch(SessionCreationFailed(message=checkout_error_message(exc)))
            return self._state

        if submission != self._submissions:
            logger.info("Discarding session from a superseded submission", order_id=session.order_id)
            return self._state

        self.dispatch(SessionCreated(session=session))
        return self._state

    async def verify_payment(self, signature: str | None = None) -> bool:
        """Ask the backend to confirm the payment now instead of waiting for a poll.

        Backend failures are logged and reported as ``False``; the poller keeps
        tracking the payment either way.
        """
        state = self._state
        if state.step != CheckoutStep.PAYMENT or state.session is None:
            return False

        order_id = state.session.order_id
        try:
            result = await self._backend.verify_payment(self.store.id, order_id, signature)
            if not result.payment_confirmed:
                return False
            status = await self._backend.get_checkout_status(self.store.id, order_id)
        except ApiError as exc:
            logger.warning("Payment verification failed", order_id=order_id, code=exc.code, error=exc.message)
            return False

        if status.is_terminal:
            self.dispatch(StatusTerminal(status=status))
        return status.status == "completed"

    def retry(self) -> CheckoutState:
        """Discard the failed attempt and return to the form."""
        return self.dispatch(UserCancelled())

    def cancel(self) -> CheckoutState:
        return self.dispatch(UserCancelled())

    def close(self) -> None:
        """Tear down: stop both timers and ignore anything that arrives later."""
        self._closed = True
        self._stop_tracking()
        self._listeners.clear()

    # -------------------------------------------------------------------
    # Event loop
    # -------------------------------------------------------------------
    def dispatch(self, event) -> CheckoutState:
        """Reduce ``event`` and apply the effects of the resulting transition.

        Events raised while effects run are queued and reduced afterwards, in
        order, so transitions never interleave.
        """
        if self._closed:
            return self._state

        self._pending.append(event)
        if self._dispatching:
            return self._state

        self._dispatching = True
        try:
            while self._pending and not self._closed:
                current = self._pending.popleft()
                previous = self._state
                self._state = reduce(previous, current)
                if self._state is not previous:
                    self._apply_effects(previous, self._state)
                    self._notify()
        finally:
            self._dispatching = False
            self._pending.clear()
        return self._state

    def _apply_effects(self, previous: CheckoutState, current: CheckoutState) -> None:
        if previous.step == current.step:
            return

        logger.info(
            "Checkout transition",
            store=self.store.slug,
            from_step=previous.step.value,
            to_step=current.step.value,
            order_id=current.order_id or previous.order_id,
        )

        if previous.step == CheckoutStep.PAYMENT:
            self._stop_tracking()

        if current.step == CheckoutStep.PAYMENT:
            self.poller.start(current.session.order_id)
            self.timer.start(current.session.expires_at)
        elif current.step == CheckoutStep.SUCCESS:
            self._cart.clear_store_items(self.store.slug)
        elif current.step == CheckoutStep.FORM:
            self._stop_tracking()

    def _stop_tracking(self) -> None:
        self.poller.cancel()
        self.timer.cancel()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as exc:
                logger.error("Checkout subscriber failed", listener=repr(listener), error=str(exc))

    # -------------------------------------------------------------------
    # Timer callbacks
    # -------------------------------------------------------------------
    def _on_status(self, status: PaymentStatus) -> None:
        if status.is_terminal:
            self.dispatch(StatusTerminal(status=status))

    def _on_tick(self, remaining: float) -> None:
        order_id = self._state.order_id
        if order_id is not None:
            self.dispatch(CountdownTicked(order_id=order_id, remaining_seconds=remaining))

    def _on_expired(self, error: ExpiryError) -> None:
        order_id = self._state.order_id
        if order_id is not None:
            self.dispatch(ExpiryReached(order_id=order_id, error=error))
