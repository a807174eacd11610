"""PaymentPoller tracks a pending order until its payment status is terminal."""

import asyncio
from collections.abc import Callable

import structlog

from storefront.api.port import StorefrontBackend
from storefront.api.schemas import PaymentStatus
from storefront.checkout.policies import STATUS_POLLING_POLICY, RetryUntilCancelled

logger = structlog.get_logger(__name__)

POLL_INTERVAL_SECONDS = 3.0


class PaymentPoller:
    """Checks the order status immediately, then every ``interval`` seconds.

    Stops on a ``completed``/``failed`` status or on ``cancel()``. At most one
    poll runs at a time: ``start()`` cancels the previous one first.
    """

    def __init__(
        self,
        backend: StorefrontBackend,
        store_id: str,
        on_status: Callable[[PaymentStatus], None],
        interval: float = POLL_INTERVAL_SECONDS,
        policy: RetryUntilCancelled = STATUS_POLLING_POLICY,
    ) -> None:
        self._backend = backend
        self._store_id = store_id
        self._on_status = on_status
        self.interval = interval
        self._policy = policy
        self._task: asyncio.Task | None = None
        self.order_id: str | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, order_id: str) -> None:
        self.cancel()
        self.order_id = order_id
        self._task = asyncio.get_running_loop().create_task(self._run(order_id))
        logger.info("Payment polling started", order_id=order_id, interval=self.interval)

    def cancel(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.info("Payment polling cancelled", order_id=self.order_id)

    async def poll_once(self, order_id: str) -> PaymentStatus | None:
        """One status check. Backend errors yield None."""
        status = await self._policy.run(
            lambda: self._backend.get_checkout_status(self._store_id, order_id),
            order_id=order_id,
        )
        if status is not None:
            self._on_status(status)
        return status

    async def _run(self, order_id: str) -> None:
        while True:
            status = await self.poll_once(order_id)
            if status is not None and status.is_terminal:
                logger.info("Payment reached terminal status", order_id=order_id, status=status.status)
                return
            await asyncio.sleep(self.interval)
