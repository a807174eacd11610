"""ExpiryTimer: countdown to the expiry instant of a checkout session."""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from storefront.errors import ExpiryError

logger = structlog.get_logger(__name__)

TICK_SECONDS = 1.0


def utcnow() -> datetime:
    return datetime.now(UTC)


class ExpiryTimer:
    """Recomputes ``max(0, expires_at - now)`` on every tick.

    Remaining time is derived from the wall clock rather than decremented, so
    a late or skipped tick corrects itself. Reaching zero reports expiry once
    and stops the ticking.
    """

    def __init__(
        self,
        on_tick: Callable[[float], None],
        on_expired: Callable[[ExpiryError], None],
        clock: Callable[[], datetime] = utcnow,
        interval: float = TICK_SECONDS,
    ) -> None:
        self._on_tick = on_tick
        self._on_expired = on_expired
        self._clock = clock
        self.interval = interval
        self._task: asyncio.Task | None = None
        self.expires_at: datetime | None = None
        self.expired = False

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, expires_at: datetime) -> None:
        self.cancel()
        self.expires_at = expires_at
        self.expired = False
        if self.tick() > 0:
            self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    def remaining(self) -> float:
        if self.expires_at is None:
            return 0.0
        return max(0.0, (self.expires_at - self._clock()).total_seconds())

    def tick(self) -> float:
        """Recompute the remaining time and report it. No-op once expired."""
        if self.expired:
            return 0.0

        remaining = self.remaining()
        self._on_tick(remaining)
        if remaining <= 0:
            self.expired = True
            logger.info("Checkout session expired", expires_at=str(self.expires_at))
            self._on_expired(ExpiryError())
        return remaining

    async def _run(self) -> None:
        while not self.expired:
            await asyncio.sleep(self.interval)
            self.tick()
