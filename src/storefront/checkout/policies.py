"""Retry policies for the two kinds of backend call a checkout makes.

Session creation is user-initiated and must answer quickly, so it fails fast:
one attempt, and the error goes back to the form. Status polling runs in the
background for the whole payment window, so a failed tick is logged and the
next tick simply tries again.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from storefront.errors import ApiError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class FailFast:
    """Single attempt; errors propagate to the caller."""

    name = "fail-fast"

    async def run(self, operation: Callable[[], Awaitable[T]], **context) -> T:
        try:
            return await operation()
        except ApiError as exc:
            logger.warning("Request failed", policy=self.name, code=exc.code, error=exc.message, **context)
            raise


class RetryUntilCancelled:
    """Errors are logged and reported as ``None``; the caller keeps going.

    Cancellation is never swallowed. Failures outside the ``ApiError`` family
    are logged at error level, since they point at a bug rather than an outage.
    """

    name = "retry-until-cancelled"

    async def run(self, operation: Callable[[], Awaitable[T]], **context) -> T | None:
        try:
            return await operation()
        except asyncio.CancelledError:
            raise
        except ApiError as exc:
            logger.warning("Request failed, will retry", policy=self.name, code=exc.code, error=exc.message, **context)
            return None
        except Exception as exc:
            logger.error(
                "Request failed unexpectedly, will retry",
                policy=self.name,
                error_type=type(exc).__name__,
                error=str(exc),
                **context,
            )
            return None


SESSION_CREATION_POLICY = FailFast()
STATUS_POLLING_POLICY = RetryUntilCancelled()
