"""Storefront bounded context: multi-store cart, checkout and wallet sign-in.

Holds the value objects shared by the cart and the checkout flow. The
checkout state machine, timers and adapters are plain Python objects that
live alongside the domain rather than inside it.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
