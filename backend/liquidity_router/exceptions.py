"""
Error taxonomy for venue routing.

Expected failures (venue down, order rejected, no eligible venue) are turned
into failed ``LiquidityResult`` objects by the router; these exceptions carry
them between layers.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from liquidity_router.models.venue import VenueIdentity


class LiquidityRouterError(Exception):
    """Base class for routing errors."""


class VenueUnavailable(LiquidityRouterError):
    """A single venue failed to respond or is not accepting orders."""

    def __init__(self, venue: "VenueIdentity", reason: str):
        self.venue = venue
        self.reason = reason
        super().__init__(f"{venue.value} unavailable: {reason}")


class NoEligibleVenue(LiquidityRouterError):
    """Every candidate venue was filtered out, or none were given."""

    def __init__(self, message: str = "no eligible venue"):
        super().__init__(message)


class UnsupportedOperation(LiquidityRouterError):
    """The requested operation type has no execution path."""

    def __init__(self, operation_type: str):
        self.operation_type = operation_type
        super().__init__(f"unsupported operation: {operation_type}")


class OrderRejected(LiquidityRouterError):
    """The chosen venue refused the order."""

    def __init__(self, venue: "VenueIdentity", message: str, order_id: Optional[str] = None):
        self.venue = venue
        self.order_id = order_id
        super().__init__(message)
