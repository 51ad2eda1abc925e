"""
Default cost score strategy.

score = spread + fee_rate + latency_ms / 1000

The terms are in different units (quote price, fraction of notional,
seconds) and are summed as-is. The score does not depend on direction: a
BUY and a SELL of the same symbol see the same ranking.
"""

from decimal import Decimal

from liquidity_router.models.operation import LiquidityOperation
from liquidity_router.models.venue import VenueMetrics
from liquidity_router.strategies.base import BaseSelectionStrategy

MS_PER_SECOND = Decimal("1000")


def cost_score(metrics: VenueMetrics) -> Decimal:
    """Spread plus fee rate plus latency in seconds."""
    return metrics.spread + metrics.fee_rate + Decimal(metrics.latency_ms) / MS_PER_SECOND


class CostScoreStrategy(BaseSelectionStrategy):
    """
    Cheapest venue by spread, fee and latency.

    Time Complexity: O(n log n)
    """

    @property
    def name(self) -> str:
        return "Cost Score"

    def score(self, metrics: VenueMetrics, operation: LiquidityOperation) -> Decimal:
        return cost_score(metrics)
