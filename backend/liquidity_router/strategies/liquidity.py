"""
Liquidity-weighted strategy.

Prefers venues whose visible base liquidity can absorb the whole operation,
then ranks them by the default cost score. When no venue is deep enough
every tradable venue stays in play, so a thin market still gets routed.
"""

from decimal import Decimal

from liquidity_router.models.operation import LiquidityOperation
from liquidity_router.models.venue import VenueMetrics
from liquidity_router.strategies.base import BaseSelectionStrategy
from liquidity_router.strategies.cost_score import cost_score


class LiquidityWeightedStrategy(BaseSelectionStrategy):
    """Cheapest venue among those deep enough for the order."""

    @property
    def name(self) -> str:
        return "Liquidity Weighted"

    def eligible(
        self,
        candidates: list[VenueMetrics],
        operation: LiquidityOperation,
    ) -> list[VenueMetrics]:
        deep = [m for m in candidates if m.available_liquidity_base >= operation.amount]
        return deep or candidates

    def score(self, metrics: VenueMetrics, operation: LiquidityOperation) -> Decimal:
        return cost_score(metrics)
