"""
Latency-only strategy: route to the fastest responding venue.
"""

from decimal import Decimal

from liquidity_router.models.operation import LiquidityOperation
from liquidity_router.models.venue import VenueMetrics
from liquidity_router.strategies.base import BaseSelectionStrategy


class LatencyStrategy(BaseSelectionStrategy):
    """Fastest venue wins; price and fees are ignored."""

    @property
    def name(self) -> str:
        return "Latency"

    def score(self, metrics: VenueMetrics, operation: LiquidityOperation) -> Decimal:
        return Decimal(metrics.latency_ms)
