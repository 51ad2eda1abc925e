"""
Abstract base class for venue selection strategies.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from liquidity_router.exceptions import NoEligibleVenue
from liquidity_router.models.operation import LiquidityOperation
from liquidity_router.models.venue import VenueIdentity, VenueMetrics


class BaseSelectionStrategy(ABC):
    """
    Abstract base class for choosing the venue that executes an operation.

    Subclasses implement:
    1. score() - scalar cost of a venue for an operation, lower is better
    2. name - Human-readable strategy name

    The selection itself is shared:
    1. Keep venues with trading_allowed (narrowed further by eligible())
    2. Pick the minimum score
    3. Break ties by VenueIdentity declaration order

    Selection is a pure function of its inputs.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable strategy name."""
        pass

    @abstractmethod
    def score(self, metrics: VenueMetrics, operation: LiquidityOperation) -> Decimal:
        """Cost score for one venue; lower is better."""
        pass

    def eligible(
        self,
        candidates: list[VenueMetrics],
        operation: LiquidityOperation,
    ) -> list[VenueMetrics]:
        """Hook for strategies that narrow the tradable set further."""
        return candidates

    def rank(
        self,
        metrics: dict[VenueIdentity, VenueMetrics],
        operation: LiquidityOperation,
    ) -> list[tuple[VenueIdentity, Decimal]]:
        """
        Score every eligible venue, best first.

        Raises:
            NoEligibleVenue: If no venue is tradable
        """
        if not metrics:
            raise NoEligibleVenue("no eligible venue: no venue metrics available")

        tradable = [m for m in metrics.values() if m.trading_allowed]
        if not tradable:
            raise NoEligibleVenue("no eligible venue: trading disabled on all venues")

        candidates = self.eligible(tradable, operation)
        if not candidates:
            raise NoEligibleVenue("no eligible venue")

        scored = [(m.venue, self.score(m, operation)) for m in candidates]
        return sorted(scored, key=lambda item: (item[1], item[0].rank))

    def select_venue(
        self,
        metrics: dict[VenueIdentity, VenueMetrics],
        operation: LiquidityOperation,
    ) -> VenueIdentity:
        """
        Choose the venue that should execute ``operation``.

        Args:
            metrics: Latest metrics per venue
            operation: Operation being routed

        Returns:
            The lowest scoring tradable venue

        Raises:
            NoEligibleVenue: If metrics is empty or no venue allows trading
        """
        return self.rank(metrics, operation)[0][0]
