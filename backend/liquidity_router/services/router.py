"""
Liquidity routing service.

Orchestrates one liquidity operation:
1. Collect venue metrics
2. Select exactly one venue
3. Dispatch a single market order to it
4. Return the LiquidityResult audit record

At most one order is dispatched per execute() call and the router never
retries; re-sending a financial order without an idempotency key risks
double execution.
"""

import asyncio
import functools
import logging
from typing import Optional

from liquidity_router.config import Settings, get_settings
from liquidity_router.exceptions import NoEligibleVenue, UnsupportedOperation, VenueUnavailable
from liquidity_router.models.operation import (
    ArbitrageOpportunity,
    LiquidityOperation,
    LiquidityResult,
    OrderResult,
    StrategyType,
)
from liquidity_router.models.venue import VenueIdentity, VenueMetrics
from liquidity_router.services.arbitrage import ArbitrageAnalyzer
from liquidity_router.services.metrics import MetricsCollector
from liquidity_router.strategies import BaseSelectionStrategy, get_strategy
from liquidity_router.venues.registry import VenueRegistry, build_registry

logger = logging.getLogger(__name__)


def _log_order_outcome(
    venue: VenueIdentity,
    operation: LiquidityOperation,
    dispatch: "asyncio.Future[OrderResult]",
) -> None:
    """Record how a dispatched order ended, even if its caller went away."""
    if dispatch.cancelled():
        logger.error(
            "Order to %s for %s %s was cancelled; state unknown",
            venue.value,
            operation.amount,
            operation.symbol,
        )
        return
    error = dispatch.exception()
    if error is not None:
        logger.error("Order to %s for %s %s failed: %s", venue.value, operation.amount, operation.symbol, error)
        return
    order = dispatch.result()
    logger.info(
        "Order outcome on %s: %s %s of %s %s (%s)",
        venue.value,
        order.status.value,
        order.executed_amount,
        order.requested_amount,
        order.symbol,
        order.order_id or order.error_message,
    )


class LiquidityRouter:
    """
    Routes liquidity operations to the best venue.

    Expected failures (no eligible venue, unsupported operation, rejected
    order, venue down during dispatch, deadline exceeded before dispatch)
    come back as a LiquidityResult with success=False; they are never
    raised.
    """

    def __init__(
        self,
        registry: VenueRegistry,
        strategy: Optional[BaseSelectionStrategy] = None,
        collector: Optional[MetricsCollector] = None,
        analyzer: Optional[ArbitrageAnalyzer] = None,
        deadline_s: Optional[float] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.registry = registry
        self.strategy = strategy or get_strategy(StrategyType(settings.SELECTION_STRATEGY))
        self.collector = collector or MetricsCollector(registry, settings=settings)
        self.analyzer = analyzer or ArbitrageAnalyzer()
        self.deadline_s = deadline_s if deadline_s is not None else settings.EXECUTE_DEADLINE_S

    async def execute(
        self,
        operation: LiquidityOperation,
        deadline_s: Optional[float] = None,
    ) -> LiquidityResult:
        """
        Execute a liquidity operation on the best venue.

        Args:
            operation: Operation to route
            deadline_s: Budget for collection and selection; defaults to
                the router's configured deadline

        Returns:
            LiquidityResult with an explicit success flag and detail
        """
        loop = asyncio.get_running_loop()
        budget = self.deadline_s if deadline_s is None else deadline_s
        deadline = loop.time() + budget

        logger.info(
            "Routing %s %s %s (reason: %s)",
            operation.operation_type.value,
            operation.amount,
            operation.symbol,
            operation.reason or "-",
        )

        side = operation.operation_type.order_side
        if side is None:
            error = UnsupportedOperation(operation.operation_type.value)
            logger.warning("Rejected operation: %s", error)
            return LiquidityResult.rejected(operation, str(error))

        try:
            metrics = await asyncio.wait_for(self.collector.collect(operation.symbol), timeout=budget)
        except asyncio.TimeoutError:
            logger.warning("Deadline of %.2fs exceeded while collecting %s metrics", budget, operation.symbol)
            return LiquidityResult.rejected(operation, "deadline exceeded before dispatch")

        try:
            venue = self.strategy.select_venue(metrics, operation)
        except NoEligibleVenue as e:
            logger.warning("No venue for %s: %s", operation.symbol, e)
            return LiquidityResult.rejected(operation, "no eligible venue")

        if loop.time() >= deadline:
            logger.warning("Deadline exceeded after selecting %s; order not dispatched", venue.value)
            return LiquidityResult.rejected(operation, "deadline exceeded before dispatch", venue)

        client = self.registry.get(venue)
        logger.info("Selected %s via %s for %s", venue.value, self.strategy.name, operation.symbol)

        # Once dispatched the order runs to completion even if the caller is cancelled
        dispatch = asyncio.ensure_future(
            client.place_market_order(operation.symbol, operation.amount, side)
        )
        dispatch.add_done_callback(functools.partial(_log_order_outcome, venue, operation))
        try:
            order: OrderResult = await asyncio.shield(dispatch)
        except VenueUnavailable as e:
            return LiquidityResult.rejected(operation, str(e), venue)
        except Exception as e:
            # Order state is unknown here; never retried
            return LiquidityResult.rejected(operation, f"order state unknown: {e}", venue)

        result = LiquidityResult.from_order(operation, order)
        if not result.success:
            logger.warning("Order rejected by %s: %s", venue.value, result.detail)
        elif result.is_partial_fill:
            logger.info(
                "Partial fill on %s: %s of %s",
                venue.value,
                result.total_executed_amount,
                result.requested_amount,
            )
        else:
            logger.info("Executed %s on %s @ %s", result.total_executed_amount, venue.value, result.avg_price)
        return result

    async def collect_metrics(self, symbol: str) -> dict[VenueIdentity, VenueMetrics]:
        """Current metrics snapshot for ``symbol``."""
        return await self.collector.collect(symbol)

    async def scan_arbitrage(self, symbol: str) -> Optional[ArbitrageOpportunity]:
        """Collect a fresh snapshot and look for a cross-venue spread."""
        metrics = await self.collector.collect(symbol)
        return self.analyzer.find_opportunity_in_metrics(metrics, symbol=symbol)

    async def close(self) -> None:
        await self.registry.aclose()


# Singleton instance
_liquidity_router: Optional[LiquidityRouter] = None


def get_liquidity_router() -> LiquidityRouter:
    """Get the singleton liquidity router."""
    global _liquidity_router
    if _liquidity_router is None:
        _liquidity_router = LiquidityRouter(build_registry())
    return _liquidity_router


async def close_liquidity_router() -> None:
    """Close venue connections held by the singleton, if created."""
    global _liquidity_router
    if _liquidity_router is not None:
        await _liquidity_router.close()
        _liquidity_router = None
