"""
Shared fixtures and venue doubles for the test suite.
"""

import asyncio
from decimal import Decimal
from typing import Optional

import pytest

from liquidity_router.exceptions import VenueUnavailable
from liquidity_router.models.operation import LiquidityOperation, OperationType, OrderResult
from liquidity_router.models.venue import OrderSide, VenueIdentity, VenueMetrics
from liquidity_router.services.metrics import MetricsCollector
from liquidity_router.venues.registry import VenueRegistry
from liquidity_router.venues.simulated import SimulatedVenueClient

VENUE_A = VenueIdentity.BITBANK
VENUE_B = VenueIdentity.COINCHECK
VENUE_C = VenueIdentity.BINANCE


def make_metrics(
    venue: VenueIdentity,
    spread: str = "0.5",
    fee_rate: str = "0.05",
    latency_ms: int = 50,
    best_bid: str = "148.00",
    trading_allowed: bool = True,
    liquidity_base: str = "10000",
) -> VenueMetrics:
    """Metrics whose cost score is spread + fee_rate + latency_ms / 1000."""
    bid = Decimal(best_bid)
    ask = bid + Decimal(spread)
    return VenueMetrics(
        venue=venue,
        best_bid=bid,
        best_ask=ask,
        mid_price=(bid + ask) / 2,
        available_liquidity_base=Decimal(liquidity_base),
        available_liquidity_quote=Decimal("1500000"),
        fee_rate=Decimal(fee_rate),
        trading_allowed=trading_allowed,
        latency_ms=latency_ms,
    )


class RecordingVenueClient(SimulatedVenueClient):
    """Simulated venue that counts order dispatches."""

    def __init__(self, venue: VenueIdentity, **kwargs):
        kwargs.setdefault("seed", 1)
        super().__init__(venue, **kwargs)
        self.market_orders: list[tuple[str, Decimal, OrderSide]] = []
        self.limit_orders = 0
        self.last_result: Optional[OrderResult] = None

    @property
    def dispatch_count(self) -> int:
        return len(self.market_orders) + self.limit_orders

    async def place_market_order(self, symbol, amount, side):
        self.market_orders.append((symbol, amount, side))
        self.last_result = await super().place_market_order(symbol, amount, side)
        return self.last_result

    async def place_limit_order(self, symbol, amount, price, side):
        self.limit_orders += 1
        return await super().place_limit_order(symbol, amount, price, side)


class FailingVenueClient(RecordingVenueClient):
    """Venue whose every network call raises."""

    async def get_current_price(self, symbol, quote_currency):
        raise RuntimeError("connection reset")

    async def get_compliance_status(self):
        raise VenueUnavailable(self.venue, "status endpoint down")

    async def place_market_order(self, symbol, amount, side):
        self.market_orders.append((symbol, amount, side))
        raise VenueUnavailable(self.venue, "connection reset")


class StaticCollector(MetricsCollector):
    """Collector returning a fixed snapshot, optionally after a delay."""

    def __init__(self, metrics: dict[VenueIdentity, VenueMetrics], delay_s: float = 0.0):
        self.metrics = metrics
        self.delay_s = delay_s
        self.calls = 0

    async def collect(self, symbol: str) -> dict[VenueIdentity, VenueMetrics]:
        self.calls += 1
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        return self.metrics


@pytest.fixture
def sell_operation():
    """SELL 1000 TKN/JPY."""
    return LiquidityOperation(
        operation_type=OperationType.SELL,
        symbol="TKN/JPY",
        amount=Decimal("1000"),
        reason="rebalance",
    )


@pytest.fixture
def buy_operation():
    """BUY 10 TKN/JPY."""
    return LiquidityOperation(
        operation_type=OperationType.BUY,
        symbol="TKN/JPY",
        amount=Decimal("10"),
    )


@pytest.fixture
def scenario_metrics():
    """A scores 0.6, B 0.4 but disabled, C 0.9."""
    return {
        VENUE_A: make_metrics(VENUE_A, spread="0.5"),
        VENUE_B: make_metrics(VENUE_B, spread="0.3", trading_allowed=False),
        VENUE_C: make_metrics(VENUE_C, spread="0.8"),
    }


@pytest.fixture
def recording_registry():
    """Registry of three independent recording venues."""
    return VenueRegistry([
        RecordingVenueClient(VENUE_A, seed=11),
        RecordingVenueClient(VENUE_B, seed=12),
        RecordingVenueClient(VENUE_C, seed=13),
    ])
