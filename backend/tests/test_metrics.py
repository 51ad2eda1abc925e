"""
Unit tests for the metrics collector.
"""

import asyncio
from decimal import Decimal

import pytest

from liquidity_router.config import Settings
from liquidity_router.models.venue import UNAVAILABLE_LATENCY_MS, VenueIdentity
from liquidity_router.services.metrics import MetricsCollector
from liquidity_router.venues.registry import VenueRegistry
from liquidity_router.venues.simulated import SimulatedVenueClient

from conftest import VENUE_A, VENUE_B, VENUE_C, FailingVenueClient


def make_collector(registry, **kwargs):
    kwargs.setdefault("venue_timeout_s", 1.0)
    kwargs.setdefault("use_order_book", False)
    return MetricsCollector(registry, settings=Settings(), **kwargs)


class TestCollect:
    """Test one collection pass."""

    @pytest.mark.asyncio
    async def test_synthetic_spread(self):
        client = SimulatedVenueClient(VENUE_A, fee_rate=Decimal("0.001"), seed=3)
        metrics = await make_collector(VenueRegistry([client])).collect("TKN/JPY")

        m = metrics[VENUE_A]
        assert m.trading_allowed
        assert m.best_bid == client.price - Decimal("0.5")
        assert m.best_ask == client.price + Decimal("0.5")
        assert m.mid_price == client.price
        assert m.spread == Decimal("1.0")
        assert m.fee_rate == Decimal("0.001")
        assert m.available_liquidity_base == Decimal("10000")
        assert m.latency_ms < UNAVAILABLE_LATENCY_MS

    @pytest.mark.asyncio
    async def test_order_book_top(self):
        client = SimulatedVenueClient(VENUE_A, seed=3)
        metrics = await make_collector(VenueRegistry([client]), use_order_book=True).collect("TKN/JPY")

        m = metrics[VENUE_A]
        assert m.trading_allowed
        assert m.best_ask > m.best_bid > 0
        assert m.available_liquidity_base > 0
        assert m.available_liquidity_quote > 0

    @pytest.mark.asyncio
    async def test_failed_venue_included_as_unavailable(self):
        registry = VenueRegistry([
            SimulatedVenueClient(VENUE_A, seed=1),
            FailingVenueClient(VENUE_B),
            SimulatedVenueClient(VENUE_C, seed=2),
        ])
        metrics = await make_collector(registry).collect("TKN/JPY")

        assert set(metrics) == {VENUE_A, VENUE_B, VENUE_C}
        assert metrics[VENUE_A].trading_allowed
        assert metrics[VENUE_C].trading_allowed
        assert not metrics[VENUE_B].trading_allowed
        assert metrics[VENUE_B].latency_ms == UNAVAILABLE_LATENCY_MS
        assert metrics[VENUE_B].note

    @pytest.mark.asyncio
    async def test_slow_venue_times_out(self):
        registry = VenueRegistry([
            SimulatedVenueClient(VENUE_A, seed=1),
            SimulatedVenueClient(VENUE_B, seed=2, latency_s=5.0),
        ])
        loop = asyncio.get_running_loop()
        start = loop.time()
        metrics = await make_collector(registry, venue_timeout_s=0.1).collect("TKN/JPY")

        assert loop.time() - start < 2.0
        assert metrics[VENUE_A].trading_allowed
        assert not metrics[VENUE_B].trading_allowed
        assert metrics[VENUE_B].note == "timeout"

    @pytest.mark.asyncio
    async def test_venues_polled_concurrently(self):
        registry = VenueRegistry([
            SimulatedVenueClient(venue, seed=i, latency_s=0.2)
            for i, venue in enumerate((VENUE_A, VENUE_B, VENUE_C))
        ])
        loop = asyncio.get_running_loop()
        start = loop.time()
        metrics = await make_collector(registry, venue_timeout_s=2.0).collect("TKN/JPY")

        # Each venue takes 0.2s; serial polling would take 0.6s
        assert loop.time() - start < 0.5
        assert all(m.trading_allowed for m in metrics.values())

    @pytest.mark.asyncio
    async def test_trading_disabled_by_compliance(self):
        client = SimulatedVenueClient(VENUE_A, seed=1, trading_allowed=False)
        metrics = await make_collector(VenueRegistry([client])).collect("TKN/JPY")

        assert not metrics[VENUE_A].trading_allowed
        assert metrics[VENUE_A].mid_price > 0

    @pytest.mark.asyncio
    async def test_unhealthy_api_reports_no_price(self):
        client = SimulatedVenueClient(VENUE_A, seed=1, api_healthy=False)
        metrics = await make_collector(VenueRegistry([client])).collect("TKN/JPY")

        assert not metrics[VENUE_A].trading_allowed
        assert metrics[VENUE_A].note == "no price"

    @pytest.mark.asyncio
    async def test_result_in_declaration_order(self):
        registry = VenueRegistry([
            SimulatedVenueClient(VenueIdentity.OKX, seed=1),
            SimulatedVenueClient(VenueIdentity.BITBANK, seed=2),
            SimulatedVenueClient(VenueIdentity.BINANCE, seed=3),
        ])
        metrics = await make_collector(registry).collect("TKN/JPY")
        assert list(metrics) == [VenueIdentity.BITBANK, VenueIdentity.BINANCE, VenueIdentity.OKX]

    @pytest.mark.asyncio
    async def test_empty_registry(self):
        assert await make_collector(VenueRegistry()).collect("TKN/JPY") == {}


class TestCollectPrices:
    """Test the price-only collection used for arbitrage scans."""

    @pytest.mark.asyncio
    async def test_failed_venues_omitted(self):
        registry = VenueRegistry([
            SimulatedVenueClient(VENUE_A, seed=1),
            FailingVenueClient(VENUE_B),
            SimulatedVenueClient(VENUE_C, seed=2, api_healthy=False),
        ])
        prices = await make_collector(registry).collect_prices("TKN/JPY")
        assert list(prices) == [VENUE_A]
        assert prices[VENUE_A] > 0
