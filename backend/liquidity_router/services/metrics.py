"""
Venue metrics collection.

Polls every registered venue concurrently and builds one VenueMetrics per
venue. A venue that raises or times out is never dropped: it is reported
with trading_allowed=False so selection can skip it.
"""

import asyncio
import logging
import time
from decimal import Decimal
from typing import Optional

from liquidity_router.config import Settings, get_settings
from liquidity_router.models.operation import split_symbol
from liquidity_router.models.venue import VenueIdentity, VenueMetrics
from liquidity_router.venues.base import VenueClient
from liquidity_router.venues.registry import VenueRegistry

logger = logging.getLogger(__name__)


class MetricsCollector:
    """
    Concurrent, per-venue-timeboxed metrics collector.

    For every venue it queries:
    1. Current price (zero means the venue could not quote)
    2. Compliance status
    3. Order book top, when enabled; otherwise a synthetic spread around
       the price is used
    """

    def __init__(
        self,
        registry: VenueRegistry,
        venue_timeout_s: Optional[float] = None,
        max_concurrency: Optional[int] = None,
        use_order_book: Optional[bool] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.registry = registry
        self.venue_timeout_s = venue_timeout_s if venue_timeout_s is not None else settings.VENUE_TIMEOUT_S
        self.max_concurrency = max_concurrency or settings.COLLECT_MAX_CONCURRENCY
        self.use_order_book = settings.COLLECT_ORDER_BOOK if use_order_book is None else use_order_book
        self.order_book_depth = settings.ORDER_BOOK_DEPTH
        self.half_spread = settings.SYNTHETIC_HALF_SPREAD
        self.default_liquidity_base = settings.DEFAULT_LIQUIDITY_BASE
        self.default_liquidity_quote = settings.DEFAULT_LIQUIDITY_QUOTE

    async def collect(self, symbol: str) -> dict[VenueIdentity, VenueMetrics]:
        """
        Collect metrics for ``symbol`` from every registered venue.

        Returns:
            Metrics keyed by venue, in VenueIdentity order, one entry per
            registered venue
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)
        results = await asyncio.gather(
            *(
                self._collect_venue(venue, client, symbol, semaphore)
                for venue, client in self.registry.items()
            )
        )
        metrics = {m.venue: m for m in results}
        available = sum(1 for m in results if m.trading_allowed)
        logger.info("Collected %s metrics: %d/%d venues tradable", symbol, available, len(metrics))
        return metrics

    async def collect_prices(self, symbol: str) -> dict[VenueIdentity, Decimal]:
        """Current price per venue; venues that could not quote are omitted."""
        _, quote = split_symbol(symbol)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def price_of(venue: VenueIdentity, client: VenueClient) -> tuple[VenueIdentity, Decimal]:
            try:
                async with semaphore:
                    price = await asyncio.wait_for(
                        client.get_current_price(symbol, quote), timeout=self.venue_timeout_s
                    )
            except asyncio.TimeoutError:
                logger.warning("Price query timed out on %s", venue.value)
                return venue, Decimal("0")
            except Exception as e:
                logger.warning("Price query failed on %s: %s", venue.value, e)
                return venue, Decimal("0")
            return venue, price

        pairs = await asyncio.gather(*(price_of(v, c) for v, c in self.registry.items()))
        return {venue: price for venue, price in pairs if price > 0}

    async def _collect_venue(
        self,
        venue: VenueIdentity,
        client: VenueClient,
        symbol: str,
        semaphore: asyncio.Semaphore,
    ) -> VenueMetrics:
        async with semaphore:
            start = time.perf_counter()
            try:
                metrics = await asyncio.wait_for(
                    self._query_venue(venue, client, symbol, start),
                    timeout=self.venue_timeout_s,
                )
            except asyncio.TimeoutError:
                logger.warning("Venue %s timed out after %.2fs", venue.value, self.venue_timeout_s)
                return VenueMetrics.unavailable(venue, "timeout")
            except Exception as e:
                # A single venue must never abort the collection pass
                logger.warning("Venue %s unavailable: %s", venue.value, e)
                return VenueMetrics.unavailable(venue, str(e) or type(e).__name__)
        return metrics

    async def _query_venue(
        self,
        venue: VenueIdentity,
        client: VenueClient,
        symbol: str,
        start: float,
    ) -> VenueMetrics:
        _, quote = split_symbol(symbol)
        price, compliance = await asyncio.gather(
            client.get_current_price(symbol, quote),
            client.get_compliance_status(),
        )
        book = await client.get_order_book(symbol, self.order_book_depth) if self.use_order_book else None
        latency_ms = int((time.perf_counter() - start) * 1000)

        if price <= 0:
            return VenueMetrics.unavailable(venue, "no price")
        if not (compliance.api_healthy and compliance.trading_allowed):
            return VenueMetrics(
                venue=venue,
                mid_price=price,
                fee_rate=client.fee_rate,
                trading_allowed=False,
                latency_ms=latency_ms,
                note="trading disabled by venue",
            )

        if book is not None and book.best_bid is not None and book.best_ask is not None:
            best_bid, best_ask = book.best_bid, book.best_ask
            liquidity_base = book.ask_liquidity
            liquidity_quote = book.bid_notional
        else:
            best_bid = max(price - self.half_spread, Decimal("0"))
            best_ask = price + self.half_spread
            liquidity_base = self.default_liquidity_base
            liquidity_quote = self.default_liquidity_quote

        return VenueMetrics(
            venue=venue,
            best_bid=best_bid,
            best_ask=best_ask,
            mid_price=(best_bid + best_ask) / 2,
            available_liquidity_base=liquidity_base,
            available_liquidity_quote=liquidity_quote,
            fee_rate=client.fee_rate,
            trading_allowed=True,
            latency_ms=latency_ms,
        )
