"""
Cross-venue arbitrage detection.

Read-only: the analyzer reports opportunities and never places orders.
"""

import logging
from decimal import Decimal
from typing import Optional

from liquidity_router.config import get_settings
from liquidity_router.models.operation import ArbitrageOpportunity
from liquidity_router.models.venue import VenueIdentity, VenueMetrics

logger = logging.getLogger(__name__)


class ArbitrageAnalyzer:
    """
    Finds the widest buy-low/sell-high spread across venues.

    profit_rate = (max_price - min_price) / min_price

    An opportunity is reported when the rate net of the configured
    round-trip fee is at least ``min_profit_rate`` and the gross rate is no
    more than ``max_spread_rate``. Wider gaps almost always mean one quote
    is stale.
    """

    def __init__(
        self,
        min_profit_rate: Optional[Decimal] = None,
        max_spread_rate: Optional[Decimal] = None,
        round_trip_fee_rate: Optional[Decimal] = None,
    ):
        settings = get_settings()
        self.min_profit_rate = (
            settings.ARBITRAGE_MIN_PROFIT_RATE if min_profit_rate is None else min_profit_rate
        )
        self.max_spread_rate = (
            settings.ARBITRAGE_MAX_SPREAD_RATE if max_spread_rate is None else max_spread_rate
        )
        self.round_trip_fee_rate = (
            settings.ARBITRAGE_ROUND_TRIP_FEE_RATE if round_trip_fee_rate is None else round_trip_fee_rate
        )

    def find_opportunity(
        self,
        prices: dict[VenueIdentity, Decimal],
        symbol: Optional[str] = None,
    ) -> Optional[ArbitrageOpportunity]:
        """
        Detect a profitable spread between the cheapest and dearest venue.

        Args:
            prices: Price per venue; non-positive prices are ignored
            symbol: Pair the prices belong to, carried into the result

        Returns:
            The opportunity, or None if fewer than two venues quote or the
            spread is outside the configured band
        """
        quoted = sorted(
            ((venue, price) for venue, price in prices.items() if price > 0),
            key=lambda item: item[0].rank,
        )
        if len(quoted) < 2:
            return None

        buy_venue, min_price = min(quoted, key=lambda item: item[1])
        sell_venue, max_price = max(quoted, key=lambda item: item[1])
        if buy_venue == sell_venue or max_price == min_price:
            return None

        profit_rate = (max_price - min_price) / min_price
        net_profit_rate = profit_rate - self.round_trip_fee_rate

        if net_profit_rate < self.min_profit_rate:
            return None
        if profit_rate > self.max_spread_rate:
            logger.warning(
                "Ignoring %s spread between %s and %s: %.4f exceeds sanity cap",
                symbol or "price",
                buy_venue.value,
                sell_venue.value,
                profit_rate,
            )
            return None

        opportunity = ArbitrageOpportunity(
            symbol=symbol,
            buy_venue=buy_venue,
            sell_venue=sell_venue,
            buy_price=min_price,
            sell_price=max_price,
            profit_rate=profit_rate,
            net_profit_rate=net_profit_rate,
        )
        logger.info(
            "Arbitrage %s: buy %s @ %s, sell %s @ %s (%.4f)",
            symbol or "",
            buy_venue.value,
            min_price,
            sell_venue.value,
            max_price,
            profit_rate,
        )
        return opportunity

    def find_opportunity_in_metrics(
        self,
        metrics: dict[VenueIdentity, VenueMetrics],
        symbol: Optional[str] = None,
    ) -> Optional[ArbitrageOpportunity]:
        """Same analysis over mid prices of the tradable venues in a snapshot."""
        prices = {
            venue: m.mid_price
            for venue, m in metrics.items()
            if m.trading_allowed and m.mid_price > 0
        }
        return self.find_opportunity(prices, symbol=symbol)
