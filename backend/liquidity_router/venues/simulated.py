"""
Simulated venue for demos and tests.

Prices follow a bounded random walk drawn from an injectable random source,
so a seeded client reproduces the same price path on every run.
"""

import asyncio
import itertools
import logging
import random
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import AsyncIterator, Optional

from liquidity_router.models.operation import OrderResult, split_symbol
from liquidity_router.models.venue import (
    Balance,
    BookLevel,
    ComplianceStatus,
    OrderBook,
    OrderSide,
    OrderStatus,
    Trade,
    TradingLimits,
    VenueIdentity,
)
from liquidity_router.venues.base import VenueClient

logger = logging.getLogger(__name__)

PRICE_TICK = Decimal("0.01")
BOOK_STEP = Decimal("0.5")


class SimulatedVenueClient(VenueClient):
    """
    In-memory venue with a random-walk price.

    Each price query moves the price by up to +/- ``max_move`` (2% by
    default) and clamps it to ``[price_floor, price_ceiling]``. Orders
    settle against in-memory balances; ``fill_ratio`` below 1 produces
    partial fills.
    """

    def __init__(
        self,
        venue: VenueIdentity,
        fee_rate: Decimal = Decimal("0.001"),
        base_price: Decimal = Decimal("148.50"),
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        max_move: float = 0.02,
        price_floor: Decimal = Decimal("100"),
        price_ceiling: Decimal = Decimal("200"),
        balances: Optional[dict[str, Decimal]] = None,
        fill_ratio: Decimal = Decimal("1"),
        trading_allowed: bool = True,
        api_healthy: bool = True,
        latency_s: float = 0.0,
        limits: Optional[TradingLimits] = None,
    ):
        super().__init__(venue, fee_rate)
        if not Decimal("0") < fill_ratio <= Decimal("1"):
            raise ValueError(f"fill_ratio must be in (0, 1], got {fill_ratio}")
        self.rng = rng or random.Random(seed)
        self.price = base_price
        self.max_move = max_move
        self.price_floor = price_floor
        self.price_ceiling = price_ceiling
        self.fill_ratio = fill_ratio
        self.trading_allowed = trading_allowed
        self.api_healthy = api_healthy
        self.latency_s = latency_s
        self.limits = limits or TradingLimits(
            min_order_size=Decimal("0.01"),
            max_order_size=Decimal("1000000"),
            min_notional=Decimal("100"),
            price_precision=PRICE_TICK,
            size_precision=Decimal("0.0001"),
        )
        self._balances: dict[str, Balance] = {
            asset: Balance(asset=asset, free=free)
            for asset, free in (balances or {"TKN": Decimal("1000000"), "JPY": Decimal("50000000")}).items()
        }
        self._trades: list[Trade] = []
        self._orders: dict[str, OrderStatus] = {}
        self._order_ids = itertools.count(1000)
        self._trade_ids = itertools.count(5000)

    async def _simulate_latency(self) -> None:
        if self.latency_s > 0:
            await asyncio.sleep(self.latency_s)

    def _next_price(self) -> Decimal:
        variation = (self.rng.random() - 0.5) * 2 * self.max_move
        moved = self.price * (Decimal("1") + Decimal(str(variation)))
        moved = min(max(moved, self.price_floor), self.price_ceiling)
        self.price = moved.quantize(PRICE_TICK, rounding=ROUND_HALF_UP)
        return self.price

    async def get_current_price(self, symbol: str, quote_currency: str) -> Decimal:
        await self._simulate_latency()
        if not self.api_healthy:
            return Decimal("0")
        return self._next_price()

    def _balance(self, asset: str) -> Balance:
        return self._balances.setdefault(asset, Balance(asset=asset, free=Decimal("0")))

    def _pre_check(
        self,
        symbol: str,
        amount: Decimal,
        price: Decimal,
        side: OrderSide,
        max_price: Optional[Decimal] = None,
    ) -> Optional[str]:
        if not self.api_healthy or not self.trading_allowed:
            return "trading suspended"
        violation = self.limits.validate_order(amount, price)
        if violation:
            return violation
        base, quote = split_symbol(symbol)
        if side == OrderSide.SELL:
            if not self._balance(base).covers(amount):
                return "insufficient balance"
        elif not self._balance(quote).covers(amount * (max_price or price)):
            return "insufficient balance"
        return None

    def _settle(self, symbol: str, amount: Decimal, price: Decimal, side: OrderSide, order_id: str) -> None:
        base, quote = split_symbol(symbol)
        base_balance = self._balance(base)
        quote_balance = self._balance(quote)
        notional = amount * price
        if side == OrderSide.SELL:
            base_balance.free -= amount
            quote_balance.free += notional
        else:
            quote_balance.free -= notional
            base_balance.free += amount

        trade = Trade(
            trade_id=f"TRADE_{next(self._trade_ids)}",
            order_id=order_id,
            venue=self.venue,
            symbol=symbol,
            side=side,
            amount=amount,
            price=price,
            fee=notional * self.fee_rate,
            fee_currency=quote,
            timestamp=datetime.now(timezone.utc),
        )
        self._trades.append(trade)
        logger.debug("Simulated trade on %s: %s", self.venue.value, trade)

    def _new_order_id(self) -> str:
        return f"{self.venue.value.upper()}_{next(self._order_ids)}"

    async def place_market_order(
        self,
        symbol: str,
        amount: Decimal,
        side: OrderSide,
    ) -> OrderResult:
        await self._simulate_latency()
        # A rejected order never advances the price walk
        reference = self.price.quantize(PRICE_TICK)
        worst = min(reference * (Decimal("1") + Decimal(str(self.max_move))), self.price_ceiling)
        error = self._pre_check(symbol, amount, reference, side, max_price=worst)
        if error:
            logger.info("Market order rejected on %s: %s", self.venue.value, error)
            return OrderResult.failure(
                error, venue=self.venue, symbol=symbol, side=side, requested_amount=amount
            )

        price = self._next_price()
        order_id = self._new_order_id()
        executed = (amount * self.fill_ratio).quantize(self.limits.size_precision)
        self._settle(symbol, executed, price, side, order_id)
        result = OrderResult.filled(
            venue=self.venue,
            order_id=order_id,
            symbol=symbol,
            side=side,
            requested_amount=amount,
            executed_amount=executed,
            price=price,
        )
        self._orders[order_id] = result.status
        logger.info("Market order filled on %s: %s", self.venue.value, result.raw_venue_response)
        return result

    async def place_limit_order(
        self,
        symbol: str,
        amount: Decimal,
        price: Decimal,
        side: OrderSide,
    ) -> OrderResult:
        await self._simulate_latency()
        error = self._pre_check(symbol, amount, price, side)
        if error:
            return OrderResult.failure(
                error, venue=self.venue, symbol=symbol, side=side, requested_amount=amount
            )

        order_id = self._new_order_id()
        current = self._next_price()
        crosses = (side == OrderSide.BUY and price >= current) or (
            side == OrderSide.SELL and price <= current
        )
        if not crosses:
            self._orders[order_id] = OrderStatus.PENDING
            return OrderResult.pending(
                venue=self.venue,
                order_id=order_id,
                symbol=symbol,
                side=side,
                requested_amount=amount,
                raw_venue_response=f"pending {side.value} {amount} {symbol} @ {price}, market {current}",
            )

        self._settle(symbol, amount, current, side, order_id)
        self._orders[order_id] = OrderStatus.FILLED
        return OrderResult.filled(
            venue=self.venue,
            order_id=order_id,
            symbol=symbol,
            side=side,
            requested_amount=amount,
            executed_amount=amount,
            price=current,
        )

    async def cancel_order(self, order_id: str) -> bool:
        status = self._orders.get(order_id)
        if status is None or not status.is_active:
            return False
        self._orders[order_id] = OrderStatus.CANCELLED
        logger.info("Order %s cancelled on %s", order_id, self.venue.value)
        return True

    async def get_order_status(self, order_id: str) -> OrderStatus:
        status = self._orders.get(order_id)
        if status is None:
            raise KeyError(f"Unknown order on {self.venue.value}: {order_id}")
        return status

    async def get_balance(self, asset: str) -> Balance:
        return self._balance(asset).model_copy()

    async def get_trade_history(
        self,
        symbol: str,
        since: Optional[datetime] = None,
    ) -> AsyncIterator[Trade]:
        # Snapshot first so trades settled mid-iteration are picked up by the next query
        for trade in list(self._trades):
            if trade.symbol != symbol:
                continue
            if since is not None and trade.timestamp <= since:
                continue
            yield trade

    async def get_order_book(self, symbol: str, depth: int = 10) -> OrderBook:
        await self._simulate_latency()
        mid = self._next_price()
        bids = []
        asks = []
        for i in range(depth):
            bid_price = mid - BOOK_STEP * (i + 1)
            if bid_price > 0:
                bids.append(BookLevel(price=bid_price, amount=Decimal(1000 + self.rng.randrange(5000))))
            asks.append(BookLevel(price=mid + BOOK_STEP * (i + 1), amount=Decimal(1000 + self.rng.randrange(5000))))
        return OrderBook(
            venue=self.venue,
            symbol=symbol,
            bids=bids,
            asks=asks,
            fetched_at=datetime.now(timezone.utc),
        )

    async def get_trading_limits(self) -> TradingLimits:
        return self.limits

    async def get_compliance_status(self) -> ComplianceStatus:
        await self._simulate_latency()
        return ComplianceStatus(
            api_healthy=self.api_healthy,
            trading_allowed=self.trading_allowed,
            withdrawal_allowed=self.api_healthy,
            jurisdiction_note=self.venue.region,
            last_checked_iso=datetime.now(timezone.utc).isoformat(),
        )
