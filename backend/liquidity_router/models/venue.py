"""
Data models describing trading venues and their market state.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from liquidity_router.config import VenueConfig


# Latency reported for venues that failed or timed out during collection
UNAVAILABLE_LATENCY_MS = 2**31 - 1


class VenueIdentity(str, Enum):
    """
    Configured trading venue.

    Declaration order is the deterministic tie-break order used by the
    selection strategies.
    """
    BITBANK = "bitbank"
    COINCHECK = "coincheck"
    BITFLYER = "bitflyer"
    GMO_COIN = "gmo_coin"
    BINANCE = "binance"
    BYBIT = "bybit"
    OKX = "okx"
    MOCK = "mock"

    @property
    def display_name(self) -> str:
        return VenueConfig.VENUES[self.value]["name"]

    @property
    def region(self) -> str:
        return VenueConfig.VENUES[self.value]["region"]

    @property
    def rank(self) -> int:
        """Position in declaration order."""
        return list(VenueIdentity).index(self)


class OrderSide(str, Enum):
    """Order side (buy or sell)."""
    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    """Lifecycle state of an order on a venue."""
    PENDING = "pending"
    SUBMITTED = "submitted"
    PARTIALLY_FILLED = "partially_filled"
    FILLED = "filled"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    FAILED = "failed"
    EXPIRED = "expired"

    @property
    def is_complete(self) -> bool:
        return self in (
            OrderStatus.FILLED,
            OrderStatus.CANCELLED,
            OrderStatus.REJECTED,
            OrderStatus.FAILED,
            OrderStatus.EXPIRED,
        )

    @property
    def is_success(self) -> bool:
        return self in (OrderStatus.FILLED, OrderStatus.PARTIALLY_FILLED)

    @property
    def is_failure(self) -> bool:
        return self in (OrderStatus.REJECTED, OrderStatus.FAILED)

    @property
    def is_active(self) -> bool:
        return self in (
            OrderStatus.PENDING,
            OrderStatus.SUBMITTED,
            OrderStatus.PARTIALLY_FILLED,
        )


class VenueMetrics(BaseModel):
    """
    Point-in-time snapshot of one venue, rebuilt on every collection pass.

    Venues that could not be queried are still represented, with
    ``trading_allowed=False`` and a sentinel latency.
    """

    model_config = ConfigDict(frozen=True)

    venue: VenueIdentity
    best_bid: Decimal = Field(default=Decimal("0"), ge=0)
    best_ask: Decimal = Field(default=Decimal("0"), ge=0)
    mid_price: Decimal = Field(default=Decimal("0"), ge=0)
    available_liquidity_base: Decimal = Field(default=Decimal("0"), ge=0)
    available_liquidity_quote: Decimal = Field(default=Decimal("0"), ge=0)
    fee_rate: Decimal = Field(default=Decimal("0"), ge=0, description="Fraction of notional")
    trading_allowed: bool = False
    latency_ms: int = Field(default=UNAVAILABLE_LATENCY_MS, ge=0)
    note: Optional[str] = Field(default=None, description="Why the venue is unavailable")

    @model_validator(mode="after")
    def check_book_not_crossed(self) -> "VenueMetrics":
        if self.best_bid > 0 and self.best_ask > 0 and self.best_ask < self.best_bid:
            raise ValueError(
                f"best_ask {self.best_ask} below best_bid {self.best_bid} for {self.venue.value}"
            )
        return self

    @property
    def spread(self) -> Decimal:
        """Calculate bid-ask spread."""
        return self.best_ask - self.best_bid

    @classmethod
    def unavailable(cls, venue: VenueIdentity, note: str) -> "VenueMetrics":
        """Metrics for a venue that failed to respond."""
        return cls(venue=venue, trading_allowed=False, note=note)


class ComplianceStatus(BaseModel):
    """Regulatory and operational status reported by a venue."""

    model_config = ConfigDict(frozen=True)

    api_healthy: bool
    trading_allowed: bool
    withdrawal_allowed: bool
    jurisdiction_note: Optional[str] = None
    last_checked_iso: str

    @property
    def fully_enabled(self) -> bool:
        return self.api_healthy and self.trading_allowed and self.withdrawal_allowed


class TradingLimits(BaseModel):
    """Per-venue order constraints used for pre-flight validation."""

    model_config = ConfigDict(frozen=True)

    min_order_size: Decimal = Field(gt=0)
    max_order_size: Decimal = Field(gt=0)
    min_notional: Decimal = Field(ge=0)
    price_precision: Decimal = Field(gt=0, description="Price tick, e.g. 0.01")
    size_precision: Decimal = Field(gt=0, description="Size step, e.g. 0.0001")

    def validate_order(self, amount: Decimal, price: Optional[Decimal] = None) -> Optional[str]:
        """
        Check an order against these limits.

        Returns:
            A human-readable violation, or None when the order is acceptable
        """
        if amount < self.min_order_size:
            return f"order size {amount} below minimum {self.min_order_size}"
        if amount > self.max_order_size:
            return f"order size {amount} above maximum {self.max_order_size}"
        if amount % self.size_precision != 0:
            return f"order size {amount} not a multiple of {self.size_precision}"
        if price is not None:
            if price % self.price_precision != 0:
                return f"price {price} not a multiple of {self.price_precision}"
            if amount * price < self.min_notional:
                return f"notional {amount * price} below minimum {self.min_notional}"
        return None


class Balance(BaseModel):
    """Asset balance held on a venue."""

    asset: str
    free: Decimal = Field(ge=0)
    locked: Decimal = Field(default=Decimal("0"), ge=0)

    @property
    def total(self) -> Decimal:
        return self.free + self.locked

    def covers(self, amount: Decimal) -> bool:
        """Whether the free balance is enough for ``amount``."""
        return self.free >= amount


class Trade(BaseModel):
    """Executed trade reported by a venue."""

    model_config = ConfigDict(frozen=True)

    trade_id: str
    order_id: str
    venue: VenueIdentity
    symbol: str
    side: OrderSide
    amount: Decimal
    price: Decimal
    fee: Decimal = Decimal("0")
    fee_currency: Optional[str] = None
    timestamp: datetime


class BookLevel(BaseModel):
    """Single price level of an order book."""

    model_config = ConfigDict(frozen=True)

    price: Decimal = Field(gt=0)
    amount: Decimal = Field(gt=0)


class OrderBook(BaseModel):
    """
    Order book snapshot.

    Bids are ordered by price descending and asks by price ascending; the
    two sides are never merged.
    """

    model_config = ConfigDict(frozen=True)

    venue: VenueIdentity
    symbol: str
    bids: list[BookLevel] = Field(default_factory=list)
    asks: list[BookLevel] = Field(default_factory=list)
    fetched_at: datetime

    @model_validator(mode="after")
    def check_level_order(self) -> "OrderBook":
        bid_prices = [level.price for level in self.bids]
        ask_prices = [level.price for level in self.asks]
        if bid_prices != sorted(bid_prices, reverse=True):
            raise ValueError("bids must be ordered by price descending")
        if ask_prices != sorted(ask_prices):
            raise ValueError("asks must be ordered by price ascending")
        return self

    @property
    def best_bid(self) -> Optional[Decimal]:
        return self.bids[0].price if self.bids else None

    @property
    def best_ask(self) -> Optional[Decimal]:
        return self.asks[0].price if self.asks else None

    @property
    def mid_price(self) -> Optional[Decimal]:
        if not self.bids or not self.asks:
            return None
        return (self.bids[0].price + self.asks[0].price) / 2

    @property
    def spread(self) -> Optional[Decimal]:
        if not self.bids or not self.asks:
            return None
        return self.asks[0].price - self.bids[0].price

    @property
    def bid_liquidity(self) -> Decimal:
        """Total base amount resting on the bid side."""
        return sum((level.amount for level in self.bids), Decimal("0"))

    @property
    def ask_liquidity(self) -> Decimal:
        """Total base amount resting on the ask side."""
        return sum((level.amount for level in self.asks), Decimal("0"))

    @property
    def bid_notional(self) -> Decimal:
        """Quote value of the bid side."""
        return sum((level.price * level.amount for level in self.bids), Decimal("0"))
