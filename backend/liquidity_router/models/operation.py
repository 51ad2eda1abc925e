"""
Data models for liquidity operations, order results and routing results.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from liquidity_router.exceptions import OrderRejected
from liquidity_router.models.venue import OrderSide, OrderStatus, VenueIdentity, VenueMetrics


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OperationType(str, Enum):
    """Kind of liquidity operation a caller can request."""
    BUY = "buy"
    SELL = "sell"
    PROVIDE_LIQUIDITY = "provide_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"

    @property
    def order_side(self) -> Optional[OrderSide]:
        """Market order side for BUY/SELL, None for pool operations."""
        if self is OperationType.BUY:
            return OrderSide.BUY
        if self is OperationType.SELL:
            return OrderSide.SELL
        return None


class StrategyType(str, Enum):
    """Available venue selection strategies."""
    COST_SCORE = "cost_score"
    LATENCY = "latency"
    LIQUIDITY = "liquidity"


def split_symbol(symbol: str) -> tuple[str, str]:
    """
    Split a pair such as ``TKN/JPY`` into base and quote.

    A bare symbol is quoted in JPY.
    """
    base, sep, quote = symbol.partition("/")
    return base, (quote if sep and quote else "JPY")


class LiquidityOperation(BaseModel):
    """Request to buy, sell or move liquidity in a token pair."""

    model_config = ConfigDict(frozen=True)

    operation_type: OperationType
    symbol: str = Field(description="Trading pair, e.g. 'TKN/JPY'")
    amount: Decimal = Field(gt=0, description="Base asset amount")
    target_price: Optional[Decimal] = Field(default=None, gt=0)
    reason: str = Field(default="", description="Free text, kept for audit only")

    @field_validator("symbol")
    @classmethod
    def symbol_uppercase(cls, v: str) -> str:
        """Ensure symbol is uppercase."""
        v = v.upper().strip()
        if not v:
            raise ValueError("symbol must not be empty")
        return v

    @property
    def base_asset(self) -> str:
        return split_symbol(self.symbol)[0]

    @property
    def quote_currency(self) -> str:
        return split_symbol(self.symbol)[1]


class OrderResult(BaseModel):
    """
    Outcome of a single order attempt on a venue.

    ``order_id`` is present iff the order succeeded and ``error_message``
    iff it failed. A success with ``executed_amount < requested_amount``
    is a partial fill, not an error.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    venue: VenueIdentity
    status: OrderStatus
    symbol: str
    side: OrderSide
    requested_amount: Decimal = Field(ge=0)
    order_id: Optional[str] = None
    executed_amount: Decimal = Field(default=Decimal("0"), ge=0)
    avg_execution_price: Optional[Decimal] = None
    raw_venue_response: Optional[str] = None
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def check_outcome_fields(self) -> "OrderResult":
        if self.success and not self.order_id:
            raise ValueError("successful order result requires an order_id")
        if not self.success and self.order_id:
            raise ValueError("failed order result must not carry an order_id")
        if self.success and self.error_message:
            raise ValueError("successful order result must not carry an error_message")
        if not self.success and not self.error_message:
            raise ValueError("failed order result requires an error_message")
        return self

    @property
    def is_partial_fill(self) -> bool:
        return self.status is OrderStatus.PARTIALLY_FILLED

    def raise_for_failure(self) -> "OrderResult":
        """Raise OrderRejected if the venue refused the order, else return self."""
        if not self.success:
            raise OrderRejected(self.venue, self.error_message or self.status.value)
        return self

    @classmethod
    def filled(
        cls,
        *,
        venue: VenueIdentity,
        order_id: str,
        symbol: str,
        side: OrderSide,
        requested_amount: Decimal,
        executed_amount: Decimal,
        price: Decimal,
        raw_venue_response: Optional[str] = None,
    ) -> "OrderResult":
        """Result for an order that executed, fully or partially."""
        status = (
            OrderStatus.FILLED
            if executed_amount >= requested_amount
            else OrderStatus.PARTIALLY_FILLED
        )
        return cls(
            success=True,
            venue=venue,
            status=status,
            symbol=symbol,
            side=side,
            requested_amount=requested_amount,
            order_id=order_id,
            executed_amount=executed_amount,
            avg_execution_price=price,
            raw_venue_response=raw_venue_response
            or f"{status.value} {executed_amount} {symbol} @ {price} ({order_id})",
        )

    @classmethod
    def pending(
        cls,
        *,
        venue: VenueIdentity,
        order_id: str,
        symbol: str,
        side: OrderSide,
        requested_amount: Decimal,
        raw_venue_response: Optional[str] = None,
    ) -> "OrderResult":
        """Result for an accepted limit order still resting on the book."""
        return cls(
            success=True,
            venue=venue,
            status=OrderStatus.PENDING,
            symbol=symbol,
            side=side,
            requested_amount=requested_amount,
            order_id=order_id,
            raw_venue_response=raw_venue_response or f"pending ({order_id})",
        )

    @classmethod
    def failure(
        cls,
        message: str,
        *,
        venue: VenueIdentity,
        symbol: str,
        side: OrderSide,
        requested_amount: Decimal,
        status: OrderStatus = OrderStatus.REJECTED,
        raw_venue_response: Optional[str] = None,
    ) -> "OrderResult":
        """Result for an order the venue refused or could not process."""
        return cls(
            success=False,
            venue=venue,
            status=status,
            symbol=symbol,
            side=side,
            requested_amount=requested_amount,
            error_message=message,
            raw_venue_response=raw_venue_response,
        )


class LiquidityResult(BaseModel):
    """Audit record of one routing decision. Produced once per execute call."""

    model_config = ConfigDict(frozen=True)

    operation_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=_utcnow)

    success: bool
    operation_type: OperationType
    symbol: str
    requested_amount: Decimal
    executed_venue: Optional[VenueIdentity] = None
    order_id: Optional[str] = None
    total_executed_amount: Decimal = Decimal("0")
    avg_price: Optional[Decimal] = None
    detail: str

    @property
    def is_partial_fill(self) -> bool:
        return self.success and self.total_executed_amount < self.requested_amount

    @classmethod
    def rejected(
        cls,
        operation: LiquidityOperation,
        detail: str,
        executed_venue: Optional[VenueIdentity] = None,
    ) -> "LiquidityResult":
        """Failed result for an operation that produced no execution."""
        return cls(
            success=False,
            operation_type=operation.operation_type,
            symbol=operation.symbol,
            requested_amount=operation.amount,
            executed_venue=executed_venue,
            detail=detail,
        )

    @classmethod
    def from_order(cls, operation: LiquidityOperation, order: OrderResult) -> "LiquidityResult":
        """Wrap a venue order result."""
        if order.success:
            detail = order.raw_venue_response or order.status.value
        else:
            detail = order.error_message or "order rejected"
        return cls(
            success=order.success,
            operation_type=operation.operation_type,
            symbol=operation.symbol,
            requested_amount=operation.amount,
            executed_venue=order.venue,
            order_id=order.order_id,
            total_executed_amount=order.executed_amount,
            avg_price=order.avg_execution_price,
            detail=detail,
        )


class ArbitrageOpportunity(BaseModel):
    """Cross-venue price dispersion worth acting on."""

    model_config = ConfigDict(frozen=True)

    symbol: Optional[str] = None
    buy_venue: VenueIdentity
    sell_venue: VenueIdentity
    buy_price: Decimal
    sell_price: Decimal
    profit_rate: Decimal = Field(description="(sell - buy) / buy, gross of fees")
    net_profit_rate: Decimal = Field(description="profit_rate less round-trip fees")

    @property
    def is_profitable(self) -> bool:
        return self.net_profit_rate > 0

    def expected_profit(self, amount: Decimal) -> Decimal:
        """Gross quote-currency profit for trading ``amount`` of base."""
        return (self.sell_price - self.buy_price) * amount


class VenueInfo(BaseModel):
    """Venue description exposed by the API."""

    id: VenueIdentity
    name: str
    region: str
    fee_rate: Decimal
    adapter: str


class MetricsSnapshot(BaseModel):
    """Metrics of every registered venue for one symbol."""

    symbol: str
    collected_at: datetime = Field(default_factory=_utcnow)
    venues: list[VenueMetrics]
