"""
Unit tests for data models.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from liquidity_router.exceptions import LiquidityRouterError, OrderRejected
from liquidity_router.models.operation import (
    LiquidityOperation,
    LiquidityResult,
    OperationType,
    OrderResult,
    split_symbol,
)
from liquidity_router.models.venue import (
    UNAVAILABLE_LATENCY_MS,
    Balance,
    BookLevel,
    OrderBook,
    OrderSide,
    OrderStatus,
    TradingLimits,
    VenueIdentity,
    VenueMetrics,
)

from conftest import VENUE_A, VENUE_C


class TestVenueIdentity:
    """Test venue identity ordering and lookups."""

    def test_rank_follows_declaration(self):
        assert VenueIdentity.BITBANK.rank < VenueIdentity.COINCHECK.rank < VenueIdentity.BINANCE.rank

    def test_display_name(self):
        assert VenueIdentity.GMO_COIN.display_name == "GMO Coin"
        assert VenueIdentity.OKX.region == "GLOBAL"


class TestOrderStatus:
    """Test status classification."""

    def test_terminal_states(self):
        assert OrderStatus.FILLED.is_complete
        assert OrderStatus.EXPIRED.is_complete
        assert not OrderStatus.PENDING.is_complete
        assert not OrderStatus.PARTIALLY_FILLED.is_complete


class TestBalance:
    """Test venue balance arithmetic."""

    def test_total_includes_locked(self):
        balance = Balance(asset="TKN", free=Decimal("5"), locked=Decimal("2"))
        assert balance.total == Decimal("7")
        assert balance.covers(Decimal("5"))
        assert not balance.covers(Decimal("6"))


class TestVenueMetrics:
    """Test the metrics snapshot model."""

    def test_crossed_book_rejected(self):
        with pytest.raises(ValidationError):
            VenueMetrics(venue=VENUE_A, best_bid=Decimal("150"), best_ask=Decimal("149"))

    def test_negative_fee_rejected(self):
        with pytest.raises(ValidationError):
            VenueMetrics(venue=VENUE_A, fee_rate=Decimal("-0.001"))

    def test_unavailable(self):
        metrics = VenueMetrics.unavailable(VENUE_A, "timeout")
        assert not metrics.trading_allowed
        assert metrics.latency_ms == UNAVAILABLE_LATENCY_MS
        assert metrics.note == "timeout"

    def test_frozen(self):
        metrics = VenueMetrics.unavailable(VENUE_A, "timeout")
        with pytest.raises(ValidationError):
            metrics.trading_allowed = True


class TestOrderResult:
    """Test order outcome invariants."""

    def test_success_requires_order_id(self):
        with pytest.raises(ValidationError):
            OrderResult(
                success=True,
                venue=VENUE_A,
                status=OrderStatus.FILLED,
                symbol="TKN/JPY",
                side=OrderSide.BUY,
                requested_amount=Decimal("1"),
            )

    def test_failure_requires_error(self):
        with pytest.raises(ValidationError):
            OrderResult(
                success=False,
                venue=VENUE_A,
                status=OrderStatus.REJECTED,
                symbol="TKN/JPY",
                side=OrderSide.BUY,
                requested_amount=Decimal("1"),
            )

    def test_failure_must_not_carry_order_id(self):
        with pytest.raises(ValidationError):
            OrderResult(
                success=False,
                venue=VENUE_A,
                status=OrderStatus.REJECTED,
                symbol="TKN/JPY",
                side=OrderSide.BUY,
                requested_amount=Decimal("1"),
                order_id="X",
                error_message="rejected",
            )

    def test_partial_fill_status(self):
        result = OrderResult.filled(
            venue=VENUE_A,
            order_id="X",
            symbol="TKN/JPY",
            side=OrderSide.SELL,
            requested_amount=Decimal("10"),
            executed_amount=Decimal("4"),
            price=Decimal("148.5"),
        )
        assert result.success
        assert result.status == OrderStatus.PARTIALLY_FILLED
        assert result.is_partial_fill

    def test_raise_for_failure(self):
        rejected = OrderResult.failure(
            "insufficient balance",
            venue=VENUE_A,
            symbol="TKN/JPY",
            side=OrderSide.BUY,
            requested_amount=Decimal("1"),
        )
        with pytest.raises(OrderRejected, match="insufficient balance") as exc_info:
            rejected.raise_for_failure()
        assert exc_info.value.venue == VENUE_A
        assert isinstance(exc_info.value, LiquidityRouterError)

        filled = OrderResult.filled(
            venue=VENUE_A,
            order_id="X",
            symbol="TKN/JPY",
            side=OrderSide.BUY,
            requested_amount=Decimal("1"),
            executed_amount=Decimal("1"),
            price=Decimal("148.5"),
        )
        assert filled.raise_for_failure() is filled


class TestLiquidityResult:
    """Test the routing audit record."""

    @pytest.fixture
    def operation(self):
        return LiquidityOperation(operation_type=OperationType.SELL, symbol="TKN/JPY", amount=Decimal("10"))

    def test_from_failed_order(self, operation):
        order = OrderResult.failure(
            "insufficient balance",
            venue=VENUE_C,
            symbol="TKN/JPY",
            side=OrderSide.SELL,
            requested_amount=Decimal("10"),
        )
        result = LiquidityResult.from_order(operation, order)
        assert not result.success
        assert result.executed_venue == VENUE_C
        assert result.detail == "insufficient balance"
        assert result.total_executed_amount == 0

    def test_rejected_has_unique_id(self, operation):
        first = LiquidityResult.rejected(operation, "no eligible venue")
        second = LiquidityResult.rejected(operation, "no eligible venue")
        assert first.operation_id != second.operation_id
        assert first.executed_venue is None
        assert not first.is_partial_fill


class TestLiquidityOperation:
    """Test request validation."""

    def test_symbol_normalized(self):
        operation = LiquidityOperation(operation_type="buy", symbol=" tkn/jpy ", amount=Decimal("1"))
        assert operation.symbol == "TKN/JPY"
        assert operation.base_asset == "TKN"
        assert operation.quote_currency == "JPY"

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ValidationError):
            LiquidityOperation(operation_type=OperationType.BUY, symbol="TKN/JPY", amount=amount)

    def test_empty_symbol(self):
        with pytest.raises(ValidationError):
            LiquidityOperation(operation_type=OperationType.BUY, symbol="  ", amount=Decimal("1"))

    def test_order_side(self):
        assert OperationType.BUY.order_side == OrderSide.BUY
        assert OperationType.SELL.order_side == OrderSide.SELL
        assert OperationType.PROVIDE_LIQUIDITY.order_side is None

    def test_split_symbol(self):
        assert split_symbol("TKN/USDT") == ("TKN", "USDT")
        assert split_symbol("TKN") == ("TKN", "JPY")


class TestTradingLimits:
    """Test pre-flight order validation."""

    @pytest.fixture
    def limits(self):
        return TradingLimits(
            min_order_size=Decimal("0.01"),
            max_order_size=Decimal("1000"),
            min_notional=Decimal("100"),
            price_precision=Decimal("0.01"),
            size_precision=Decimal("0.01"),
        )

    def test_valid(self, limits):
        assert limits.validate_order(Decimal("10"), Decimal("148.50")) is None

    @pytest.mark.parametrize(
        "amount,price,fragment",
        [
            (Decimal("0.001"), None, "below minimum"),
            (Decimal("5000"), None, "above maximum"),
            (Decimal("1.005"), None, "not a multiple"),
            (Decimal("10"), Decimal("148.505"), "price"),
            (Decimal("0.5"), Decimal("100"), "notional"),
        ],
    )
    def test_violations(self, limits, amount, price, fragment):
        assert fragment in limits.validate_order(amount, price)


class TestOrderBook:
    """Test order book ordering and aggregates."""

    def make_book(self, bids, asks) -> OrderBook:
        return OrderBook(
            venue=VENUE_A,
            symbol="TKN/JPY",
            bids=[BookLevel(price=Decimal(p), amount=Decimal(a)) for p, a in bids],
            asks=[BookLevel(price=Decimal(p), amount=Decimal(a)) for p, a in asks],
            fetched_at=datetime.now(timezone.utc),
        )

    def test_aggregates(self):
        book = self.make_book([("148", "2"), ("147", "3")], [("149", "1"), ("150", "4")])
        assert book.best_bid == Decimal("148")
        assert book.best_ask == Decimal("149")
        assert book.mid_price == Decimal("148.5")
        assert book.spread == Decimal("1")
        assert book.bid_liquidity == Decimal("5")
        assert book.ask_liquidity == Decimal("5")
        assert book.bid_notional == Decimal("737")

    def test_unordered_bids_rejected(self):
        with pytest.raises(ValidationError):
            self.make_book([("147", "1"), ("148", "1")], [])

    def test_unordered_asks_rejected(self):
        with pytest.raises(ValidationError):
            self.make_book([], [("150", "1"), ("149", "1")])

    def test_empty_side(self):
        book = self.make_book([], [("149", "1")])
        assert book.best_bid is None
        assert book.mid_price is None
