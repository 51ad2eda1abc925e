"""Data models for the Liquidity Router."""

from liquidity_router.models.operation import (
    ArbitrageOpportunity,
    LiquidityOperation,
    LiquidityResult,
    MetricsSnapshot,
    OperationType,
    OrderResult,
    StrategyType,
    VenueInfo,
    split_symbol,
)
from liquidity_router.models.venue import (
    UNAVAILABLE_LATENCY_MS,
    Balance,
    BookLevel,
    ComplianceStatus,
    OrderBook,
    OrderSide,
    OrderStatus,
    Trade,
    TradingLimits,
    VenueIdentity,
    VenueMetrics,
)

__all__ = [
    "UNAVAILABLE_LATENCY_MS",
    "ArbitrageOpportunity",
    "Balance",
    "BookLevel",
    "ComplianceStatus",
    "LiquidityOperation",
    "LiquidityResult",
    "MetricsSnapshot",
    "OperationType",
    "OrderBook",
    "OrderResult",
    "OrderSide",
    "OrderStatus",
    "StrategyType",
    "Trade",
    "TradingLimits",
    "VenueIdentity",
    "VenueInfo",
    "VenueMetrics",
    "split_symbol",
]
