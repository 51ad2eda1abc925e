"""Services for the Liquidity Router."""

from liquidity_router.services.arbitrage import ArbitrageAnalyzer
from liquidity_router.services.metrics import MetricsCollector
from liquidity_router.services.router import (
    LiquidityRouter,
    close_liquidity_router,
    get_liquidity_router,
)

__all__ = [
    "ArbitrageAnalyzer",
    "LiquidityRouter",
    "MetricsCollector",
    "close_liquidity_router",
    "get_liquidity_router",
]
