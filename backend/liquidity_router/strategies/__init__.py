"""
Venue selection strategies.

A strategy maps a metrics snapshot and an operation to exactly one venue.
The router depends only on select_venue(), so strategies are swappable:

- Cost Score (default): spread + fee rate + latency seconds
- Latency: fastest venue
- Liquidity Weighted: cost score among venues deep enough for the order
"""

from typing import Type

from liquidity_router.models.operation import StrategyType
from liquidity_router.strategies.base import BaseSelectionStrategy
from liquidity_router.strategies.cost_score import CostScoreStrategy, cost_score
from liquidity_router.strategies.latency import LatencyStrategy
from liquidity_router.strategies.liquidity import LiquidityWeightedStrategy


# Registry of available strategies
STRATEGY_REGISTRY: dict[StrategyType, Type[BaseSelectionStrategy]] = {
    StrategyType.COST_SCORE: CostScoreStrategy,
    StrategyType.LATENCY: LatencyStrategy,
    StrategyType.LIQUIDITY: LiquidityWeightedStrategy,
}


def get_strategy(strategy_type: StrategyType, **kwargs) -> BaseSelectionStrategy:
    """
    Factory function to get a strategy instance.

    Args:
        strategy_type: Type of strategy to instantiate
        **kwargs: Strategy-specific parameters

    Returns:
        Configured strategy instance

    Raises:
        ValueError: If strategy type is not recognized
    """
    try:
        strategy_type = StrategyType(strategy_type)
    except ValueError:
        raise ValueError(f"Unknown strategy type: {strategy_type}") from None

    strategy_class = STRATEGY_REGISTRY[strategy_type]
    return strategy_class(**kwargs)


def get_strategy_info() -> list[dict]:
    """
    Get information about all available strategies.

    Returns:
        List of strategy info dictionaries
    """
    return [
        {"type": strategy_type.value, "name": strategy_class().name}
        for strategy_type, strategy_class in STRATEGY_REGISTRY.items()
    ]


__all__ = [
    "BaseSelectionStrategy",
    "CostScoreStrategy",
    "LatencyStrategy",
    "LiquidityWeightedStrategy",
    "STRATEGY_REGISTRY",
    "cost_score",
    "get_strategy",
    "get_strategy_info",
]
