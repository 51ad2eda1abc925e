"""
Abstract base class for venue clients.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import AsyncIterator, Optional

from liquidity_router.models.operation import OrderResult
from liquidity_router.models.venue import (
    Balance,
    ComplianceStatus,
    OrderBook,
    OrderSide,
    OrderStatus,
    Trade,
    TradingLimits,
    VenueIdentity,
)


class VenueClient(ABC):
    """
    Capability interface every exchange adapter implements.

    All venue clients must implement:
    1. Quoting - get_current_price(), get_order_book()
    2. Ordering - place_market_order(), place_limit_order(),
       cancel_order(), get_order_status()
    3. Account - get_balance(), get_trade_history()
    4. Risk - get_trading_limits(), get_compliance_status()

    Error contract:
    - get_current_price() never raises on transient failure, it returns
      Decimal("0") so callers can keep evaluating other venues
    - order methods report rejections through OrderResult, never raise
      for venue-side refusals
    - metadata queries may raise VenueUnavailable
    """

    def __init__(self, venue: VenueIdentity, fee_rate: Decimal = Decimal("0")):
        if fee_rate < 0:
            raise ValueError(f"fee_rate must be non-negative, got {fee_rate}")
        self.venue = venue
        self.fee_rate = fee_rate

    @property
    def adapter_name(self) -> str:
        """Short adapter label for diagnostics."""
        return type(self).__name__

    @abstractmethod
    async def get_current_price(self, symbol: str, quote_currency: str) -> Decimal:
        """
        Best-effort mid/last price.

        Returns:
            The price, or Decimal("0") when the venue could not be reached
        """
        pass

    @abstractmethod
    async def place_market_order(
        self,
        symbol: str,
        amount: Decimal,
        side: OrderSide,
    ) -> OrderResult:
        """Execute immediately at the prevailing price."""
        pass

    @abstractmethod
    async def place_limit_order(
        self,
        symbol: str,
        amount: Decimal,
        price: Decimal,
        side: OrderSide,
    ) -> OrderResult:
        """
        Place a limit order.

        An order that cannot match immediately is still a success, with
        status PENDING and nothing executed.
        """
        pass

    @abstractmethod
    async def cancel_order(self, order_id: str) -> bool:
        pass

    @abstractmethod
    async def get_order_status(self, order_id: str) -> OrderStatus:
        pass

    @abstractmethod
    async def get_balance(self, asset: str) -> Balance:
        pass

    @abstractmethod
    def get_trade_history(
        self,
        symbol: str,
        since: Optional[datetime] = None,
    ) -> AsyncIterator[Trade]:
        """
        Lazily iterate trades executed after ``since``.

        The iterator is finite; resume by calling again with a later ``since``.
        """
        pass

    @abstractmethod
    async def get_order_book(self, symbol: str, depth: int = 10) -> OrderBook:
        pass

    @abstractmethod
    async def get_trading_limits(self) -> TradingLimits:
        pass

    @abstractmethod
    async def get_compliance_status(self) -> ComplianceStatus:
        pass

    async def aclose(self) -> None:
        """Release network resources."""
        return None

    def __repr__(self) -> str:
        return f"{self.adapter_name}(venue={self.venue.value})"
