"""
Generic REST venue adapter.

Talks to a venue gateway exposing a small JSON API:

    GET    /v1/ticker?symbol=&quote=        {"price": "148.50"}
    POST   /v1/orders                       {"order_id", "status", "executed_amount", "avg_price"}
    GET    /v1/orders/{id}                  {"status"}
    DELETE /v1/orders/{id}                  {"cancelled": true}
    GET    /v1/balances/{asset}             {"free", "locked"}
    GET    /v1/trades?symbol=&since=&cursor= {"trades": [...], "next_cursor"}
    GET    /v1/orderbook?symbol=&depth=     {"bids": [[p, a]], "asks": [[p, a]]}
    GET    /v1/limits                       TradingLimits fields
    GET    /v1/status                       ComplianceStatus fields

Decimal values travel as strings to avoid binary floating point.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, AsyncIterator, Optional

import httpx

from liquidity_router.exceptions import VenueUnavailable
from liquidity_router.models.operation import OrderResult
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


def _decimal(value: Any, default: str = "0") -> Decimal:
    if value is None:
        return Decimal(default)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a decimal value: {value!r}") from None


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)


class HttpVenueClient(VenueClient):
    """
    Venue client backed by ``httpx.AsyncClient``.

    A transport error on an order call leaves the order state unknown; it
    is reported as a FAILED result and never retried here.
    """

    def __init__(
        self,
        venue: VenueIdentity,
        base_url: str,
        fee_rate: Decimal = Decimal("0"),
        api_key: str = "",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(venue, fee_rate)
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def headers(self) -> dict:
        """API authentication headers."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-API-KEY"] = self.api_key
        return headers

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_json(self, path: str, params: Optional[dict] = None) -> Any:
        client = await self.get_client()
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise VenueUnavailable(self.venue, f"HTTP {e.response.status_code} on {path}") from e
        except httpx.HTTPError as e:
            raise VenueUnavailable(self.venue, f"{type(e).__name__} on {path}") from e

    async def get_current_price(self, symbol: str, quote_currency: str) -> Decimal:
        try:
            data = await self._get_json("/v1/ticker", {"symbol": symbol, "quote": quote_currency})
            return _decimal(data.get("price"))
        except (VenueUnavailable, ValueError, AttributeError) as e:
            logger.warning("Price query failed on %s: %s", self.venue.value, e)
            return Decimal("0")

    async def _submit_order(self, payload: dict, side: OrderSide, amount: Decimal) -> OrderResult:
        symbol = payload["symbol"]
        client = await self.get_client()
        try:
            response = await client.post("/v1/orders", json=payload)
        except httpx.HTTPError as e:
            logger.error("Order submission to %s failed: %s", self.venue.value, e)
            return OrderResult.failure(
                f"order state unknown: {type(e).__name__}",
                venue=self.venue,
                symbol=symbol,
                side=side,
                requested_amount=amount,
                status=OrderStatus.FAILED,
            )

        if response.status_code >= 400:
            return OrderResult.failure(
                _error_text(response),
                venue=self.venue,
                symbol=symbol,
                side=side,
                requested_amount=amount,
                raw_venue_response=response.text,
            )

        try:
            data = response.json()
            status = OrderStatus(data.get("status", OrderStatus.SUBMITTED.value))
            refused = status.is_failure or status in (OrderStatus.CANCELLED, OrderStatus.EXPIRED)
            order_id = None if refused else str(data["order_id"])
            executed_amount = _decimal(data.get("executed_amount"))
            avg_price = _decimal(data.get("avg_price"))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            # The venue accepted the request, so the order may exist
            logger.error("Unparseable order response from %s: %s", self.venue.value, e)
            return OrderResult.failure(
                "order state unknown: unparseable response",
                venue=self.venue,
                symbol=symbol,
                side=side,
                requested_amount=amount,
                status=OrderStatus.FAILED,
                raw_venue_response=response.text,
            )
        if refused:
            return OrderResult.failure(
                data.get("error") or status.value,
                venue=self.venue,
                symbol=symbol,
                side=side,
                requested_amount=amount,
                status=status,
                raw_venue_response=response.text,
            )
        if status in (OrderStatus.PENDING, OrderStatus.SUBMITTED):
            return OrderResult.pending(
                venue=self.venue,
                order_id=order_id,
                symbol=symbol,
                side=side,
                requested_amount=amount,
                raw_venue_response=response.text,
            )
        return OrderResult.filled(
            venue=self.venue,
            order_id=order_id,
            symbol=symbol,
            side=side,
            requested_amount=amount,
            executed_amount=executed_amount,
            price=avg_price,
            raw_venue_response=response.text,
        )

    async def place_market_order(
        self,
        symbol: str,
        amount: Decimal,
        side: OrderSide,
    ) -> OrderResult:
        payload = {
            "symbol": symbol,
            "side": side.value,
            "type": "market",
            "amount": str(amount),
        }
        return await self._submit_order(payload, side, amount)

    async def place_limit_order(
        self,
        symbol: str,
        amount: Decimal,
        price: Decimal,
        side: OrderSide,
    ) -> OrderResult:
        payload = {
            "symbol": symbol,
            "side": side.value,
            "type": "limit",
            "amount": str(amount),
            "price": str(price),
        }
        return await self._submit_order(payload, side, amount)

    async def cancel_order(self, order_id: str) -> bool:
        client = await self.get_client()
        try:
            response = await client.delete(f"/v1/orders/{order_id}")
        except httpx.HTTPError as e:
            raise VenueUnavailable(self.venue, f"{type(e).__name__} cancelling {order_id}") from e
        if response.status_code == 404:
            return False
        response.raise_for_status()
        return bool(response.json().get("cancelled", False))

    async def get_order_status(self, order_id: str) -> OrderStatus:
        data = await self._get_json(f"/v1/orders/{order_id}")
        return OrderStatus(data["status"])

    async def get_balance(self, asset: str) -> Balance:
        data = await self._get_json(f"/v1/balances/{asset}")
        return Balance(
            asset=asset,
            free=_decimal(data.get("free")),
            locked=_decimal(data.get("locked")),
        )

    async def get_trade_history(
        self,
        symbol: str,
        since: Optional[datetime] = None,
    ) -> AsyncIterator[Trade]:
        params = {"symbol": symbol}
        if since is not None:
            params["since"] = since.isoformat()
        cursor = None
        while True:
            if cursor:
                params["cursor"] = cursor
            page = await self._get_json("/v1/trades", params)
            for raw in page.get("trades", []):
                yield Trade(
                    trade_id=str(raw["trade_id"]),
                    order_id=str(raw["order_id"]),
                    venue=self.venue,
                    symbol=raw.get("symbol", symbol),
                    side=OrderSide(raw["side"]),
                    amount=_decimal(raw["amount"]),
                    price=_decimal(raw["price"]),
                    fee=_decimal(raw.get("fee")),
                    fee_currency=raw.get("fee_currency"),
                    timestamp=datetime.fromisoformat(raw["timestamp"]),
                )
            cursor = page.get("next_cursor")
            if not cursor:
                break

    async def get_order_book(self, symbol: str, depth: int = 10) -> OrderBook:
        data = await self._get_json("/v1/orderbook", {"symbol": symbol, "depth": depth})
        return OrderBook(
            venue=self.venue,
            symbol=symbol,
            bids=[BookLevel(price=_decimal(p), amount=_decimal(a)) for p, a in data.get("bids", [])[:depth]],
            asks=[BookLevel(price=_decimal(p), amount=_decimal(a)) for p, a in data.get("asks", [])[:depth]],
            fetched_at=datetime.now(timezone.utc),
        )

    async def get_trading_limits(self) -> TradingLimits:
        data = await self._get_json("/v1/limits")
        return TradingLimits(
            min_order_size=_decimal(data["min_order_size"]),
            max_order_size=_decimal(data["max_order_size"]),
            min_notional=_decimal(data.get("min_notional")),
            price_precision=_decimal(data["price_precision"]),
            size_precision=_decimal(data["size_precision"]),
        )

    async def get_compliance_status(self) -> ComplianceStatus:
        data = await self._get_json("/v1/status")
        return ComplianceStatus(
            api_healthy=bool(data.get("api_healthy", False)),
            trading_allowed=bool(data.get("trading_allowed", False)),
            withdrawal_allowed=bool(data.get("withdrawal_allowed", False)),
            jurisdiction_note=data.get("jurisdiction_note"),
            last_checked_iso=data.get("last_checked_iso") or datetime.now(timezone.utc).isoformat(),
        )
