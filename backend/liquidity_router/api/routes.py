"""
API routes for the Liquidity Router.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from liquidity_router.config import VenueConfig
from liquidity_router.models.operation import (
    ArbitrageOpportunity,
    LiquidityOperation,
    LiquidityResult,
    MetricsSnapshot,
    VenueInfo,
)
from liquidity_router.models.venue import VenueIdentity
from liquidity_router.services.router import LiquidityRouter, get_liquidity_router
from liquidity_router.strategies import get_strategy_info

router = APIRouter(prefix="/api/v1", tags=["liquidity"])


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "liquidity-router"}


@router.get("/strategies", response_model=list[dict])
async def list_strategies():
    """List the available venue selection strategies."""
    return get_strategy_info()


@router.get("/venues", response_model=list[VenueInfo])
async def list_venues(
    region: Optional[str] = Query(default=None, description="Only venues in this region, e.g. 'JP'"),
    liquidity_router: LiquidityRouter = Depends(get_liquidity_router),
):
    """
    List the registered trading venues.

    Returns venue name, region, fee rate and the adapter serving it.
    """
    in_region = set(VenueConfig.get_region_venues(region.upper())) if region else None
    venues = []
    for venue, client in liquidity_router.registry.items():
        if in_region is not None and venue.value not in in_region:
            continue
        config = VenueConfig.get_venue(venue.value)
        venues.append(VenueInfo(
            id=venue,
            name=config["name"],
            region=config["region"],
            fee_rate=client.fee_rate,
            adapter=client.adapter_name,
        ))
    return venues


@router.get("/metrics", response_model=MetricsSnapshot)
async def get_metrics(
    symbol: str = Query(description="Trading pair, e.g. 'TKN/JPY'"),
    liquidity_router: LiquidityRouter = Depends(get_liquidity_router),
):
    """
    Collect a fresh metrics snapshot from every venue.

    Venues that fail or time out are listed with trading_allowed=false.
    """
    symbol = symbol.upper().strip()
    metrics = await liquidity_router.collect_metrics(symbol)
    return MetricsSnapshot(symbol=symbol, venues=list(metrics.values()))


@router.get("/prices")
async def get_prices(
    symbol: str = Query(description="Trading pair, e.g. 'TKN/JPY'"),
    liquidity_router: LiquidityRouter = Depends(get_liquidity_router),
):
    """Current price per venue. Venues that could not quote are omitted."""
    symbol = symbol.upper().strip()
    prices = await liquidity_router.collector.collect_prices(symbol)
    return {"symbol": symbol, "prices": {venue.value: str(price) for venue, price in prices.items()}}


@router.get("/arbitrage", response_model=Optional[ArbitrageOpportunity])
async def scan_arbitrage(
    symbol: str = Query(description="Trading pair, e.g. 'TKN/JPY'"),
    liquidity_router: LiquidityRouter = Depends(get_liquidity_router),
):
    """
    Look for a cross-venue arbitrage opportunity.

    Returns null when no spread clears the configured threshold.
    """
    return await liquidity_router.scan_arbitrage(symbol.upper().strip())


@router.post("/liquidity", response_model=LiquidityResult)
async def execute_liquidity_operation(
    operation: LiquidityOperation,
    liquidity_router: LiquidityRouter = Depends(get_liquidity_router),
):
    """
    Execute a liquidity operation on the best venue.

    Given an operation (type, symbol, amount), this endpoint:
    1. Collects metrics from every venue
    2. Selects the single best eligible venue
    3. Dispatches one market order to it
    4. Returns the execution audit record

    Failed outcomes (no eligible venue, rejected order, unsupported
    operation) are returned with success=false rather than as HTTP errors.
    """
    return await liquidity_router.execute(operation)


@router.get("/venues/{venue_id}/balance/{asset}")
async def get_venue_balance(
    venue_id: VenueIdentity,
    asset: str,
    liquidity_router: LiquidityRouter = Depends(get_liquidity_router),
):
    """Balance of one asset on one venue."""
    if venue_id not in liquidity_router.registry:
        raise HTTPException(status_code=404, detail=f"Venue not registered: {venue_id.value}")
    try:
        return await liquidity_router.registry.get(venue_id).get_balance(asset.upper())
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Balance query failed: {str(e)}")
