"""
Liquidity Router - FastAPI Application

Routes buy/sell liquidity operations to the best of several trading venues
and watches cross-venue prices for arbitrage.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from liquidity_router.api.routes import router
from liquidity_router.config import get_settings
from liquidity_router.services.router import close_liquidity_router, get_liquidity_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging once for the service."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)

    liquidity_router = get_liquidity_router()
    for venue, client in liquidity_router.registry.items():
        logger.info("Venue %s served by %s", venue.display_name, client.adapter_name)

    yield

    # Shutdown
    await close_liquidity_router()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
## Liquidity Router

Decides which trading venue executes a buy or sell in a token pair,
dispatches a single market order there, and reports the result.

### Features

- **Concurrent Venue Metrics**: Best bid/ask, liquidity, fees and latency per venue
- **Swappable Selection Strategies**: Cost score, latency, liquidity weighted
- **Single Dispatch**: At most one order per operation, never retried
- **Arbitrage Scan**: Cross-venue price dispersion above a profit threshold

### Default Cost Score

```
score = (best_ask - best_bid) + fee_rate + latency_ms / 1000
```
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routes
    app.include_router(router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("liquidity_router.main:app", host="0.0.0.0", port=8000, reload=True)
