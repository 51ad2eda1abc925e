"""
Configuration management for the Liquidity Router.
Uses Pydantic Settings for environment variable parsing and validation.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    APP_NAME: str = "Liquidity Router"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Venue registry
    ENABLED_VENUES: list[str] = ["bitbank", "coincheck", "binance"]
    SIMULATION_SEED: Optional[int] = None  # None = nondeterministic demo prices
    VENUE_API_URLS: dict[str, str] = {}  # venue id -> REST base URL
    VENUE_API_KEYS: dict[str, str] = {}

    # Metrics collection
    VENUE_TIMEOUT_S: float = 2.0
    COLLECT_MAX_CONCURRENCY: int = 8
    COLLECT_ORDER_BOOK: bool = True
    ORDER_BOOK_DEPTH: int = 5
    SYNTHETIC_HALF_SPREAD: Decimal = Decimal("0.5")
    DEFAULT_LIQUIDITY_BASE: Decimal = Decimal("10000")
    DEFAULT_LIQUIDITY_QUOTE: Decimal = Decimal("1500000")

    # Routing
    EXECUTE_DEADLINE_S: float = 10.0
    SELECTION_STRATEGY: str = "cost_score"

    # Arbitrage
    ARBITRAGE_MIN_PROFIT_RATE: Decimal = Decimal("0.01")  # 1%
    ARBITRAGE_MAX_SPREAD_RATE: Decimal = Decimal("0.10")  # above this the quote is assumed stale
    ARBITRAGE_ROUND_TRIP_FEE_RATE: Decimal = Decimal("0")

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    def venue_api_url(self, venue_id: str) -> Optional[str]:
        """REST base URL for a venue, if one is configured."""
        return self.VENUE_API_URLS.get(venue_id)


class VenueConfig:
    """
    Trading venue configuration.

    Fee rates are fractions of notional (0.001 = 0.1%).
    Base prices seed the simulated venues used when no API URL is configured.
    """

    VENUES = {
        "bitbank": {
            "name": "Bitbank",
            "region": "JP",
            "fee_rate": Decimal("0.0012"),
            "base_price": Decimal("148.50"),
        },
        "coincheck": {
            "name": "Coincheck",
            "region": "JP",
            "fee_rate": Decimal("0.0010"),
            "base_price": Decimal("148.80"),
        },
        "bitflyer": {
            "name": "bitFlyer",
            "region": "JP",
            "fee_rate": Decimal("0.0015"),
            "base_price": Decimal("148.20"),
        },
        "gmo_coin": {
            "name": "GMO Coin",
            "region": "JP",
            "fee_rate": Decimal("0.0005"),
            "base_price": Decimal("148.60"),
        },
        "binance": {
            "name": "Binance",
            "region": "GLOBAL",
            "fee_rate": Decimal("0.0010"),
            "base_price": Decimal("149.10"),
        },
        "bybit": {
            "name": "Bybit",
            "region": "GLOBAL",
            "fee_rate": Decimal("0.0010"),
            "base_price": Decimal("149.00"),
        },
        "okx": {
            "name": "OKX",
            "region": "GLOBAL",
            "fee_rate": Decimal("0.0008"),
            "base_price": Decimal("148.90"),
        },
        "mock": {
            "name": "Mock Exchange",
            "region": "TEST",
            "fee_rate": Decimal("0.0010"),
            "base_price": Decimal("148.50"),
        },
    }

    @classmethod
    def get_venue(cls, venue_id: str) -> Optional[dict]:
        """Get venue configuration by ID."""
        return cls.VENUES.get(venue_id)

    @classmethod
    def get_region_venues(cls, region: str) -> dict:
        """Get venues located in one region."""
        return {k: v for k, v in cls.VENUES.items() if v["region"] == region}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
