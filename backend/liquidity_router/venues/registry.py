"""
Venue registry: one concrete client per venue, resolved once at startup.
"""

import logging
from typing import Iterator, Optional

from liquidity_router.config import Settings, VenueConfig, get_settings
from liquidity_router.models.venue import VenueIdentity
from liquidity_router.venues.base import VenueClient
from liquidity_router.venues.http import HttpVenueClient
from liquidity_router.venues.simulated import SimulatedVenueClient

logger = logging.getLogger(__name__)


class VenueRegistry:
    """
    Explicit mapping from venue identity to its client.

    A client may only be registered under its own identity, and a single
    client instance cannot back two venues. Iteration follows the
    ``VenueIdentity`` declaration order.
    """

    def __init__(self, clients: Optional[list[VenueClient]] = None):
        self._clients: dict[VenueIdentity, VenueClient] = {}
        for client in clients or []:
            self.register(client)

    def register(self, client: VenueClient) -> None:
        if client.venue in self._clients:
            raise ValueError(f"Venue already registered: {client.venue.value}")
        if any(existing is client for existing in self._clients.values()):
            raise ValueError(f"Client {client!r} is already bound to another venue")
        self._clients[client.venue] = client

    def get(self, venue: VenueIdentity) -> VenueClient:
        """
        Resolve the client for a venue.

        Raises:
            KeyError: If the venue was never registered
        """
        try:
            return self._clients[venue]
        except KeyError:
            raise KeyError(f"No client registered for venue: {venue.value}") from None

    def venues(self) -> list[VenueIdentity]:
        return sorted(self._clients, key=lambda v: v.rank)

    def items(self) -> list[tuple[VenueIdentity, VenueClient]]:
        return [(venue, self._clients[venue]) for venue in self.venues()]

    def __contains__(self, venue: object) -> bool:
        return venue in self._clients

    def __iter__(self) -> Iterator[VenueIdentity]:
        return iter(self.venues())

    def __len__(self) -> int:
        return len(self._clients)

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.aclose()


def build_registry(settings: Optional[Settings] = None) -> VenueRegistry:
    """
    Build the registry for all enabled venues.

    Venues with a configured API URL get an HttpVenueClient; the rest are
    simulated, each with its own random source derived from the seed.

    Raises:
        ValueError: If an enabled venue id is not recognized
    """
    settings = settings or get_settings()
    registry = VenueRegistry()

    for index, venue_id in enumerate(settings.ENABLED_VENUES):
        config = VenueConfig.get_venue(venue_id)
        if config is None:
            raise ValueError(f"Unknown venue in ENABLED_VENUES: {venue_id}")
        venue = VenueIdentity(venue_id)

        api_url = settings.venue_api_url(venue_id)
        if api_url:
            client: VenueClient = HttpVenueClient(
                venue=venue,
                base_url=api_url,
                fee_rate=config["fee_rate"],
                api_key=settings.VENUE_API_KEYS.get(venue_id, ""),
                timeout=settings.VENUE_TIMEOUT_S,
            )
        else:
            seed = None if settings.SIMULATION_SEED is None else settings.SIMULATION_SEED + index
            client = SimulatedVenueClient(
                venue=venue,
                fee_rate=config["fee_rate"],
                base_price=config["base_price"],
                seed=seed,
            )
        registry.register(client)
        logger.info("Registered %s for %s", client.adapter_name, venue.display_name)

    return registry
