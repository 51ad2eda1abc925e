"""
Venue clients.

Every exchange is reached through the VenueClient capability interface:

- SimulatedVenueClient: seedable random-walk venue for demos and tests
- HttpVenueClient: JSON REST adapter over httpx

VenueRegistry binds exactly one client to each configured venue.
"""

from liquidity_router.venues.base import VenueClient
from liquidity_router.venues.http import HttpVenueClient
from liquidity_router.venues.registry import VenueRegistry, build_registry
from liquidity_router.venues.simulated import SimulatedVenueClient

__all__ = [
    "VenueClient",
    "HttpVenueClient",
    "SimulatedVenueClient",
    "VenueRegistry",
    "build_registry",
]
