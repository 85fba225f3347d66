"""
Default-region resolution.

Three sequential steps, each of which can only succeed or hand over to the
fallback:
1. permission (`PermissionGate.request_silently`)
2. device coordinate (`LocationPlatform.current_location`)
3. nearest supported city (`CityIndex.nearest`)

There is no retry and no de-duplication: every call runs all three steps again.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from waitcast.core.errors import LocationUnavailable, PermissionDenied
from waitcast.domain.models import ResolvedRegion
from waitcast.geo.cities import CityIndex
from waitcast.geo.permission import LocationPlatform, PermissionGate

logger = logging.getLogger(__name__)


def fallback_region(supported_regions: Sequence[str], configured_fallback: str | None) -> ResolvedRegion:
    """Return the configured fallback if the backend supports it, else no selection."""
    if configured_fallback and configured_fallback in supported_regions:
        return ResolvedRegion(name=configured_fallback, source="fallback")
    return ResolvedRegion(name=None, source="none")


class GeoResolver:
    def __init__(self, platform: LocationPlatform, *, gate: PermissionGate | None = None, index: CityIndex | None = None):
        self._platform = platform
        self._gate = gate or PermissionGate(platform)
        self._index = index or CityIndex()

    @property
    def gate(self) -> PermissionGate:
        return self._gate

    async def resolve_default_region(
        self, supported_regions: Sequence[str], configured_fallback: str | None
    ) -> ResolvedRegion:
        """Pick the supported region nearest to the user, or the fallback."""
        supported = list(supported_regions)

        if not await self._gate.request_silently():
            logger.info("No location permission; using fallback region")
            return fallback_region(supported, configured_fallback)

        try:
            coordinate = await self._platform.current_location()
        except (PermissionDenied, LocationUnavailable) as e:
            logger.warning("Location unavailable (%s); using fallback region", e)
            return fallback_region(supported, configured_fallback)

        found = self._index.nearest(coordinate, supported)
        if found is None:
            logger.info("No supported region has known coordinates; using fallback region")
            return fallback_region(supported, configured_fallback)

        name, distance_km = found
        logger.info("Nearest region: %s (%.2f km)", name, distance_km)
        return ResolvedRegion(name=name, source="located", distance_km=distance_km)
