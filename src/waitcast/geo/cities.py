"""
City coordinate table used for "which supported region am I in?".

The table lives in the packaged `cities.json` data file and is loaded once into a
read-only mapping. Names match the region names the backend returns (e.g. "杭州").
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from functools import lru_cache
from importlib import resources
from types import MappingProxyType

from pydantic import TypeAdapter

from waitcast.core.geo import haversine_km
from waitcast.domain.models import Coordinate, RegionEntry

logger = logging.getLogger(__name__)

_REGION_ENTRIES_ADAPTER = TypeAdapter(list[RegionEntry])


@lru_cache
def load_city_coordinates() -> Mapping[str, Coordinate]:
    """Load the packaged city table (cached, immutable)."""
    text = resources.files("waitcast.geo").joinpath("cities.json").read_text(encoding="utf-8")
    entries = _REGION_ENTRIES_ADAPTER.validate_python(json.loads(text))
    return MappingProxyType({e.name: e.coordinate for e in entries})


class CityIndex:
    """Nearest-match lookup over a fixed name -> coordinate table."""

    def __init__(self, coordinates: Mapping[str, Coordinate] | None = None):
        self._coordinates = coordinates if coordinates is not None else load_city_coordinates()

    def names(self) -> list[str]:
        return list(self._coordinates)

    def coordinate_of(self, name: str) -> Coordinate | None:
        return self._coordinates.get(name)

    def nearest(self, user: Coordinate, candidates: Iterable[str]) -> tuple[str, float] | None:
        """Return `(name, distance_km)` of the closest known candidate, or None.

        Candidates without a table entry are skipped. On an exact distance tie the
        first candidate in iteration order wins.
        """
        best: tuple[str, float] | None = None
        for name in candidates:
            coord = self._coordinates.get(name)
            if coord is None:
                continue
            distance = haversine_km(user, coord)
            if best is None or distance < best[1]:
                best = (name, distance)
        return best

    def nearest_match(self, user: Coordinate, candidates: Iterable[str]) -> str | None:
        """Return the name of the closest known candidate, or None."""
        found = self.nearest(user, candidates)
        if found is None:
            return None
        logger.debug("Nearest region: %s (%.2f km)", found[0], found[1])
        return found[0]
