"""
Command-line implementation of `LocationPlatform`.

- The permission decision is stored in the same JSON state file as the selection,
  so a "no" survives across runs (and `waitcast locate --allow` / `--forget`
  plays the role of the platform settings screen).
- The coordinate comes from `--lat/--lon`; there is no device GPS on a terminal.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from waitcast.core.errors import LocationUnavailable, PermissionDenied
from waitcast.core.storage import JsonKeyValueStore
from waitcast.domain.models import Coordinate

PERMISSION_KEY = "location_permission"

PROMPT = "Use your location to pick the nearest region? [y/N] "


class CliLocationPlatform:
    def __init__(
        self,
        state: JsonKeyValueStore,
        *,
        coordinate: Coordinate | None = None,
        interactive: bool = True,
        prompt: Callable[[str], str] = input,
    ):
        self._state = state
        self._coordinate = coordinate
        self._interactive = interactive
        self._prompt = prompt

    def set_permission(self, value: bool | None) -> None:
        """Out-of-band settings change (None forgets the decision)."""
        self._state.set(PERMISSION_KEY, value)

    async def permission_status(self) -> bool | None:
        value = self._state.get(PERMISSION_KEY)
        return value if isinstance(value, bool) else None

    async def authorize(self) -> bool:
        if not self._interactive:
            # Nobody to ask; leave the decision unrecorded so a later interactive run can prompt.
            return False
        try:
            answer = await asyncio.to_thread(self._prompt, PROMPT)
        except EOFError:
            return False
        granted = answer.strip().lower() in {"y", "yes"}
        self._state.set(PERMISSION_KEY, granted)
        return granted

    async def current_location(self) -> Coordinate:
        if await self.permission_status() is not True:
            raise PermissionDenied("Location permission not granted")
        if self._coordinate is None:
            raise LocationUnavailable("No coordinate available; pass --lat and --lon")
        return self._coordinate
