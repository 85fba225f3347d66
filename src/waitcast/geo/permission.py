"""
Location-permission state machine.

The platform keeps the authoritative permission decision; we only read a snapshot
of it (`permission_status`) and, at most once, ask for it (`authorize`).

States and transitions:
- UNASKED -> GRANTED | DENIED   (the single prompt issued by `request_silently`)
- any snapshot change           (re-reading the platform; this is how a user who
                                 flipped the setting out-of-band becomes GRANTED)

A user who actively dismissed the prompt (DENIED) is never prompted again.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from waitcast.domain.models import Coordinate

logger = logging.getLogger(__name__)


class PermissionState(str, Enum):
    UNASKED = "unasked"
    GRANTED = "granted"
    DENIED = "denied"

    @classmethod
    def from_snapshot(cls, value: bool | None) -> "PermissionState":
        if value is None:
            return cls.UNASKED
        return cls.GRANTED if value else cls.DENIED


class PermissionStateError(RuntimeError):
    """Raised when an invalid permission transition is attempted."""


class LocationPlatform(Protocol):
    """What the host platform must provide for location-based region selection."""

    async def permission_status(self) -> bool | None:
        """Return True/False for a recorded decision, None if never asked (no prompt)."""

    async def authorize(self) -> bool:
        """Prompt the user once and return their decision."""

    async def current_location(self) -> Coordinate:
        """Return the device coordinate.

        Raises:
            PermissionDenied: If the location service refuses.
            LocationUnavailable: If no coordinate can be produced.
        """


_ALLOWED_PROMPT_TRANSITIONS: dict[PermissionState, set[PermissionState]] = {
    PermissionState.UNASKED: {PermissionState.GRANTED, PermissionState.DENIED},
    PermissionState.GRANTED: set(),
    PermissionState.DENIED: set(),
}


class PermissionGate:
    """Mediates one-time, non-repetitive location-permission acquisition."""

    def __init__(self, platform: LocationPlatform):
        self._platform = platform
        self._state = PermissionState.UNASKED
        self.prompts_issued = 0

    @property
    def state(self) -> PermissionState:
        return self._state

    def _transition(self, new_state: PermissionState) -> None:
        if new_state not in _ALLOWED_PROMPT_TRANSITIONS[self._state]:
            raise PermissionStateError(f"Cannot transition permission from {self._state.value} to {new_state.value}")
        self._state = new_state

    async def check_silently(self) -> PermissionState:
        """Read the platform snapshot without prompting."""
        self._state = PermissionState.from_snapshot(await self._platform.permission_status())
        return self._state

    async def request_silently(self) -> bool:
        """Return whether location may be used, prompting only if never asked before."""
        state = await self.check_silently()
        if state is PermissionState.GRANTED:
            return True
        if state is PermissionState.DENIED:
            logger.info("Location permission previously denied; not prompting again")
            return False

        self.prompts_issued += 1
        granted = bool(await self._platform.authorize())
        self._transition(PermissionState.GRANTED if granted else PermissionState.DENIED)
        logger.info("Location permission %s", self._state.value)
        return granted
