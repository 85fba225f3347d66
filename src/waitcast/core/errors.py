"""
Error taxonomy.

Backend failures are split by *where* they happened so the notice layer
(`waitcast.app.notices`) can decide how loudly to surface them:
- `TransportError`: the request never got a response.
- `ResponseError`: the backend answered with a failure (status or error envelope).
- `FormatError`: the backend answered "success" but the body is not what we expect.

Location failures (`PermissionDenied`, `LocationUnavailable`) never leave the geo
resolver; they only select the fallback region.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable `error_code` values sent by the backend."""

    STORE_CLOSED = "STORE_CLOSED"
    NO_QUEUE_NEEDED = "NO_QUEUE_NEEDED"
    CALCULATION_ERROR = "CALCULATION_ERROR"

    @classmethod
    def parse(cls, value: Any) -> "ErrorCode | None":
        if not value:
            return None
        try:
            return cls(str(value).strip())
        except ValueError:
            return None


class WaitcastError(Exception):
    """Base class for all errors raised by waitcast."""


class TransportError(WaitcastError):
    """The backend could not be reached at all (DNS, connect, timeout...)."""


class ResponseError(WaitcastError):
    """The backend returned a non-success status or an error envelope."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error_code: ErrorCode | None = None,
        raw_error_code: str | None = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        # Kept even when it is not one of the known `ErrorCode` values.
        self.raw_error_code = raw_error_code
        self.body = body


class FormatError(WaitcastError):
    """The backend returned success but the body lacks the expected fields."""


class PermissionDenied(WaitcastError):
    """Location permission was refused."""


class LocationUnavailable(WaitcastError):
    """The platform location service could not produce a coordinate."""


class DegenerateInputError(WaitcastError):
    """Zero usable records for a computation.

    The statistics and suggestion components never raise this; they return
    placeholder values instead (see `waitcast.analysis.statistics.aggregate`
    and `waitcast.analysis.suggestion.suggest`). It only completes the taxonomy
    for callers that want to signal the condition explicitly.
    """


class PlannedTimeRejected(ValueError):
    """A planned visit time is malformed or outside business hours."""

    def __init__(self, message: str, *, value: str | None = None):
        super().__init__(message)
        self.value = value
