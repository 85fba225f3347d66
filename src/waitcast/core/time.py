"""
Clock-time parsing and formatting.

Everything the analysis layer compares is a wall-clock time of day in `HH:MM`
(24-hour). Internally we work in minutes since midnight and format back to a
zero-padded string on output, so `9:05` and `09:05` compare and render the same.
"""

from __future__ import annotations

import math
import re

from waitcast.core.errors import PlannedTimeRejected

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> int:
    """Parse `H:MM` / `HH:MM` into minutes since midnight.

    Raises:
        ValueError: If the string is not a valid 24-hour clock time.
    """
    m = _HHMM_RE.match(str(value))
    if not m:
        raise ValueError(f"Invalid clock time {value!r}; expected HH:MM")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid clock time {value!r}; out of range")
    return hours * 60 + minutes


def format_hhmm(minutes: int) -> str:
    """Format minutes since midnight as zero-padded `HH:MM`."""
    minutes = int(minutes) % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_hhmm(value: str) -> str:
    """Return `value` re-formatted as zero-padded `HH:MM` (raises on malformed input)."""
    return format_hhmm(parse_hhmm(value))


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (12.5 -> 13)."""
    return int(math.floor(float(x) + 0.5))


def ensure_within_window(value: str, *, open_time: str, close_time: str) -> str:
    """Validate a planned time against an inclusive `[open_time, close_time]` window.

    Returns the normalized `HH:MM` string.

    Raises:
        PlannedTimeRejected: If `value` is malformed or outside the window.
    """
    try:
        minutes = parse_hhmm(value)
    except ValueError as e:
        raise PlannedTimeRejected(str(e), value=value) from e

    start = parse_hhmm(open_time)
    end = parse_hhmm(close_time)
    if not (start <= minutes <= end):
        raise PlannedTimeRejected(
            f"Planned time {format_hhmm(minutes)} is outside business hours "
            f"({format_hhmm(start)}-{format_hhmm(end)})",
            value=value,
        )
    return format_hhmm(minutes)
