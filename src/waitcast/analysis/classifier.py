"""
Per-record annotation of historical observations.

Every derived field degrades instead of failing: a record with a broken time
gets `wait_minutes = 0`, a broken date gets an empty weekday label. The history
list is display material, so one bad row must not hide the others.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from waitcast.core.time import parse_hhmm
from waitcast.domain.models import ClassifiedRecord, HistoricalRecord

# Sunday first; positions 0 and 6 are the weekend.
WEEKDAY_LABELS: tuple[str, ...] = ("周日", "周一", "周二", "周三", "周四", "周五", "周六")
_WEEKEND_POSITIONS = frozenset({0, len(WEEKDAY_LABELS) - 1})

HIGH_CONFIDENCE = "high"


def wait_minutes(planned_time: str | None, drawn_time: str | None) -> int:
    """Minutes between drawing a ticket and the planned visit, clamped at 0."""
    try:
        planned = parse_hhmm(planned_time or "")
        drawn = parse_hhmm(drawn_time or "")
    except ValueError:
        return 0
    return max(0, planned - drawn)


def weekday_info(value: str | None) -> tuple[str, bool]:
    """Return `(label, is_weekend)` for an ISO date string; `("", False)` if malformed."""
    try:
        d = date.fromisoformat(str(value or "").strip())
    except ValueError:
        return "", False
    position = d.isoweekday() % 7  # Mon=1..Sun=7 -> Sun=0..Sat=6
    return WEEKDAY_LABELS[position], position in _WEEKEND_POSITIONS


def classify(record: HistoricalRecord) -> ClassifiedRecord:
    label, is_weekend = weekday_info(record.date)
    return ClassifiedRecord(
        **record.model_dump(),
        wait_minutes=wait_minutes(record.planned_time, record.drawn_time),
        weekday_label=label,
        is_weekend=is_weekend,
    )


def classify_all(records: Iterable[HistoricalRecord]) -> list[ClassifiedRecord]:
    return [classify(r) for r in records]


def filter_high_confidence(records: Iterable[HistoricalRecord]) -> list[HistoricalRecord]:
    """Keep only records the backend tagged `high` confidence (used for point estimates)."""
    return [r for r in records if r.confidence == HIGH_CONFIDENCE]
