"""
Draw-time point estimates.

Input is the *high-confidence* subset of historical records. The weekday/weekend
means shown next to these estimates come from the backend's own aggregate over
all records (`DiningStatistics`) and are merged in unchanged by
`with_external_means`; the two populations are intentionally not unified here.
"""

from __future__ import annotations

from collections.abc import Sequence

from waitcast.core.time import format_hhmm, parse_hhmm, round_half_up
from waitcast.domain.models import AnalysisResult, DiningStatistics, HistoricalRecord


def _drawn_minutes(records: Sequence[HistoricalRecord]) -> list[int]:
    out: list[int] = []
    for r in records:
        if not r.drawn_time:
            continue
        try:
            out.append(parse_hhmm(r.drawn_time))
        except ValueError:
            continue
    return out


def aggregate(records: Sequence[HistoricalRecord]) -> AnalysisResult:
    """Mean/earliest/latest drawn time.

    With no usable drawn time the result carries `"-"` placeholders and
    `sample_count=0`; `DegenerateInputError` is not raised.
    """
    minutes = _drawn_minutes(records)
    if not minutes:
        return AnalysisResult()

    mean = format_hhmm(round_half_up(sum(minutes) / len(minutes)))
    ordered = sorted(minutes)  # stable
    return AnalysisResult(
        estimated_draw_time=mean,
        mean_draw_time=mean,
        earliest_draw_time=format_hhmm(ordered[0]),
        latest_draw_time=format_hhmm(ordered[-1]),
        sample_count=len(minutes),
    )


def with_external_means(result: AnalysisResult, statistics: DiningStatistics | None) -> AnalysisResult:
    """Attach the backend's weekday/weekend mean draw times (not recomputed)."""
    if statistics is None:
        return result
    return result.model_copy(
        update={
            "weekday_mean_draw_time": statistics.weekday_avg_issue_time,
            "weekend_mean_draw_time": statistics.weekend_avg_issue_time,
        }
    )
