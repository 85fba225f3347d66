"""
Qualitative wait recommendation.

Works on the *unfiltered* record set: any record with both a planned and a drawn
time counts, whatever its confidence tag. With no usable record the result is a
zero-valued suggestion with the "no suggestion" message
(`DegenerateInputError` is not raised).
"""

from __future__ import annotations

from collections.abc import Sequence

from waitcast.analysis.classifier import wait_minutes
from waitcast.config.settings import SuggestionSettings
from waitcast.core.time import round_half_up
from waitcast.domain.models import DiningStatistics, HistoricalRecord, SuggestionTier, WaitSuggestion

MESSAGES: dict[SuggestionTier, str] = {
    "favorable": "Short wait around this time. A good time to visit.",
    "moderate": "Some wait around this time. Draw a ticket early or consider another time.",
    "unfavorable": "Long wait around this time. Consider visiting at a different time.",
    "none": "No suggestion available.",
}


def tier_for(avg_wait_minutes: int, cfg: SuggestionSettings) -> SuggestionTier:
    if avg_wait_minutes <= cfg.favorable_max_minutes:
        return "favorable"
    if avg_wait_minutes <= cfg.moderate_max_minutes:
        return "moderate"
    return "unfavorable"


def suggest(
    records: Sequence[HistoricalRecord],
    *,
    cfg: SuggestionSettings,
    statistics: DiningStatistics | None = None,
) -> WaitSuggestion:
    waits = [
        wait_minutes(r.planned_time, r.drawn_time) for r in records if r.planned_time and r.drawn_time
    ]
    data_points = (statistics.total_days if statistics else None) or len(records)

    if not waits:
        return WaitSuggestion(message=MESSAGES["none"], data_points=data_points)

    avg_wait = round_half_up(sum(waits) / len(waits))
    queue_count = max(0, round_half_up(avg_wait / cfg.minutes_per_queue_position))
    tier = tier_for(avg_wait, cfg)

    message = MESSAGES[tier]
    if statistics and statistics.avg_issue_time:
        message += f"\nHistorical average draw time: {statistics.avg_issue_time}"

    return WaitSuggestion(
        avg_wait_minutes=avg_wait,
        max_wait_minutes=max(waits),
        min_wait_minutes=min(waits),
        estimated_queue_count=queue_count,
        tier=tier,
        message=message,
        data_points=data_points,
    )
