"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- backend payloads (`Store`, `HistoricalRecord`, `DiningStatistics`, `QueueSnapshot`)
- geo lookup (`Coordinate`, `RegionEntry`, `ResolvedRegion`)
- analysis output (`AnalysisResult`, `WaitSuggestion`, `DiningReport`)

Keeping these models in one place helps:
- validation (reject bad backend payloads early),
- consistent JSON output for `--json` CLI runs.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Rendered in place of a time/number when there is nothing to show.
PLACEHOLDER = "-"


class Coordinate(BaseModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lon: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


class RegionEntry(BaseModel):
    """One row of the static city coordinate table."""

    model_config = ConfigDict(frozen=True)

    name: str
    coordinate: Coordinate


class ResolvedRegion(BaseModel):
    """Outcome of default-region resolution."""

    name: str | None
    source: Literal["located", "fallback", "none"]
    distance_km: float | None = None


class Store(BaseModel):
    id: int
    name: str
    region: str | None = None


class HistoricalRecord(BaseModel):
    """One past observation: a ticket drawn at `drawn_time` for a visit planned at `planned_time`.

    Time and date strings are deliberately not validated here; the classifier
    degrades malformed values instead of rejecting the whole payload.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: str | None = None
    planned_time: str | None = Field(default=None, alias="dining_time")
    drawn_time: str | None = Field(default=None, alias="estimated_issue_time")
    confidence: str | None = None


class ClassifiedRecord(HistoricalRecord):
    wait_minutes: int = Field(0, ge=0)
    weekday_label: str = ""
    is_weekend: bool = False


class DiningStatistics(BaseModel):
    """Backend-side aggregate computed over *all* records (not only high confidence)."""

    weekday_avg_issue_time: str | None = None
    weekend_avg_issue_time: str | None = None
    avg_issue_time: str | None = None
    total_days: int | None = None


class DiningAnalysisPayload(BaseModel):
    analysis_data: list[HistoricalRecord]
    statistics: DiningStatistics = Field(default_factory=DiningStatistics)


class AnalysisResult(BaseModel):
    """Point estimates of the draw time for a planned visit time."""

    estimated_draw_time: str = PLACEHOLDER
    mean_draw_time: str = PLACEHOLDER
    earliest_draw_time: str = PLACEHOLDER
    latest_draw_time: str = PLACEHOLDER
    sample_count: int = Field(0, ge=0)
    weekday_mean_draw_time: str | None = None
    weekend_mean_draw_time: str | None = None


SuggestionTier = Literal["favorable", "moderate", "unfavorable", "none"]


class WaitSuggestion(BaseModel):
    avg_wait_minutes: int = Field(0, ge=0)
    max_wait_minutes: int = Field(0, ge=0)
    min_wait_minutes: int = Field(0, ge=0)
    estimated_queue_count: int = Field(0, ge=0)
    tier: SuggestionTier = "none"
    message: str
    data_points: int = Field(0, ge=0)


class DiningReport(BaseModel):
    """Everything one "analyze this planned time" request produces."""

    store: Store
    planned_time: str
    analysis: AnalysisResult
    suggestion: WaitSuggestion
    history: list[ClassifiedRecord] = Field(default_factory=list)


class ChartSeries(BaseModel):
    times: list[str] = Field(default_factory=list)
    wait_data: list[float] = Field(default_factory=list)
    calls_data: list[float] = Field(default_factory=list)
    new_tickets_data: list[float] = Field(default_factory=list)


class QueueSnapshot(BaseModel):
    """Queue statistics for one store and date, ready for display."""

    current_queue_count: int | float | str = PLACEHOLDER
    current_wait_time: int | float | str = PLACEHOLDER
    avg_calls: float | str = PLACEHOLDER
    max_calls: int | float | str = PLACEHOLDER
    avg_new_tickets: float | str = PLACEHOLDER
    max_new_tickets: int | float | str = PLACEHOLDER
    chart: ChartSeries | None = None
