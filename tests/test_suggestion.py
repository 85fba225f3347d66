import pytest

from waitcast.analysis.suggestion import MESSAGES, suggest
from waitcast.config.settings import SuggestionSettings, get_settings
from waitcast.domain.models import DiningStatistics, HistoricalRecord


def _cfg() -> SuggestionSettings:
    return get_settings().suggestion


def _record(planned: str, drawn: str, confidence: str = "low") -> HistoricalRecord:
    return HistoricalRecord(date="2024-01-08", planned_time=planned, drawn_time=drawn, confidence=confidence)


@pytest.mark.parametrize(
    ("drawn", "tier", "queue"),
    [
        ("17:30", "favorable", 10),  # 30 min
        ("17:29", "moderate", 10),  # 31 min
        ("16:30", "moderate", 30),  # 90 min
        ("16:29", "unfavorable", 30),  # 91 min
    ],
)
def test_tier_boundaries(drawn, tier, queue):
    s = suggest([_record("18:00", drawn)], cfg=_cfg())
    assert s.tier == tier
    assert s.estimated_queue_count == queue
    assert s.message == MESSAGES[tier]


def test_suggestion_uses_all_records_regardless_of_confidence():
    records = [_record("18:00", "17:00", "high"), _record("18:00", "17:50", "low")]
    s = suggest(records, cfg=_cfg())
    assert s.avg_wait_minutes == 35
    assert s.max_wait_minutes == 60
    assert s.min_wait_minutes == 10
    assert s.estimated_queue_count == 12
    assert s.tier == "moderate"


def test_suggestion_skips_records_missing_a_time():
    records = [_record("18:00", "17:40"), HistoricalRecord(planned_time="18:00"), HistoricalRecord(drawn_time="17:00")]
    s = suggest(records, cfg=_cfg())
    assert s.avg_wait_minutes == 20
    assert s.data_points == 3


def test_no_valid_records_gives_zero_suggestion():
    s = suggest([], cfg=_cfg())
    assert s.avg_wait_minutes == 0
    assert s.estimated_queue_count == 0
    assert s.tier == "none"
    assert s.message == MESSAGES["none"]


def test_historical_average_is_appended_and_total_days_used():
    stats = DiningStatistics(avg_issue_time="17:20", total_days=14)
    s = suggest([_record("18:00", "17:50")], cfg=_cfg(), statistics=stats)
    assert s.message.startswith(MESSAGES["favorable"])
    assert "17:20" in s.message.splitlines()[-1]
    assert s.data_points == 14


def test_thresholds_come_from_settings():
    cfg = SuggestionSettings(minutes_per_queue_position=5, favorable_max_minutes=10, moderate_max_minutes=20)
    s = suggest([_record("18:00", "17:35")], cfg=cfg)
    assert s.tier == "unfavorable"
    assert s.estimated_queue_count == 5
