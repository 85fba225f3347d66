import pytest

from waitcast.core.errors import PlannedTimeRejected
from waitcast.core.time import ensure_within_window, format_hhmm, normalize_hhmm, parse_hhmm, round_half_up


def test_parse_and_format_hhmm():
    assert parse_hhmm("17:40") == 17 * 60 + 40
    assert parse_hhmm("9:05") == 545
    assert format_hhmm(545) == "09:05"
    assert normalize_hhmm(" 9:05 ") == "09:05"


@pytest.mark.parametrize("value", ["", "17", "24:00", "12:60", "ab:cd", "17:4"])
def test_parse_hhmm_rejects_malformed(value):
    with pytest.raises(ValueError):
        parse_hhmm(value)


def test_round_half_up_differs_from_bankers_rounding():
    assert round_half_up(1060.5) == 1061
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_business_hours_window_is_inclusive():
    window = {"open_time": "10:30", "close_time": "22:00"}
    assert ensure_within_window("10:30", **window) == "10:30"
    assert ensure_within_window("22:00", **window) == "22:00"

    with pytest.raises(PlannedTimeRejected):
        ensure_within_window("09:00", **window)
    with pytest.raises(PlannedTimeRejected):
        ensure_within_window("22:01", **window)
    with pytest.raises(PlannedTimeRejected):
        ensure_within_window("10:29", **window)


def test_malformed_planned_time_is_rejected_as_value_error():
    with pytest.raises(ValueError, match="Invalid clock time"):
        ensure_within_window("noon", open_time="10:30", close_time="22:00")
