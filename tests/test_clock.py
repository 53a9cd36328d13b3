"""Tests for the time normalizer."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from signage_api.services.clock import minutes_to_time, normalize_instant, time_to_minutes

KOLKATA = ZoneInfo("Asia/Kolkata")


def test_normalize_converts_utc_instant_to_local_calendar():
    # 20:00 UTC on Sunday is 01:30 on Monday in Kolkata.
    now = normalize_instant(datetime(2025, 6, 8, 20, 0, tzinfo=timezone.utc), KOLKATA)
    assert now.day == "monday"
    assert now.clock == "01:30"
    assert now.date == "2025-06-09"
    assert now.timezone == "Asia/Kolkata"
    assert now.instant == datetime(2025, 6, 8, 20, 0, tzinfo=timezone.utc)


def test_naive_instant_is_treated_as_utc():
    now = normalize_instant(datetime(2025, 6, 10, 18, 29), KOLKATA)
    assert now.date == "2025-06-10"
    assert now.clock == "23:59"
    assert now.day == "tuesday"


def test_minutes_property_matches_clock():
    now = normalize_instant(datetime(2025, 6, 9, 6, 30, tzinfo=timezone.utc), KOLKATA)
    assert now.clock == "12:00"
    assert now.minutes == 720


@pytest.mark.parametrize(
    "value,expected",
    [("00:00", 0), ("09:05", 545), ("23:59", 1439), ("12:30:45", 750)],
)
def test_time_to_minutes(value, expected):
    assert time_to_minutes(value) == expected


@pytest.mark.parametrize("value", ["", "noon", "24:00", "12:60", "1:2:3:4", None])
def test_time_to_minutes_rejects_malformed_values(value):
    with pytest.raises(ValueError):
        time_to_minutes(value)


def test_minutes_to_time():
    assert minutes_to_time(0) == "00:00"
    assert minutes_to_time(545) == "09:05"
    assert minutes_to_time(1439) == "23:59"
