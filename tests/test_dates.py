from datetime import datetime, timezone

import pytest

from wp_ingestion.dates import days_to_iso8601, events_date_window


def fixed_clock():
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("days", [None, "", 0, "0", "abc"])
def test_days_to_iso8601_without_usable_days(days):
    assert days_to_iso8601(days, fixed_clock) is None


@pytest.mark.parametrize("days", [10, "10"])
def test_days_to_iso8601(days):
    assert days_to_iso8601(days, fixed_clock) == "2024-06-05T12:00:00.000Z"


def test_events_date_window():
    assert events_date_window(fixed_clock) == ("2014-06-15 00:00:00", "2034-06-15 00:00:00")


def test_events_date_window_leap_day():
    leap = lambda: datetime(2024, 2, 29, tzinfo=timezone.utc)
    assert events_date_window(leap) == ("2014-02-28 00:00:00", "2034-02-28 00:00:00")
