from datetime import date, datetime, timedelta, timezone

import pytest

from shared.analytics.periods import (
    align_to,
    current_month,
    current_week,
    occurred_at,
    period_window,
    previous_month,
    previous_week,
    start_of_week,
)
from shared.analytics.records import ExpenseRecord


@pytest.mark.parametrize(
    "now, expected",
    [
        (datetime(2024, 1, 17, 10, 30), datetime(2024, 1, 14)),  # Wednesday
        (datetime(2024, 1, 14, 0, 0), datetime(2024, 1, 14)),  # Sunday midnight
        (datetime(2024, 1, 20, 23, 59), datetime(2024, 1, 14)),  # Saturday night
        (datetime(2024, 1, 2, 8, 0), datetime(2023, 12, 31)),  # crosses a year
    ],
)
def test_week_starts_on_sunday(now, expected):
    assert start_of_week(now) == expected


def test_week_windows_are_contiguous():
    now = datetime(2024, 1, 17, 10, 30)
    this_week = current_week(now)
    last_week = previous_week(now)

    assert this_week.end - this_week.start == timedelta(days=7)
    assert last_week.end == this_week.start
    assert this_week.contains(this_week.start)
    assert not this_week.contains(this_week.end)


def test_month_windows_roll_over_years():
    january = datetime(2024, 1, 31, 22, 0)
    assert previous_month(january).start == datetime(2023, 12, 1)
    assert previous_month(january).end == datetime(2024, 1, 1)

    december = datetime(2023, 12, 5)
    assert current_month(december).end == datetime(2024, 1, 1)


def test_period_window_rejects_unknown_period():
    now = datetime(2024, 3, 3)
    assert period_window("weekly", now) == current_week(now)
    assert period_window("monthly", now) == current_month(now)
    with pytest.raises(ValueError):
        period_window("daily", now)


def test_occurred_at_falls_back_to_date_midnight():
    now = datetime(2024, 1, 17, tzinfo=timezone.utc)
    record = ExpenseRecord(amount=5, category="Food", date=date(2024, 1, 16))

    assert occurred_at(record, now) == datetime(2024, 1, 16, tzinfo=timezone.utc)


def test_align_to_converts_between_timezones():
    reference = datetime(2024, 1, 17, tzinfo=timezone.utc)
    plus_two = timezone(timedelta(hours=2))
    moment = datetime(2024, 1, 17, 1, 0, tzinfo=plus_two)

    assert align_to(moment, reference) == datetime(2024, 1, 16, 23, 0, tzinfo=timezone.utc)
    assert align_to(datetime(2024, 1, 17, 9), reference).tzinfo == timezone.utc
    assert align_to(datetime(2024, 1, 17, 9), datetime(2024, 1, 1)) == datetime(2024, 1, 17, 9)
