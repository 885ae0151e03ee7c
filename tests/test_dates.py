"""Tests for habitify/dates.py — day normalization, arithmetic, ranges."""

from datetime import date, datetime

from habitify.dates import (
    day_of_month,
    is_past_or_today,
    is_same_day,
    lifetime_dates,
    month_days,
    month_grid,
    shift_days,
    shift_months,
    shift_weeks,
    start_of_day,
    start_of_month,
    start_of_week,
    week_range,
    weekday_of,
)
from habitify.models import Weekday


def test_start_of_day_truncates_datetime():
    assert start_of_day(datetime(2025, 6, 12, 23, 59, 59)) == date(2025, 6, 12)
    assert start_of_day(date(2025, 6, 12)) == date(2025, 6, 12)


def test_is_same_day_ignores_time():
    assert is_same_day(datetime(2025, 6, 12, 0, 1), datetime(2025, 6, 12, 23, 0))
    assert not is_same_day(date(2025, 6, 12), date(2025, 6, 13))


def test_is_past_or_today():
    today = date(2025, 6, 12)
    assert is_past_or_today(date(2025, 6, 11), today)
    assert is_past_or_today(datetime(2025, 6, 12, 22, 0), today)
    assert not is_past_or_today(date(2025, 6, 13), today)


def test_weekday_of_sunday_first_numbering():
    assert weekday_of(date(2025, 6, 1)) == Weekday.SUNDAY
    assert weekday_of(date(2025, 6, 9)) == Weekday.MONDAY
    assert weekday_of(date(2025, 6, 14)) == Weekday.SATURDAY
    assert int(weekday_of(date(2025, 6, 11))) == 4


def test_day_of_month():
    assert day_of_month(date(2025, 6, 15)) == 15


def test_shift_days_and_weeks():
    assert shift_days(date(2025, 6, 30), 1) == date(2025, 7, 1)
    assert shift_days(date(2025, 3, 1), -1) == date(2025, 2, 28)
    assert shift_weeks(date(2025, 6, 9), -1) == date(2025, 6, 2)


def test_shift_days_overflow_returns_input():
    assert shift_days(date.max, 1) == date.max
    assert shift_days(date.min, -1) == date.min


def test_shift_months_clamps_day():
    assert shift_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert shift_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert shift_months(date(2025, 3, 15), -3) == date(2024, 12, 15)


def test_shift_months_overflow_returns_input():
    assert shift_months(date.max, 1) == date.max
    assert shift_months(date.min, -1) == date.min


def test_start_of_week_is_monday():
    assert start_of_week(date(2025, 6, 15)) == date(2025, 6, 9)
    assert start_of_week(date(2025, 6, 9)) == date(2025, 6, 9)


def test_week_range():
    days = week_range(date(2025, 6, 11))
    assert len(days) == 7
    assert days[0] == date(2025, 6, 9)
    assert days[-1] == date(2025, 6, 15)


def test_month_days():
    assert start_of_month(date(2025, 2, 20)) == date(2025, 2, 1)
    assert len(month_days(date(2025, 2, 20))) == 28
    assert len(month_days(date(2024, 2, 1))) == 29
    june = month_days(date(2025, 6, 12))
    assert june[0] == date(2025, 6, 1)
    assert june[-1] == date(2025, 6, 30)


def test_month_grid_leading_padding():
    # June 2025 starts on a Sunday, July 2025 on a Tuesday
    assert month_grid(date(2025, 6, 1))[0] == date(2025, 6, 1)
    july = month_grid(date(2025, 7, 10))
    assert july[:2] == [None, None]
    assert july[2] == date(2025, 7, 1)
    assert len(july) == 2 + 31


def test_lifetime_dates_contiguous():
    days = lifetime_dates(date(2025, 6, 12))
    assert days[0] == date(2023, 6, 12)
    assert days[-1] == date(2027, 6, 12)
    assert len(days) == 1462
    assert all((b - a).days == 1 for a, b in zip(days, days[1:]))
