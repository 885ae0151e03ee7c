"""Calendar primitives for Habitify.

Every function here is pure and works on timezone-naive calendar days
(``datetime.date``). ``datetime`` inputs are accepted and truncated to their
date. Arithmetic that would leave the supported date range returns the input
unchanged instead of raising, so callers scanning backwards must treat
"no movement" as the end of the calendar.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from habitify.models import Weekday


DayLike = date | datetime


def start_of_day(value: DayLike) -> date:
    """Normalize a date or datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_same_day(a: DayLike, b: DayLike) -> bool:
    return start_of_day(a) == start_of_day(b)


def is_past_or_today(value: DayLike, today: DayLike) -> bool:
    return start_of_day(value) <= start_of_day(today)


# ── Arithmetic ────────────────────────────────────────────────


def shift_days(value: DayLike, days: int) -> date:
    """Add *days* to a day; returns the day unchanged on overflow."""
    day = start_of_day(value)
    try:
        return day + timedelta(days=days)
    except OverflowError:
        return day


def shift_weeks(value: DayLike, weeks: int) -> date:
    return shift_days(value, weeks * 7)


def shift_months(value: DayLike, months: int) -> date:
    """Move by whole months, clamping the day to the target month's length."""
    day = start_of_day(value)
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    if year < date.min.year or year > date.max.year:
        return day
    last = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last))


# ── Components ────────────────────────────────────────────────


def weekday_of(value: DayLike) -> Weekday:
    """Weekday of a day, Sunday=1 .. Saturday=7."""
    return Weekday((start_of_day(value).weekday() + 1) % 7 + 1)


def day_of_month(value: DayLike) -> int:
    return start_of_day(value).day


# ── Ranges ────────────────────────────────────────────────────


def start_of_week(value: DayLike) -> date:
    """Monday of the ISO week containing *value*."""
    day = start_of_day(value)
    return shift_days(day, -day.weekday())


def week_range(value: DayLike) -> list[date]:
    """The seven days of the Monday-start week containing *value*."""
    monday = start_of_week(value)
    days = [monday]
    for offset in range(1, 7):
        nxt = shift_days(monday, offset)
        if nxt == days[-1]:
            break
        days.append(nxt)
    return days


def start_of_month(value: DayLike) -> date:
    return start_of_day(value).replace(day=1)


def month_days(value: DayLike) -> list[date]:
    """Every day of the month containing *value*, ascending."""
    first = start_of_month(value)
    length = calendar.monthrange(first.year, first.month)[1]
    return [first.replace(day=n) for n in range(1, length + 1)]


def month_grid(value: DayLike) -> list[date | None]:
    """Sunday-first calendar grid for a month.

    Leading ``None`` entries pad the first row up to the weekday of the 1st.
    """
    days = month_days(value)
    leading = int(weekday_of(days[0])) - 1
    grid: list[date | None] = [None] * leading
    grid.extend(days)
    return grid


def lifetime_dates(today: DayLike, years: int = 2) -> list[date]:
    """Contiguous days from *years* before *today* to *years* after it."""
    anchor = start_of_day(today)
    start = shift_months(anchor, -12 * years)
    end = shift_months(anchor, 12 * years)
    out = []
    current = start
    while current <= end:
        out.append(current)
        nxt = shift_days(current, 1)
        if nxt == current:
            break
        current = nxt
    return out
