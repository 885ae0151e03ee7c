"""Recurrence evaluation: which days a habit is due on."""

from __future__ import annotations

from datetime import date

from habitify.dates import DayLike, day_of_month, is_past_or_today, start_of_day, weekday_of
from habitify.models import Daily, Monthly, RecurrenceRule, Weekday, Weekly


def is_scheduled(rule: RecurrenceRule, day: DayLike) -> bool:
    """Return True when *rule* makes the habit due on *day*."""
    if isinstance(rule, Daily):
        return True
    if isinstance(rule, Weekly):
        return weekday_of(day) in rule.weekdays
    if isinstance(rule, Monthly):
        return day_of_month(day) in rule.days_of_month
    raise TypeError(f"Unknown recurrence rule: {rule!r}")


evaluate_schedule = is_scheduled


def can_toggle(rule: RecurrenceRule, day: DayLike, today: DayLike) -> bool:
    """A day can be checked off when it is scheduled and not in the future."""
    return is_scheduled(rule, day) and is_past_or_today(day, today)


def scheduled_days(rule: RecurrenceRule, days: list[date]) -> list[date]:
    return [start_of_day(d) for d in days if is_scheduled(rule, d)]


def normalize_rule(rule: RecurrenceRule) -> RecurrenceRule:
    """Collapse a Weekly rule naming every weekday, or a Monthly rule naming
    every day of the month, into Daily."""
    if isinstance(rule, Weekly) and len(rule.weekdays) == len(Weekday):
        return Daily()
    if isinstance(rule, Monthly) and len(rule.days_of_month) == 31:
        return Daily()
    return rule


def describe_rule(rule: RecurrenceRule) -> str:
    """Short label for a rule, e.g. 'Weekly: Mon, Wed'."""
    if isinstance(rule, Daily):
        return "Daily"
    if isinstance(rule, Weekly):
        if not rule.weekdays:
            return "Weekly: (no days)"
        # Monday-first, the order the week views use
        ordered = sorted(rule.weekdays, key=lambda d: (int(d) + 5) % 7)
        return "Weekly: " + ", ".join(d.short for d in ordered)
    if isinstance(rule, Monthly):
        if not rule.days_of_month:
            return "Monthly: (no days)"
        return "Monthly: " + ", ".join(str(d) for d in sorted(rule.days_of_month))
    raise TypeError(f"Unknown recurrence rule: {rule!r}")
