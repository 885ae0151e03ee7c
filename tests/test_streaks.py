"""Tests for habitify/streaks.py — daily/weekly streaks, period completion, cache."""

from datetime import date

from habitify.dates import month_days
from habitify.models import CompletionLedger, Daily, Habit, Monthly, StreakResult, Weekday, Weekly
from habitify.streaks import (
    StreakCache,
    current_streak,
    format_streak,
    is_month_fully_completed,
    is_week_fully_completed,
    streak_for,
    streak_text,
    weekly_streak,
)

MWF = Weekly(frozenset({Weekday.MONDAY, Weekday.WEDNESDAY, Weekday.FRIDAY}))


def _ledger(*days: str) -> CompletionLedger:
    return CompletionLedger.from_list(list(days))


# ── Daily streak ──────────────────────────────────────────────


def test_daily_streak_counts_back_from_today():
    ledger = _ledger("2025-06-10", "2025-06-11", "2025-06-12")
    assert current_streak(Daily(), ledger, date(2025, 6, 12)) == 3


def test_daily_streak_excuses_open_today():
    ledger = _ledger("2025-06-10", "2025-06-11", "2025-06-12")
    assert current_streak(Daily(), ledger, date(2025, 6, 13)) == 3


def test_daily_streak_includes_completed_today():
    ledger = _ledger("2025-06-10", "2025-06-11", "2025-06-12", "2025-06-13")
    assert current_streak(Daily(), ledger, date(2025, 6, 13)) == 4


def test_daily_streak_resets_after_missed_day():
    ledger = _ledger("2025-06-10", "2025-06-11", "2025-06-12")
    assert current_streak(Daily(), ledger, date(2025, 6, 14)) == 0


def test_daily_streak_stops_at_gap():
    ledger = _ledger("2025-06-05", "2025-06-06", "2025-06-08", "2025-06-09")
    assert current_streak(Daily(), ledger, date(2025, 6, 9)) == 2


def test_daily_streak_zero_for_empty_ledger_and_monthly():
    assert current_streak(Daily(), CompletionLedger(), date(2025, 6, 12)) == 0
    ledger = _ledger("2025-06-01", "2025-06-15")
    assert current_streak(Monthly(frozenset({1, 15})), ledger, date(2025, 6, 15)) == 0


def test_daily_streak_terminates_at_calendar_start():
    ledger = CompletionLedger(frozenset({date.min, date(1, 1, 2)}))
    assert current_streak(Daily(), ledger, date(1, 1, 2)) == 2


# ── Period completion ─────────────────────────────────────────


def test_week_fully_completed_mwf():
    ledger = _ledger("2025-06-09", "2025-06-11", "2025-06-13")
    assert is_week_fully_completed(MWF, ledger, date(2025, 6, 10))


def test_week_not_completed_when_friday_missing():
    ledger = _ledger("2025-06-09", "2025-06-11")
    assert not is_week_fully_completed(MWF, ledger, date(2025, 6, 10))


def test_week_with_no_scheduled_days_is_not_completed():
    ledger = _ledger("2025-06-09")
    assert not is_week_fully_completed(Weekly(), ledger, date(2025, 6, 9))


def test_daily_week_needs_every_day():
    six = _ledger(*[f"2025-06-{d:02d}" for d in range(9, 15)])
    assert not is_week_fully_completed(Daily(), six, date(2025, 6, 9))
    seven = _ledger(*[f"2025-06-{d:02d}" for d in range(9, 16)])
    assert is_week_fully_completed(Daily(), seven, date(2025, 6, 9))


def test_month_fully_completed():
    rule = Monthly(frozenset({1, 15}))
    assert is_month_fully_completed(rule, _ledger("2025-06-01", "2025-06-15"), date(2025, 6, 20))
    assert not is_month_fully_completed(rule, _ledger("2025-06-01"), date(2025, 6, 20))
    all_june = CompletionLedger(frozenset(month_days(date(2025, 6, 1))))
    assert is_month_fully_completed(Daily(), all_june, date(2025, 6, 1))


# ── Weekly streak ─────────────────────────────────────────────


TWO_WEEKS = _ledger(
    "2025-06-02", "2025-06-04", "2025-06-06",
    "2025-06-09", "2025-06-11", "2025-06-13",
)


def test_weekly_streak_counts_full_weeks():
    assert weekly_streak(MWF, TWO_WEEKS, date(2025, 6, 13)) == 2


def test_weekly_streak_excuses_open_week():
    assert weekly_streak(MWF, TWO_WEEKS, date(2025, 6, 16)) == 2


def test_weekly_streak_resets_after_missed_week():
    assert weekly_streak(MWF, TWO_WEEKS, date(2025, 6, 23)) == 0


def test_weekly_streak_zero_without_weekdays_or_completions():
    assert weekly_streak(Weekly(), TWO_WEEKS, date(2025, 6, 13)) == 0
    assert weekly_streak(MWF, CompletionLedger(), date(2025, 6, 13)) == 0


def test_weekly_streak_zero_for_monthly_rule():
    ledger = _ledger("2025-05-15", "2025-06-01", "2025-06-15")
    assert weekly_streak(Monthly(frozenset({1, 15})), ledger, date(2025, 6, 16)) == 0


# ── Unit selection and text ───────────────────────────────────


def test_streak_for_picks_unit():
    daily = _ledger("2025-06-11", "2025-06-12")
    assert streak_for(Daily(), daily, date(2025, 6, 12)) == StreakResult(2, "day")
    assert streak_for(MWF, TWO_WEEKS, date(2025, 6, 13)) == StreakResult(2, "week")
    assert streak_for(Monthly(frozenset({1})), _ledger("2025-06-01"), date(2025, 6, 1)) == StreakResult(0, None)


def test_streak_text():
    assert streak_text(Daily(), _ledger("2025-06-12"), date(2025, 6, 12)) == "1 day streak \U0001f525"
    assert streak_text(Daily(), CompletionLedger(), date(2025, 6, 12)) == ""
    assert format_streak(StreakResult(0, "week")) == ""


# ── Cache ─────────────────────────────────────────────────────


def test_cache_hits_until_revision_changes():
    habit = Habit(id="read", rule=Daily(), ledger=_ledger("2025-06-11", "2025-06-12"))
    cache = StreakCache()
    today = date(2025, 6, 12)

    assert cache.get(habit, today).count == 2
    assert cache.get(habit, today).count == 2
    assert (cache.hits, cache.misses) == (1, 1)

    habit.ledger = _ledger("2025-06-10", "2025-06-11", "2025-06-12")
    habit.revision += 1
    assert cache.get(habit, today).count == 3
    assert cache.misses == 2


def test_cache_keys_by_day():
    calls = []

    def compute(rule, ledger, today):
        calls.append(today)
        return StreakResult(len(calls), "day")

    habit = Habit(id="h")
    cache = StreakCache()
    cache.get(habit, date(2025, 6, 12), compute=compute)
    cache.get(habit, date(2025, 6, 13), compute=compute)
    cache.get(habit, date(2025, 6, 12), compute=compute)
    assert calls == [date(2025, 6, 12), date(2025, 6, 13)]


def test_cache_invalidate_and_bound():
    cache = StreakCache(max_entries=2)
    a, b = Habit(id="a"), Habit(id="b")
    cache.get(a, date(2025, 6, 12))
    cache.get(a, date(2025, 6, 13))
    assert len(cache) == 2
    cache.get(b, date(2025, 6, 12))
    assert len(cache) == 1  # full cache was cleared before inserting
    assert cache.invalidate("b") == 1
    assert cache.invalidate("b") == 0
    cache.get(a, date(2025, 6, 12))
    cache.clear()
    assert len(cache) == 0
