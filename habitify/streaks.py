"""Streak analysis for Habitify.

Streaks are computed on demand by scanning the completion ledger backwards
from a reference day:

- Daily cadence counts consecutive completed days. Today is excused while it
  is still open: if it is not completed yet the scan starts from yesterday.
- Weekly cadence counts consecutive Monday-start weeks in which every
  scheduled day was completed. The current week is excused the same way.
- Monthly rules carry no streak.

Nothing here holds state. ``StreakCache`` is an optional memoization layer
for callers that query the same habit repeatedly.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from habitify.dates import DayLike, month_days, shift_days, shift_weeks, start_of_day, start_of_week, week_range
from habitify.ledger import completed_days, is_completed
from habitify.models import CompletionLedger, Daily, Habit, Monthly, RecurrenceRule, StreakResult, Weekly
from habitify.recurrence import scheduled_days

logger = logging.getLogger(__name__)


# ── Period completion ─────────────────────────────────────────


def period_satisfied(rule: RecurrenceRule, ledger: CompletionLedger, days: list[date]) -> bool:
    """True when *days* contain at least one scheduled day and all of them are completed."""
    scheduled = scheduled_days(rule, days)
    if not scheduled:
        return False
    return len(completed_days(ledger, scheduled)) == len(scheduled)


def week_satisfied(rule: RecurrenceRule, ledger: CompletionLedger, week_start: DayLike) -> bool:
    return period_satisfied(rule, ledger, week_range(week_start))


def is_week_fully_completed(rule: RecurrenceRule, ledger: CompletionLedger, day: DayLike) -> bool:
    """Whether the Monday-start week containing *day* is fully completed.

    For Daily habits every one of the seven days must be completed, since
    every day is scheduled.
    """
    return week_satisfied(rule, ledger, day)


def is_month_fully_completed(rule: RecurrenceRule, ledger: CompletionLedger, day: DayLike) -> bool:
    return period_satisfied(rule, ledger, month_days(day))


# ── Streaks ───────────────────────────────────────────────────


def current_streak(rule: RecurrenceRule, ledger: CompletionLedger, today: DayLike) -> int:
    """Consecutive completed days ending today, or yesterday if today is still open."""
    if isinstance(rule, Monthly) or not ledger:
        return 0

    current = start_of_day(today)
    if not is_completed(ledger, current):
        previous = shift_days(current, -1)
        if previous == current:
            return 0
        current = previous

    streak = 0
    while is_completed(ledger, current):
        streak += 1
        previous = shift_days(current, -1)
        if previous == current:
            break
        current = previous
    return streak


def weekly_streak(rule: RecurrenceRule, ledger: CompletionLedger, today: DayLike) -> int:
    """Consecutive fully completed weeks ending with this week, or last week if this one is open."""
    if isinstance(rule, Monthly) or not ledger:
        return 0
    if isinstance(rule, Weekly) and not rule.weekdays:
        return 0

    week_start = start_of_week(today)
    if not week_satisfied(rule, ledger, week_start):
        previous = shift_weeks(week_start, -1)
        if previous == week_start:
            return 0
        week_start = previous

    streak = 0
    while week_satisfied(rule, ledger, week_start):
        streak += 1
        previous = shift_weeks(week_start, -1)
        if previous == week_start:
            break
        week_start = previous
    return streak


def streak_for(rule: RecurrenceRule, ledger: CompletionLedger, today: DayLike) -> StreakResult:
    """Streak in the unit that matches the rule's cadence."""
    if isinstance(rule, Daily):
        return StreakResult(current_streak(rule, ledger, today), "day")
    if isinstance(rule, Weekly):
        return StreakResult(weekly_streak(rule, ledger, today), "week")
    return StreakResult(0, None)


def format_streak(result: StreakResult) -> str:
    """'3 day streak 🔥', or '' when there is no streak to show."""
    if result.count <= 0 or result.unit is None:
        return ""
    return f"{result.count} {result.unit} streak \U0001f525"


def streak_text(rule: RecurrenceRule, ledger: CompletionLedger, today: DayLike) -> str:
    return format_streak(streak_for(rule, ledger, today))


# ── Memoization ───────────────────────────────────────────────


class StreakCache:
    """Memoizes streak results per ``(habit_id, day, revision)``.

    The habit's revision is part of the key, so an entry computed before a
    toggle or rule change is never returned afterwards. ``invalidate`` only
    frees memory held for a habit.
    """

    def __init__(self, max_entries: int = 4096) -> None:
        self.max_entries = max_entries
        self._entries: dict[tuple[str, date, int], StreakResult] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(
        self,
        habit: Habit,
        today: DayLike,
        compute: Callable[[RecurrenceRule, CompletionLedger, date], StreakResult] = streak_for,
    ) -> StreakResult:
        key = (habit.id, start_of_day(today), habit.revision)
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        if len(self._entries) >= self.max_entries:
            logger.debug("streak cache full (%d entries), clearing", len(self._entries))
            self._entries.clear()
        result = compute(habit.rule, habit.ledger, key[1])
        self._entries[key] = result
        return result

    def invalidate(self, habit_id: str) -> int:
        """Drop every entry for one habit. Returns the number removed."""
        stale = [k for k in self._entries if k[0] == habit_id]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
