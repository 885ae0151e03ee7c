"""Habit CRUD, validation, completion toggling and period filters for Habitify."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from habitify.dates import DayLike, month_days, start_of_day, week_range
from habitify.fileio import read_yaml, write_yaml_atomic
from habitify.ledger import is_completed, toggle_completion
from habitify.models import (
    DEFAULT_COLOR,
    DEFAULT_ICON,
    FREQUENCIES,
    Habit,
    HabitsFile,
    RuleValidationError,
    is_valid_color,
    rule_from_dict,
)
from habitify.reconcile import apply_rule_change, has_schedule_changed
from habitify.recurrence import can_toggle, describe_rule, is_scheduled, normalize_rule
from habitify.streaks import (
    StreakCache,
    is_month_fully_completed,
    is_week_fully_completed,
    format_streak,
    streak_for,
)
from habitify.workspace import habits_path as _habits_path

logger = logging.getLogger(__name__)

SCHEDULE_CONFIRMATION_ERROR = "schedule change requires confirmation"
EDITABLE_FIELDS = ("name", "color", "icon", "schedule")


class ToggleNotAllowedError(ValueError):
    """The day is not scheduled for the habit, or lies in the future."""


# ── Validation ────────────────────────────────────────────────


def validate_habit(habit: dict[str, Any]) -> list[str]:
    """Validate habit fields and return list of errors (empty if valid)."""
    errors = []
    name = habit.get("name")
    if name is None:
        errors.append("Missing required field: name")
    elif not isinstance(name, str) or not name.strip():
        errors.append("name must be a non-empty string")

    if "color" in habit and not is_valid_color(str(habit["color"])):
        errors.append(f"Invalid color: {habit['color']!r} (expected #RRGGBB)")

    if "icon" in habit and not str(habit["icon"]).strip():
        errors.append("icon must not be empty")

    schedule = habit.get("schedule")
    if schedule is not None:
        if not isinstance(schedule, dict):
            errors.append("schedule must be a mapping")
        elif str(schedule.get("frequency", "daily")).strip().lower() not in FREQUENCIES:
            errors.append(f"Invalid frequency: {schedule.get('frequency')}")
        else:
            try:
                rule_from_dict(schedule)
            except RuleValidationError as e:
                errors.append(str(e))
    return errors


# ── CRUD ──────────────────────────────────────────────────────


def load_habits(root: Path | None = None) -> HabitsFile:
    """Load habits.yaml into a HabitsFile model."""
    return HabitsFile.from_dict(read_yaml(_habits_path(root)))


def save_habits(habits_file: HabitsFile, root: Path | None = None) -> None:
    """Save HabitsFile back to habits.yaml atomically."""
    write_yaml_atomic(_habits_path(root), habits_file.to_dict())
    logger.debug("saved %d habit(s)", len(habits_file.habits))


def find_habit(habits_file: HabitsFile, habit_id: str) -> Habit | None:
    for h in habits_file.habits:
        if h.id == habit_id:
            return h
    return None


def create_habit(
    habits_file: HabitsFile, data: dict[str, Any], now: datetime | None = None
) -> tuple[Habit, list[str]]:
    """Create and add a new habit. Returns (habit, errors)."""
    errors = validate_habit(data)
    if errors:
        return Habit(), errors

    habit = Habit(
        name=data["name"].strip(),
        color=str(data.get("color") or DEFAULT_COLOR),
        icon=str(data.get("icon") or DEFAULT_ICON),
        created_at=now or datetime.now().replace(microsecond=0),
        rule=normalize_rule(rule_from_dict(data.get("schedule"))),
    )
    if data.get("id"):
        if find_habit(habits_file, str(data["id"])):
            return Habit(), [f"Habit ID already exists: {data['id']}"]
        habit.id = str(data["id"])

    habits_file.habits.append(habit)
    logger.info("created habit %s (%s, %s)", habit.id, habit.name, describe_rule(habit.rule))
    return habit, []


def update_habit(
    habits_file: HabitsFile,
    habit_id: str,
    updates: dict[str, Any],
    confirm_schedule_change: bool = False,
) -> tuple[Habit | None, list[str], list[date]]:
    """Update a habit by ID. Returns (updated_habit, errors, pruned_days).

    A schedule change is only applied when *confirm_schedule_change* is set;
    it then prunes completions the new schedule no longer covers.
    """
    habit = find_habit(habits_file, habit_id)
    if not habit:
        return None, [f"Habit not found: {habit_id}"], []

    merged = {k: v for k, v in habit.to_dict().items() if k in EDITABLE_FIELDS}
    merged.update({k: v for k, v in updates.items() if k in EDITABLE_FIELDS and v is not None})
    errors = validate_habit(merged)
    if errors:
        return None, errors, []

    new_rule = normalize_rule(rule_from_dict(merged["schedule"]))
    schedule_changed = has_schedule_changed(habit.rule, new_rule)
    if schedule_changed and not confirm_schedule_change:
        return None, [f"{SCHEDULE_CONFIRMATION_ERROR}: {describe_rule(habit.rule)} -> {describe_rule(new_rule)}"], []

    habit.name = merged["name"].strip()
    habit.color = str(merged["color"])
    habit.icon = str(merged["icon"])
    pruned = apply_rule_change(habit, new_rule) if schedule_changed else []
    logger.info("updated habit %s%s", habit.id, " (schedule changed)" if schedule_changed else "")
    return habit, [], pruned


def delete_habit(habits_file: HabitsFile, habit_id: str) -> bool:
    """Remove a habit together with its schedule and completions."""
    for i, h in enumerate(habits_file.habits):
        if h.id == habit_id:
            habits_file.habits.pop(i)
            logger.info("deleted habit %s (%s)", h.id, h.name)
            return True
    return False


# ── Completion ────────────────────────────────────────────────


def toggle_habit_completion(habit: Habit, day: DayLike, today: DayLike) -> bool:
    """Flip the completion for *day*. Returns the new completed state.

    Raises ToggleNotAllowedError for unscheduled or future days.
    """
    if not can_toggle(habit.rule, day, today):
        reason = "not scheduled" if not is_scheduled(habit.rule, day) else "in the future"
        raise ToggleNotAllowedError(f"Cannot toggle {start_of_day(day).isoformat()}: {reason}")
    habit.ledger = toggle_completion(habit.ledger, day)
    habit.revision += 1
    done = is_completed(habit.ledger, day)
    logger.info("habit %s: %s %s", habit.id, "completed" if done else "uncompleted", start_of_day(day))
    return done


# ── Filters ───────────────────────────────────────────────────


def habits_for_day(habits: list[Habit], day: DayLike) -> list[Habit]:
    """Habits due on *day*."""
    return [h for h in habits if is_scheduled(h.rule, day)]


def habits_for_week(habits: list[Habit], day: DayLike) -> list[Habit]:
    """Habits with at least one scheduled day in the week containing *day*."""
    days = week_range(day)
    return [h for h in habits if any(is_scheduled(h.rule, d) for d in days)]


def habits_for_month(habits: list[Habit], day: DayLike) -> list[Habit]:
    """Habits with at least one scheduled day in the month containing *day*."""
    days = month_days(day)
    return [h for h in habits if any(is_scheduled(h.rule, d) for d in days)]


def summarize_habit(
    habit: Habit,
    today: DayLike,
    day: DayLike | None = None,
    cache: StreakCache | None = None,
) -> dict[str, Any]:
    """Habit as a dict with computed fields for *day* (defaults to today)."""
    target = start_of_day(day if day is not None else today)
    if cache is not None:
        streak = cache.get(habit, today)
    else:
        streak = streak_for(habit.rule, habit.ledger, today)
    d = habit.to_dict()
    d["schedule_label"] = describe_rule(habit.rule)
    d["date"] = target.isoformat()
    d["scheduled"] = is_scheduled(habit.rule, target)
    d["completed"] = is_completed(habit.ledger, target)
    d["can_toggle"] = can_toggle(habit.rule, target, today)
    d["streak"] = streak.count
    d["streak_unit"] = streak.unit
    d["streak_text"] = format_streak(streak)
    d["week_completed"] = is_week_fully_completed(habit.rule, habit.ledger, target)
    d["month_completed"] = is_month_fully_completed(habit.rule, habit.ledger, target)
    return d
