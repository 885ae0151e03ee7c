"""Habitify core library — habit scheduling and streak-analysis engine.

Public API re-exports for convenient imports:
    from habitify import evaluate_schedule, toggle_completion, current_streak, ...
"""

# Models
from habitify.models import (
    Weekday,
    Daily,
    Weekly,
    Monthly,
    RecurrenceRule,
    RuleValidationError,
    CompletionLedger,
    Habit,
    HabitsFile,
    StreakResult,
    Settings,
    rule_from_dict,
)

# Calendar
from habitify.dates import (
    start_of_day,
    is_same_day,
    is_past_or_today,
    week_range,
    month_days,
    month_grid,
    lifetime_dates,
    shift_days,
    shift_months,
    weekday_of,
)

# Recurrence
from habitify.recurrence import (
    is_scheduled,
    evaluate_schedule,
    can_toggle,
    normalize_rule,
    describe_rule,
)

# Ledger
from habitify.ledger import (
    is_completed,
    toggle_completion,
)

# Streaks
from habitify.streaks import (
    current_streak,
    weekly_streak,
    streak_for,
    streak_text,
    is_week_fully_completed,
    is_month_fully_completed,
    StreakCache,
)

# Reconciliation
from habitify.reconcile import (
    reconcile,
    partition_completions,
    has_schedule_changed,
    apply_rule_change,
)

# Workspace
from habitify.workspace import (
    workspace_root,
    habits_path,
    settings_path,
    load_settings,
    today_local,
    now_local,
    configure_logging,
)

# Habit store
from habitify.habits import (
    ToggleNotAllowedError,
    validate_habit,
    load_habits,
    save_habits,
    find_habit,
    create_habit,
    update_habit,
    delete_habit,
    toggle_habit_completion,
    habits_for_day,
    habits_for_week,
    habits_for_month,
    summarize_habit,
)
