"""Schedule reconciliation for recurrence-rule changes.

When a habit moves to a new rule, completions recorded on days the new rule
no longer schedules are pruned. Reconciliation only ever removes entries.
"""

from __future__ import annotations

import logging
from datetime import date

from habitify.models import CompletionLedger, Habit, Monthly, RecurrenceRule, Weekly
from habitify.recurrence import is_scheduled

logger = logging.getLogger(__name__)


def partition_completions(
    ledger: CompletionLedger, rule: RecurrenceRule
) -> tuple[list[date], list[date]]:
    """Split completions into (still scheduled, no longer scheduled) under *rule*."""
    valid: list[date] = []
    invalid: list[date] = []
    for day in ledger:
        (valid if is_scheduled(rule, day) else invalid).append(day)
    return valid, invalid


def reconcile(ledger: CompletionLedger, new_rule: RecurrenceRule) -> CompletionLedger:
    """Return *ledger* without the days *new_rule* does not schedule."""
    valid, invalid = partition_completions(ledger, new_rule)
    if not invalid:
        return ledger
    return CompletionLedger(frozenset(valid))


def has_schedule_changed(old_rule: RecurrenceRule, new_rule: RecurrenceRule) -> bool:
    """Whether moving from *old_rule* to *new_rule* changes which days are due.

    Compares the kind, then the weekday or day-of-month sets as sets.
    """
    if old_rule.kind != new_rule.kind:
        return True
    if isinstance(old_rule, Weekly) and isinstance(new_rule, Weekly):
        return set(old_rule.weekdays) != set(new_rule.weekdays)
    if isinstance(old_rule, Monthly) and isinstance(new_rule, Monthly):
        return set(old_rule.days_of_month) != set(new_rule.days_of_month)
    return False


def apply_rule_change(habit: Habit, new_rule: RecurrenceRule) -> list[date]:
    """Move *habit* to *new_rule*, pruning completions first.

    The ledger is reconciled before the rule is committed, so the habit never
    holds completions that are invalid for its active rule. Returns the pruned
    days.
    """
    _, invalid = partition_completions(habit.ledger, new_rule)
    changed = has_schedule_changed(habit.rule, new_rule)
    if invalid:
        habit.ledger = reconcile(habit.ledger, new_rule)
        logger.info(
            "habit %s: pruned %d completion(s) invalid under %s",
            habit.id, len(invalid), new_rule.kind,
        )
    habit.rule = new_rule
    if changed or invalid:
        habit.revision += 1
    return invalid
