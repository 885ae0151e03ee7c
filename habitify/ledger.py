"""Completion ledger operations: membership and toggling."""

from __future__ import annotations

import logging
from datetime import date

from habitify.dates import DayLike, start_of_day
from habitify.models import CompletionLedger

logger = logging.getLogger(__name__)


def is_completed(ledger: CompletionLedger, day: DayLike) -> bool:
    return start_of_day(day) in ledger.dates


def toggle_completion(ledger: CompletionLedger, day: DayLike) -> CompletionLedger:
    """Add *day* if absent, remove it if present.

    Returns a new ledger; applying the same toggle twice gives back the
    original ledger.
    """
    target = start_of_day(day)
    if target in ledger.dates:
        logger.debug("ledger: unmark %s", target)
        return CompletionLedger(ledger.dates - {target})
    logger.debug("ledger: mark %s", target)
    return CompletionLedger(ledger.dates | {target})


def completed_days(ledger: CompletionLedger, days: list[date]) -> list[date]:
    return [start_of_day(d) for d in days if is_completed(ledger, d)]
