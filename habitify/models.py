"""Typed dataclasses for the Habitify data model.

All persisted models use from_dict/to_dict for YAML serialization.
Unknown keys are ignored; missing keys use defaults. Recurrence rules are
frozen value objects and validate themselves on construction.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import IntEnum
from typing import Any, ClassVar


DEFAULT_COLOR = "#9B59B6"
DEFAULT_ICON = "star.fill"

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class RuleValidationError(ValueError):
    """A recurrence rule was built from out-of-range or unknown values."""


# ── Primitives ────────────────────────────────────────────────


class Weekday(IntEnum):
    """Day of week, numbered Sunday=1 .. Saturday=7."""

    SUNDAY = 1
    MONDAY = 2
    TUESDAY = 3
    WEDNESDAY = 4
    THURSDAY = 5
    FRIDAY = 6
    SATURDAY = 7

    @property
    def short(self) -> str:
        return self.name[:3].title()

    @classmethod
    def parse(cls, value: Any) -> Weekday:
        """Accept 1-7, 'mon', 'Monday', or a Weekday."""
        if isinstance(value, Weekday):
            return value
        if isinstance(value, bool):
            raise RuleValidationError(f"Invalid weekday: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise RuleValidationError(f"Weekday out of range 1-7: {value}") from None
        if isinstance(value, str):
            key = value.strip().lower()
            if key.isdigit():
                return cls.parse(int(key))
            for day in cls:
                if day.name.lower() == key or day.name[:3].lower() == key:
                    return day
        raise RuleValidationError(f"Invalid weekday: {value!r}")


def is_valid_color(value: str) -> bool:
    return bool(_HEX_COLOR.match(value or ""))


# ── Recurrence rules ──────────────────────────────────────────


@dataclass(frozen=True)
class Daily:
    """Scheduled on every calendar day."""

    kind: ClassVar[str] = "daily"

    def to_dict(self) -> dict[str, Any]:
        return {"frequency": self.kind}


@dataclass(frozen=True)
class Weekly:
    """Scheduled on a fixed set of weekdays."""

    weekdays: frozenset[Weekday] = frozenset()

    kind: ClassVar[str] = "weekly"

    def __post_init__(self) -> None:
        parsed = frozenset(Weekday.parse(d) for d in self.weekdays)
        object.__setattr__(self, "weekdays", parsed)

    def to_dict(self) -> dict[str, Any]:
        return {"frequency": self.kind, "weekdays": sorted(int(d) for d in self.weekdays)}


@dataclass(frozen=True)
class Monthly:
    """Scheduled on a fixed set of days of the month (1-31)."""

    days_of_month: frozenset[int] = frozenset()

    kind: ClassVar[str] = "monthly"

    def __post_init__(self) -> None:
        parsed = set()
        for d in self.days_of_month:
            if isinstance(d, bool) or not isinstance(d, int):
                raise RuleValidationError(f"Day of month must be an integer: {d!r}")
            if d < 1 or d > 31:
                raise RuleValidationError(f"Day of month out of range 1-31: {d}")
            parsed.add(d)
        object.__setattr__(self, "days_of_month", frozenset(parsed))

    def to_dict(self) -> dict[str, Any]:
        return {"frequency": self.kind, "days_of_month": sorted(self.days_of_month)}


RecurrenceRule = Daily | Weekly | Monthly

FREQUENCIES = (Daily.kind, Weekly.kind, Monthly.kind)


def _values(d: dict[str, Any], key: str) -> list[Any]:
    raw = d.get(key)
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple, set, frozenset)):
        raise RuleValidationError(f"{key} must be a list, got {type(raw).__name__}")
    return list(raw)


def rule_from_dict(d: dict[str, Any] | None) -> RecurrenceRule:
    """Parse a schedule mapping such as ``{"frequency": "weekly", "weekdays": [2, 4]}``.

    A missing mapping means Daily, matching how habits are created by default.
    """
    if not d:
        return Daily()
    if not isinstance(d, dict):
        raise RuleValidationError(f"Schedule must be a mapping, got {type(d).__name__}")
    frequency = str(d.get("frequency", Daily.kind)).strip().lower()
    if frequency == Daily.kind:
        return Daily()
    if frequency == Weekly.kind:
        return Weekly(_values(d, "weekdays"))
    if frequency == Monthly.kind:
        return Monthly(_values(d, "days_of_month"))
    raise RuleValidationError(f"Invalid frequency: {frequency!r}")


# ── Ledger ────────────────────────────────────────────────────


@dataclass(frozen=True)
class CompletionLedger:
    """Immutable set of calendar days a habit was marked done."""

    dates: frozenset[date] = frozenset()

    def __post_init__(self) -> None:
        days = frozenset(d.date() if isinstance(d, datetime) else d for d in self.dates)
        object.__setattr__(self, "dates", days)

    def __len__(self) -> int:
        return len(self.dates)

    def __iter__(self):
        return iter(sorted(self.dates))

    def __contains__(self, day: object) -> bool:
        if isinstance(day, datetime):
            day = day.date()
        return day in self.dates

    @classmethod
    def from_list(cls, items: list[Any] | None) -> CompletionLedger:
        days = set()
        for item in items or []:
            if isinstance(item, datetime):
                days.add(item.date())
            elif isinstance(item, date):
                days.add(item)
            else:
                days.add(date.fromisoformat(str(item)[:10]))
        return cls(frozenset(days))

    def to_list(self) -> list[str]:
        return [d.isoformat() for d in sorted(self.dates)]


# ── Habit ─────────────────────────────────────────────────────


def new_habit_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Habit:
    id: str = field(default_factory=new_habit_id)
    name: str = ""
    color: str = DEFAULT_COLOR
    icon: str = DEFAULT_ICON
    created_at: datetime | None = None
    rule: RecurrenceRule = field(default_factory=Daily)
    ledger: CompletionLedger = field(default_factory=CompletionLedger)
    # Bumped on every ledger or rule mutation; part of the streak cache key.
    revision: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        created = d.get("created_at")
        if isinstance(created, str) and created:
            created = datetime.fromisoformat(created)
        elif not isinstance(created, datetime):
            created = None
        return cls(
            id=str(d.get("id") or new_habit_id()),
            name=str(d.get("name", "")),
            color=str(d.get("color", DEFAULT_COLOR)),
            icon=str(d.get("icon", DEFAULT_ICON)),
            created_at=created,
            rule=rule_from_dict(d.get("schedule")),
            ledger=CompletionLedger.from_list(d.get("completions")),
            revision=int(d.get("revision", 0) or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "created_at": self.created_at.isoformat(timespec="seconds") if self.created_at else None,
            "schedule": self.rule.to_dict(),
            "completions": self.ledger.to_list(),
            "revision": self.revision,
        }


@dataclass
class HabitsFile:
    habits: list[Habit] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HabitsFile:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(habits=[Habit.from_dict(h) for h in (d.get("habits") or []) if isinstance(h, dict)])

    def to_dict(self) -> dict[str, Any]:
        return {"habits": [h.to_dict() for h in self.habits]}


# ── Streaks ───────────────────────────────────────────────────


@dataclass(frozen=True)
class StreakResult:
    count: int = 0
    unit: str | None = None  # "day", "week", or None when the rule has no streaks

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "unit": self.unit}


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str = "UTC"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            log_level=str(d.get("log_level", "INFO")).upper(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"timezone": self.timezone, "log_level": self.log_level}
