"""Declarative reminder rules.

A rule says *when* an alert should fire; the trigger builder turns it into
the host's primitive triggers. Rules are derived fresh from domain state on
every reconciliation and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


def _check_time(hour: int, minute: int) -> None:
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise ValueError(f"Invalid time of day: {hour:02d}:{minute:02d}")


def _check_aware(value: datetime) -> None:
    if value.tzinfo is None:
        raise ValueError(f"Datetime must be timezone-aware: {value.isoformat()}")


def parse_hhmm(value: str) -> tuple[int, int]:
    """Parse "HH:mm" into (hour, minute)."""
    parts = str(value).strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Expected HH:MM, got {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    _check_time(hour, minute)
    return hour, minute


@dataclass(frozen=True, slots=True)
class WeeklyRecurring:
    """Repeats every week on each selected weekday (1=Sunday .. 7=Saturday)."""

    entity: str | None
    weekdays: frozenset[int]
    hour: int
    minute: int
    title: str
    body: str
    suppress_today: bool = False

    def __post_init__(self) -> None:
        _check_time(self.hour, self.minute)
        bad = [w for w in self.weekdays if not 1 <= w <= 7]
        if bad:
            raise ValueError(f"Weekdays must be 1..7, got {sorted(bad)}")


@dataclass(frozen=True, slots=True)
class DailyRecurring:
    entity: str
    hour: int
    minute: int
    title: str
    body: str

    def __post_init__(self) -> None:
        _check_time(self.hour, self.minute)


@dataclass(frozen=True, slots=True)
class DailyCountdownAt:
    """Fires once at the next occurrence of hour:minute; re-armed on reconcile."""

    entity: str
    hour: int
    minute: int
    title: str
    body: str

    def __post_init__(self) -> None:
        _check_time(self.hour, self.minute)


@dataclass(frozen=True, slots=True)
class OneShotAfter:
    """Fires once at fire_at. Used for running timers; never re-armed."""

    entity: str
    fire_at: datetime
    title: str
    body: str

    def __post_init__(self) -> None:
        _check_aware(self.fire_at)


@dataclass(frozen=True, slots=True)
class OnceAt:
    entity: str
    at: datetime
    title: str
    body: str

    def __post_init__(self) -> None:
        _check_aware(self.at)


ReminderRule = WeeklyRecurring | DailyRecurring | DailyCountdownAt | OneShotAfter | OnceAt
