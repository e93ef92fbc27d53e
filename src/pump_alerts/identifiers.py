"""Deterministic identifiers for pending alerts.

Every alert registered with the host store is named `<domain>.<entity>.wd<N>`,
with the entity and weekday parts optional. The host has no notion of
grouping, so "everything for a domain" is found by prefix match on
`prefix(domain)`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from urllib.parse import quote, unquote

_SEP = "."
_WEEKDAY_TAG = "wd"


class Domain(str, Enum):
    DAILY_TASK = "dailyTask"
    HABIT = "habit.daily"
    MEAL = "mealReminder"
    ACTIVITY_TIMER = "activityTimer"
    RECOVERY_TIMER = "recoveryTimer"
    TIME_TRACKING = "timeTracking"
    CHECK_IN = "dailyCheckIn"
    NUTRITION_SUPPLEMENT = "supp.nutrition"
    WORKOUT_SUPPLEMENT = "supp.workout"
    WEEKLY_SCHEDULE = "weeklySchedule"
    ITINERARY = "itinerary"
    PROGRESS_PHOTO = "weeklyProgress"


# Timer domains hold one-shot alerts that are cancelled by id, not swept.
TIMER_DOMAINS = frozenset({Domain.ACTIVITY_TIMER, Domain.RECOVERY_TIMER, Domain.TIME_TRACKING})


def _escape(entity: str) -> str:
    # "." is the separator, so it must never survive inside an entity
    escaped = quote(entity, safe="").replace(".", "%2E")
    # An entity spelled like a weekday tag must not read as one
    if escaped.startswith(_WEEKDAY_TAG):
        escaped = "%77" + escaped[1:]
    return escaped


@dataclass(frozen=True, slots=True)
class ReminderId:
    domain: Domain
    entity: str | None = None
    weekday: int | None = None  # host numbering, 1=Sunday

    def __post_init__(self) -> None:
        if self.weekday is not None and not 1 <= self.weekday <= 7:
            raise ValueError(f"weekday must be 1..7, got {self.weekday}")
        if self.entity == "":
            raise ValueError("entity must be non-empty when given")
        if self.entity is None and self.weekday is None:
            raise ValueError("identifier needs an entity, a weekday, or both")

    def __str__(self) -> str:
        parts = [self.domain.value]
        if self.entity is not None:
            parts.append(_escape(self.entity))
        if self.weekday is not None:
            parts.append(f"{_WEEKDAY_TAG}{self.weekday}")
        return _SEP.join(parts)


def prefix(domain: Domain) -> str:
    return domain.value + _SEP


def identifier(domain: Domain, entity: str | None = None, weekday: int | None = None) -> str:
    return str(ReminderId(domain, entity, weekday))


def _domain_for(ident: str) -> Domain | None:
    # Longest match first so "habit.daily" wins over any shorter overlap
    for domain in sorted(Domain, key=lambda d: len(d.value), reverse=True):
        if ident.startswith(prefix(domain)):
            return domain
    return None


def parse(ident: str) -> ReminderId:
    """Inverse of `identifier`. Raises ValueError for foreign identifiers."""
    domain = _domain_for(ident)
    if domain is None:
        raise ValueError(f"Unknown alert identifier: {ident!r}")
    rest = ident[len(domain.value) + 1 :]
    parts = rest.split(_SEP) if rest else []
    if len(parts) > 2:
        raise ValueError(f"Malformed alert identifier: {ident!r}")

    weekday: int | None = None
    tail = parts[-1] if parts else ""
    if tail.startswith(_WEEKDAY_TAG) and tail[len(_WEEKDAY_TAG) :].isdigit():
        weekday = int(tail[len(_WEEKDAY_TAG) :])
        parts = parts[:-1]
    if len(parts) > 1:
        raise ValueError(f"Malformed alert identifier: {ident!r}")
    entity = unquote(parts[0]) if parts else None
    return ReminderId(domain, entity, weekday)


# --- Weekday conventions ---
#
# UI order: 0=Monday .. 6=Sunday (Python's date.weekday()).
# Host calendar order: 1=Sunday .. 7=Saturday.

WEEKDAY_NAMES = {1: "Sun", 2: "Mon", 3: "Tue", 4: "Wed", 5: "Thu", 6: "Fri", 7: "Sat"}
WEEKDAY_NUMBERS = {name: number for number, name in WEEKDAY_NAMES.items()}


def host_weekday(ui_index: int) -> int:
    if not 0 <= ui_index <= 6:
        raise ValueError(f"UI weekday index must be 0..6, got {ui_index}")
    return ((ui_index + 1) % 7) + 1


def ui_index(weekday: int) -> int:
    if not 1 <= weekday <= 7:
        raise ValueError(f"weekday must be 1..7, got {weekday}")
    return (weekday + 5) % 7


def today_host_weekday(now: datetime) -> int:
    return host_weekday(now.weekday())
