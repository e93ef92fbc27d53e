"""Plain-data inputs the rule adapters consume.

These mirror what the app persists for each feature. Every record keeps its
display text in `name`, which is also the markdown body when stored on disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import uuid4

from pump_alerts.identifiers import WEEKDAY_NUMBERS
from pump_alerts.rules import parse_hhmm


def _new_id() -> str:
    return uuid4().hex[:8]


def parse_instant(value: str) -> datetime:
    instant = datetime.fromisoformat(value)
    if instant.tzinfo is None:
        raise ValueError(f"Datetime must include a UTC offset: {value!r}")
    return instant


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True, slots=True)
class DailyTask:
    id: str
    name: str
    time: str  # "HH:mm"
    repeats: bool = True

    def __post_init__(self) -> None:
        parse_hhmm(self.time)

    @staticmethod
    def new(name: str, *, time: str, repeats: bool = True) -> "DailyTask":
        return DailyTask(id=_new_id(), name=name, time=time, repeats=repeats)


@dataclass(frozen=True, slots=True)
class Habit:
    id: str
    name: str

    @staticmethod
    def new(name: str) -> "Habit":
        return Habit(id=_new_id(), name=name)


@dataclass(frozen=True, slots=True)
class MealReminder:
    meal_type: MealType
    hour: int
    minute: int


@dataclass(frozen=True, slots=True)
class Supplement:
    id: str
    name: str
    kind: str = "nutrition"  # or "workout"

    def __post_init__(self) -> None:
        if self.kind not in ("nutrition", "workout"):
            raise ValueError(f"Supplement kind must be nutrition or workout, got {self.kind!r}")

    @staticmethod
    def new(name: str, *, kind: str = "nutrition") -> "Supplement":
        return Supplement(id=_new_id(), name=name, kind=kind)


@dataclass(frozen=True, slots=True)
class Timer:
    """A running countdown. `kind` picks the alert domain and wording."""

    id: str
    name: str
    end_at: str  # ISO datetime with offset
    kind: str = "activity"  # "activity", "recovery" or "tracking"
    body: str = ""  # custom text for tracking timers

    def __post_init__(self) -> None:
        if self.kind not in ("activity", "recovery", "tracking"):
            raise ValueError(f"Unknown timer kind: {self.kind!r}")
        parse_instant(self.end_at)

    @property
    def ends(self) -> datetime:
        return parse_instant(self.end_at)

    @staticmethod
    def new(name: str, *, end_at: datetime, kind: str = "activity", body: str = "") -> "Timer":
        return Timer(id=_new_id(), name=name, end_at=end_at.isoformat(), kind=kind, body=body)


@dataclass(frozen=True, slots=True)
class ItineraryEvent:
    id: str
    name: str
    at: str  # ISO datetime with offset

    def __post_init__(self) -> None:
        parse_instant(self.at)

    @property
    def when(self) -> datetime:
        return parse_instant(self.at)

    @staticmethod
    def new(name: str, *, at: datetime) -> "ItineraryEvent":
        return ItineraryEvent(id=_new_id(), name=name, at=at.isoformat())


@dataclass(frozen=True, slots=True)
class WorkoutSession:
    name: str
    hour: int
    minute: int


@dataclass(frozen=True, slots=True)
class ScheduleDay:
    day: str  # "Sun" .. "Sat"
    sessions: list[WorkoutSession] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.day not in WEEKDAY_NUMBERS:
            raise ValueError(f"Unknown day {self.day!r}; expected one of {', '.join(WEEKDAY_NUMBERS)}")
