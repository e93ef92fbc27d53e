"""Alert preferences: the master on/off switch, per-domain toggles, and times.

The master switch doubles as the host's authorization grant: with alerts off,
every reconcile is a no-op and nothing already pending is touched.
"""

from __future__ import annotations

import dataclasses
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path

from pump_alerts.domain import MealReminder, MealType
from pump_alerts.identifiers import Domain
from pump_alerts.rules import parse_hhmm
from pump_alerts.storage import STATE_DIR, read_json, write_json

PREFERENCES_FILE: Path = STATE_DIR / "preferences.json"


@dataclass(frozen=True, slots=True)
class AlertPreferences:
    enabled: bool = True
    disabled_domains: list[str] = field(default_factory=list)
    silence_completed_tasks: bool = False
    habits_time: str = "09:00"
    check_in_time: str = "18:00"
    rest_days: list[int] = field(default_factory=list)  # UI indices, 0=Monday
    nutrition_supplement_time: str = "08:00"
    workout_supplement_time: str = "17:00"
    progress_photo_weekday: int = 2  # 1=Sunday
    progress_photo_time: str = ""  # empty = off
    meal_times: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for value in (
            self.habits_time,
            self.check_in_time,
            self.nutrition_supplement_time,
            self.workout_supplement_time,
        ):
            parse_hhmm(value)
        if self.progress_photo_time:
            parse_hhmm(self.progress_photo_time)
        if not 1 <= self.progress_photo_weekday <= 7:
            raise ValueError(f"progress_photo_weekday must be 1..7, got {self.progress_photo_weekday}")
        bad = [d for d in self.rest_days if not 0 <= d <= 6]
        if bad:
            raise ValueError(f"rest_days must be 0..6, got {bad}")
        for meal, value in self.meal_times.items():
            MealType(meal)
            parse_hhmm(value)

    def domain_enabled(self, domain: Domain) -> bool:
        return self.enabled and domain.value not in self.disabled_domains

    def meal_reminders(self) -> list[MealReminder]:
        reminders = []
        for meal in MealType:
            value = self.meal_times.get(meal.value)
            if value:
                hour, minute = parse_hhmm(value)
                reminders.append(MealReminder(meal_type=meal, hour=hour, minute=minute))
        return reminders


def load() -> AlertPreferences:
    """Read preferences from disk; defaults if missing. Unknown keys are dropped."""
    data = read_json(PREFERENCES_FILE)
    if data is None:
        return AlertPreferences()
    known = {f.name for f in dataclasses.fields(AlertPreferences)}
    return AlertPreferences(**{k: v for k, v in data.items() if k in known})


def save(prefs: AlertPreferences) -> None:
    write_json(PREFERENCES_FILE, asdict(prefs))


def update(**changes: object) -> AlertPreferences:
    """Apply changes to the stored preferences and persist them."""
    prefs = replace(load(), **changes)
    save(prefs)
    return prefs


def set_domain_enabled(domain: Domain, enabled: bool) -> AlertPreferences:
    current = load()
    disabled = [d for d in current.disabled_domains if d != domain.value]
    if not enabled:
        disabled.append(domain.value)
    return update(disabled_domains=sorted(disabled))


def set_meal_time(meal: MealType, value: str | None) -> AlertPreferences:
    times = dict(load().meal_times)
    if value is None:
        times.pop(meal.value, None)
    else:
        parse_hhmm(value)
        times[meal.value] = value
    return update(meal_times=times)
