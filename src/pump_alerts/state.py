"""Persisted domain inputs and today's completions.

Entities live one per markdown file under DATA_DIR/<kind>/; the weekly
workout schedule is a single YAML file. Completions are ephemeral JSON that
resets when the date changes.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime
from pathlib import Path

import yaml

from pump_alerts.domain import (
    DailyTask,
    Habit,
    ItineraryEvent,
    ScheduleDay,
    Supplement,
    Timer,
    WorkoutSession,
)
from pump_alerts.rules import parse_hhmm
from pump_alerts.storage import (
    DATA_DIR,
    STATE_DIR,
    TZ,
    _atomic_write,
    read_json,
    read_md_dir,
    remove_md,
    write_json,
    write_md,
)

TASKS_DIR = DATA_DIR / "tasks"
HABITS_DIR = DATA_DIR / "habits"
SUPPLEMENTS_DIR = DATA_DIR / "supplements"
TIMERS_DIR = DATA_DIR / "timers"
ITINERARY_DIR = DATA_DIR / "itinerary"
SCHEDULE_FILE = DATA_DIR / "schedule.yaml"
COMPLETIONS_FILE: Path = STATE_DIR / "completions.json"

log = logging.getLogger(__name__)


# --- Entities ---


def list_tasks() -> list[DailyTask]:
    return read_md_dir(TASKS_DIR, DailyTask)


def save_task(task: DailyTask) -> None:
    write_md(TASKS_DIR, task)


def remove_task(task_id: str) -> bool:
    return remove_md(TASKS_DIR, task_id)


def list_habits() -> list[Habit]:
    return read_md_dir(HABITS_DIR, Habit)


def save_habit(habit: Habit) -> None:
    write_md(HABITS_DIR, habit)


def remove_habit(habit_id: str) -> bool:
    return remove_md(HABITS_DIR, habit_id)


def list_supplements() -> list[Supplement]:
    return read_md_dir(SUPPLEMENTS_DIR, Supplement)


def save_supplement(supplement: Supplement) -> None:
    write_md(SUPPLEMENTS_DIR, supplement)


def remove_supplement(supplement_id: str) -> bool:
    return remove_md(SUPPLEMENTS_DIR, supplement_id)


def list_timers() -> list[Timer]:
    return read_md_dir(TIMERS_DIR, Timer)


def save_timer(timer: Timer) -> None:
    write_md(TIMERS_DIR, timer)


def remove_timer(timer_id: str) -> bool:
    return remove_md(TIMERS_DIR, timer_id)


def list_itinerary() -> list[ItineraryEvent]:
    return read_md_dir(ITINERARY_DIR, ItineraryEvent)


def save_itinerary_event(event: ItineraryEvent) -> None:
    write_md(ITINERARY_DIR, event)


def remove_itinerary_event(event_id: str) -> bool:
    return remove_md(ITINERARY_DIR, event_id)


# --- Weekly workout schedule ---


def load_schedule() -> list[ScheduleDay]:
    """Read schedule.yaml: a mapping of day name to a list of {name, time} sessions."""
    if not SCHEDULE_FILE.exists():
        return []
    try:
        data = yaml.safe_load(SCHEDULE_FILE.read_text()) or {}
    except yaml.YAMLError:
        log.warning("Skipping corrupt schedule file: %s", SCHEDULE_FILE)
        return []
    if not isinstance(data, dict):
        log.warning("Schedule file is not a mapping: %s", SCHEDULE_FILE)
        return []

    days: list[ScheduleDay] = []
    for day, sessions in data.items():
        try:
            parsed = []
            for session in sessions or []:
                hour, minute = parse_hhmm(str(session["time"]))
                parsed.append(WorkoutSession(name=str(session["name"]), hour=hour, minute=minute))
            days.append(ScheduleDay(day=str(day), sessions=parsed))
        except (KeyError, TypeError, ValueError):
            log.warning("Skipping bad schedule entry for %r in %s", day, SCHEDULE_FILE)
    return days


def save_schedule(days: list[ScheduleDay]) -> None:
    data = {
        d.day: [{"name": s.name, "time": f"{s.hour:02d}:{s.minute:02d}"} for s in d.sessions]
        for d in days
    }
    _atomic_write(SCHEDULE_FILE, yaml.safe_dump(data, sort_keys=False))


# --- Today's completions ---


@dataclass(frozen=True, slots=True)
class Completions:
    day: str  # ISO date the sets below belong to
    tasks: list[str] = field(default_factory=list)
    habits: list[str] = field(default_factory=list)
    check_ins: list[int] = field(default_factory=list)  # UI indices, 0=Monday


def _today() -> str:
    return datetime.now(TZ).date().isoformat()


def load_completions(today: date | None = None) -> Completions:
    """Completions for today; anything recorded on an earlier date is dropped."""
    day = today.isoformat() if today else _today()
    data = read_json(COMPLETIONS_FILE)
    if data is None or data.get("day") != day:
        return Completions(day=day)
    return Completions(
        day=day,
        tasks=list(data.get("tasks", [])),
        habits=list(data.get("habits", [])),
        check_ins=[int(i) for i in data.get("check_ins", [])],
    )


def _save_completions(completions: Completions) -> None:
    write_json(COMPLETIONS_FILE, asdict(completions))


def mark_task_done(task_id: str) -> None:
    current = load_completions()
    if task_id not in current.tasks:
        _save_completions(replace(current, tasks=[*current.tasks, task_id]))


def mark_habit_done(habit_id: str) -> None:
    current = load_completions()
    if habit_id not in current.habits:
        _save_completions(replace(current, habits=[*current.habits, habit_id]))


def mark_checked_in() -> None:
    current = load_completions()
    index = datetime.now(TZ).weekday()
    if index not in current.check_ins:
        _save_completions(replace(current, check_ins=[*current.check_ins, index]))
