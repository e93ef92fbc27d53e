"""Per-domain rule shaping: plain domain inputs in, reminder rules out.

`today` is always a host weekday (1=Sunday). Anything indexed in UI order
(0=Monday) is converted here with `host_weekday`, never by callers.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from pump_alerts.domain import (
    DailyTask,
    Habit,
    ItineraryEvent,
    MealReminder,
    ScheduleDay,
    Supplement,
    Timer,
)
from pump_alerts.identifiers import WEEKDAY_NAMES, WEEKDAY_NUMBERS, Domain, host_weekday
from pump_alerts.rules import (
    DailyCountdownAt,
    DailyRecurring,
    OnceAt,
    OneShotAfter,
    ReminderRule,
    WeeklyRecurring,
    parse_hhmm,
)

ALL_WEEKDAYS = frozenset(WEEKDAY_NAMES)

TIMER_KIND_DOMAINS = {
    "activity": Domain.ACTIVITY_TIMER,
    "recovery": Domain.RECOVERY_TIMER,
    "tracking": Domain.TIME_TRACKING,
}


def daily_task_rules(
    tasks: Iterable[DailyTask],
    *,
    completed_ids: Collection[str] = (),
    silence_completed: bool = False,
) -> list[ReminderRule]:
    """Repeating tasks fire every weekday; one-off tasks count down to the next HH:mm.

    With silence_completed, a task already done today loses today's alert only.
    """
    rules: list[ReminderRule] = []
    for task in tasks:
        hour, minute = parse_hhmm(task.time)
        done = silence_completed and task.id in completed_ids
        title, body = task.name, f"Reminder: {task.name}"
        if task.repeats:
            rules.append(
                WeeklyRecurring(
                    entity=task.id,
                    weekdays=ALL_WEEKDAYS,
                    hour=hour,
                    minute=minute,
                    title=title,
                    body=body,
                    suppress_today=done,
                )
            )
        elif not done:
            rules.append(DailyCountdownAt(entity=task.id, hour=hour, minute=minute, title=title, body=body))
    return rules


def habit_rules(
    habits: Iterable[Habit],
    *,
    completed_ids: Collection[str] = (),
    hour: int,
    minute: int,
    today: int,
) -> list[ReminderRule]:
    """One alert per weekday naming every habit; today's drops the ones already done."""
    habits = list(habits)
    if not habits:
        return []
    all_names = ", ".join(h.name for h in habits)
    remaining = [h.name for h in habits if h.id not in completed_ids]

    rules: list[ReminderRule] = []
    for weekday in sorted(ALL_WEEKDAYS):
        names = ", ".join(remaining) if weekday == today and remaining else all_names
        rules.append(
            WeeklyRecurring(
                entity=None,
                weekdays=frozenset({weekday}),
                hour=hour,
                minute=minute,
                title="Habits Reminder",
                body=f"Don't forget to check your {names} habit off for today!",
                suppress_today=not remaining,
            )
        )
    return rules


def meal_rules(reminders: Iterable[MealReminder]) -> list[ReminderRule]:
    return [
        DailyRecurring(
            entity=r.meal_type.value,
            hour=r.hour,
            minute=r.minute,
            title="Meal Reminder",
            body=f"Don't forget to log your {r.meal_type.display_name.lower()}!",
        )
        for r in reminders
    ]


def supplement_rules(
    supplements: Iterable[Supplement], *, kind: str, hour: int, minute: int
) -> list[ReminderRule]:
    if kind == "workout":
        title, lead = "Workout Supplements", "Pre-workout"
    else:
        title, lead = "Daily Supplements", "Time to take"
    return [
        DailyRecurring(entity=s.id, hour=hour, minute=minute, title=title, body=f"{lead}: {s.name}")
        for s in supplements
        if s.kind == kind
    ]


def check_in_rules(
    *,
    rest_days: Collection[int],
    completed_days: Collection[int],
    hour: int,
    minute: int,
    today: int,
) -> list[ReminderRule]:
    """Check-in on every non-rest day; rest_days and completed_days are UI indices (0=Monday)."""
    weekdays = frozenset(host_weekday(i) for i in range(7) if i not in rest_days)
    if not weekdays:
        return []
    done_today = any(host_weekday(i) == today for i in completed_days)
    return [
        WeeklyRecurring(
            entity=None,
            weekdays=weekdays,
            hour=hour,
            minute=minute,
            title="Daily Workout Check-In",
            body="Time to workout today!",
            suppress_today=done_today,
        )
    ]


def weekly_schedule_rules(days: Iterable[ScheduleDay]) -> list[ReminderRule]:
    rules: list[ReminderRule] = []
    for item in days:
        weekday = WEEKDAY_NUMBERS[item.day]
        for index, session in enumerate(item.sessions):
            rules.append(
                WeeklyRecurring(
                    entity=f"s{index}",
                    weekdays=frozenset({weekday}),
                    hour=session.hour,
                    minute=session.minute,
                    title="Workout Reminder",
                    body=f"Time for your {session.name} workout!",
                )
            )
    return rules


def itinerary_rules(events: Iterable[ItineraryEvent]) -> list[ReminderRule]:
    return [
        OnceAt(entity=e.id, at=e.when, title="Itinerary Reminder", body=f"Upcoming: {e.name}")
        for e in events
    ]


def timer_rule(timer: Timer) -> ReminderRule:
    if timer.kind == "recovery":
        title, body = "Recovery Tracking", f"Your {timer.name} session is complete!"
    elif timer.kind == "tracking":
        title, body = timer.name, timer.body or f"{timer.name} is done"
    else:
        title, body = "Activity Timer", f"Your {timer.name} timer has finished!"
    return OneShotAfter(entity=timer.id, fire_at=timer.ends, title=title, body=body)


def timer_rules(timers: Iterable[Timer], *, kind: str) -> list[ReminderRule]:
    return [timer_rule(t) for t in timers if t.kind == kind]


def progress_photo_rules(*, weekday: int, hour: int, minute: int) -> list[ReminderRule]:
    return [
        WeeklyRecurring(
            entity="photo",
            weekdays=frozenset({weekday}),
            hour=hour,
            minute=minute,
            title="Weekly Progress",
            body="Time to take your weekly progress photo!",
        )
    ]
