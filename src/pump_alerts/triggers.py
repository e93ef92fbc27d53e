"""Turn reminder rules into the host's primitive triggers.

The host only understands four shapes: a weekly calendar match (one weekday
plus time), a daily calendar match, a one-off calendar date, and a relative
interval. There is no "skip this occurrence", so a weekly rule is fanned out
into one trigger per weekday and today's is simply left out when suppressed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from pump_alerts.identifiers import Domain, identifier
from pump_alerts.rules import (
    DailyCountdownAt,
    DailyRecurring,
    OnceAt,
    OneShotAfter,
    ReminderRule,
    WeeklyRecurring,
)


@dataclass(frozen=True, slots=True)
class WeeklyCalendar:
    weekday: int  # 1=Sunday
    hour: int
    minute: int
    repeats: bool = True


@dataclass(frozen=True, slots=True)
class DailyCalendar:
    hour: int
    minute: int
    repeats: bool = True


@dataclass(frozen=True, slots=True)
class CalendarDate:
    at: datetime
    repeats: bool = False


@dataclass(frozen=True, slots=True)
class TimeInterval:
    seconds: float
    repeats: bool = False


PrimitiveTrigger = WeeklyCalendar | DailyCalendar | CalendarDate | TimeInterval


@dataclass(frozen=True, slots=True)
class Content:
    title: str
    body: str
    sound: str = "default"


@dataclass(frozen=True, slots=True)
class ScheduledAlert:
    identifier: str
    trigger: PrimitiveTrigger
    content: Content


def next_occurrence(hour: int, minute: int, now: datetime) -> datetime:
    """Today's hour:minute if still ahead of now, else tomorrow's."""
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def build(domain: Domain, rule: ReminderRule, today: int, now: datetime) -> list[ScheduledAlert]:
    """Expand one rule into zero or more (identifier, trigger, content) alerts.

    `today` is the host weekday (1=Sunday) of `now`; it is passed separately so
    callers can pin it in tests.
    """
    content = Content(title=rule.title, body=rule.body)

    if isinstance(rule, WeeklyRecurring):
        return [
            ScheduledAlert(
                identifier(domain, rule.entity, weekday),
                WeeklyCalendar(weekday=weekday, hour=rule.hour, minute=rule.minute),
                content,
            )
            for weekday in sorted(rule.weekdays)
            if not (weekday == today and rule.suppress_today)
        ]

    if isinstance(rule, DailyRecurring):
        trigger: PrimitiveTrigger = DailyCalendar(hour=rule.hour, minute=rule.minute)
        return [ScheduledAlert(identifier(domain, rule.entity), trigger, content)]

    if isinstance(rule, DailyCountdownAt):
        trigger = CalendarDate(at=next_occurrence(rule.hour, rule.minute, now))
        return [ScheduledAlert(identifier(domain, rule.entity), trigger, content)]

    if isinstance(rule, OneShotAfter):
        if rule.fire_at <= now:
            return []
        seconds = (rule.fire_at - now).total_seconds()
        return [ScheduledAlert(identifier(domain, rule.entity), TimeInterval(seconds), content)]

    if isinstance(rule, OnceAt):
        if rule.at <= now:
            return []
        return [ScheduledAlert(identifier(domain, rule.entity), CalendarDate(at=rule.at), content)]

    raise TypeError(f"Unknown reminder rule: {type(rule).__name__}")


def build_all(
    domain: Domain, rules: list[ReminderRule], today: int, now: datetime
) -> list[ScheduledAlert]:
    return [alert for rule in rules for alert in build(domain, rule, today, now)]
