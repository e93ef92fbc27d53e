"""Tests for triggers.py — rule to primitive trigger expansion."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from pump_alerts.identifiers import Domain
from pump_alerts.rules import DailyCountdownAt, DailyRecurring, OnceAt, OneShotAfter, WeeklyRecurring
from pump_alerts.triggers import (
    CalendarDate,
    Content,
    DailyCalendar,
    TimeInterval,
    WeeklyCalendar,
    build,
    build_all,
    next_occurrence,
)

TZ = ZoneInfo("America/Los_Angeles")
# Wednesday, host weekday 4
NOW = datetime(2026, 3, 4, 10, 0, tzinfo=TZ)
WED = 4


def _weekly(weekdays, suppress_today=False):
    return WeeklyRecurring(
        entity="t1",
        weekdays=frozenset(weekdays),
        hour=7,
        minute=30,
        title="Stretch",
        body="Reminder: Stretch",
        suppress_today=suppress_today,
    )


def test_weekly_fans_out_one_trigger_per_weekday():
    alerts = build(Domain.DAILY_TASK, _weekly({2, 4, 6}), WED, NOW)

    assert [a.identifier for a in alerts] == ["dailyTask.t1.wd2", "dailyTask.t1.wd4", "dailyTask.t1.wd6"]
    assert alerts[0].trigger == WeeklyCalendar(weekday=2, hour=7, minute=30, repeats=True)


def test_suppression_only_drops_today():
    alerts = build(Domain.DAILY_TASK, _weekly({2, 4, 6}, suppress_today=True), WED, NOW)

    assert [a.trigger.weekday for a in alerts] == [2, 6]


def test_suppression_is_a_noop_when_today_not_selected():
    alerts = build(Domain.DAILY_TASK, _weekly({2, 6}, suppress_today=True), WED, NOW)

    assert len(alerts) == 2


def test_content_passes_through_unchanged():
    (alert,) = build(Domain.DAILY_TASK, _weekly({3}), WED, NOW)

    assert alert.content == Content(title="Stretch", body="Reminder: Stretch", sound="default")


def test_daily_recurring_is_one_repeating_trigger():
    rule = DailyRecurring(entity="lunch", hour=12, minute=30, title="Meal Reminder", body="log it")

    (alert,) = build(Domain.MEAL, rule, WED, NOW)

    assert alert.identifier == "mealReminder.lunch"
    assert alert.trigger == DailyCalendar(hour=12, minute=30, repeats=True)


@pytest.mark.parametrize(
    ("hour", "expected_day"),
    [(9, 5), (10, 5), (11, 4)],
    ids=["earlier-rolls-to-tomorrow", "exactly-now-rolls-to-tomorrow", "later-stays-today"],
)
def test_countdown_targets_next_occurrence(hour, expected_day):
    rule = DailyCountdownAt(entity="t2", hour=hour, minute=0, title="Water", body="Reminder: Water")

    (alert,) = build(Domain.DAILY_TASK, rule, WED, NOW)

    assert alert.identifier == "dailyTask.t2"
    assert isinstance(alert.trigger, CalendarDate)
    assert alert.trigger.repeats is False
    assert alert.trigger.at == datetime(2026, 3, expected_day, hour, 0, tzinfo=TZ)


def test_next_occurrence_drops_seconds():
    now = NOW.replace(second=42, microsecond=7)

    assert next_occurrence(10, 5, now) == datetime(2026, 3, 4, 10, 5, tzinfo=TZ)


def test_one_shot_becomes_relative_interval():
    rule = OneShotAfter(entity="abc", fire_at=NOW + timedelta(minutes=2), title="Activity Timer", body="done")

    (alert,) = build(Domain.ACTIVITY_TIMER, rule, WED, NOW)

    assert alert.identifier == "activityTimer.abc"
    assert alert.trigger == TimeInterval(seconds=120.0, repeats=False)


@pytest.mark.parametrize("offset", [timedelta(0), timedelta(seconds=-1)])
def test_expired_one_shot_builds_nothing(offset):
    rule = OneShotAfter(entity="abc", fire_at=NOW + offset, title="Activity Timer", body="done")

    assert build(Domain.ACTIVITY_TIMER, rule, WED, NOW) == []


def test_once_at_future_and_past():
    future = OnceAt(entity="e1", at=NOW + timedelta(days=2), title="Itinerary Reminder", body="Upcoming: Meet")
    past = OnceAt(entity="e2", at=NOW - timedelta(hours=1), title="Itinerary Reminder", body="Upcoming: Gym")

    alerts = build_all(Domain.ITINERARY, [future, past], WED, NOW)

    assert [a.identifier for a in alerts] == ["itinerary.e1"]
    assert alerts[0].trigger == CalendarDate(at=NOW + timedelta(days=2))


def test_naive_datetimes_are_rejected():
    with pytest.raises(ValueError, match="timezone-aware"):
        OneShotAfter(entity="abc", fire_at=datetime(2026, 3, 4, 10, 0), title="t", body="b")


def test_rule_validates_time_and_weekdays():
    with pytest.raises(ValueError, match="Invalid time"):
        DailyRecurring(entity="x", hour=24, minute=0, title="t", body="b")
    with pytest.raises(ValueError, match="Weekdays must be 1..7"):
        _weekly({0, 3})


def test_unknown_rule_type_raises():
    with pytest.raises(TypeError, match="Unknown reminder rule"):
        build(Domain.DAILY_TASK, object(), WED, NOW)  # type: ignore[arg-type]


def test_build_all_empty():
    assert build_all(Domain.DAILY_TASK, [], WED, NOW) == []
