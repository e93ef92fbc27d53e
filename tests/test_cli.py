"""Tests for the task, habit, timer, catalog, schedule and alerts CLI handlers."""

import io
import sys

import pytest

from pump_alerts import preferences, state
from pump_alerts.alerts_cmd import run_alerts_command, run_checkin_command, run_pending_command
from pump_alerts.catalog_cmd import run_itinerary_command, run_supplement_command
from pump_alerts.habit_cmd import run_habit_command
from pump_alerts.identifiers import Domain
from pump_alerts.main import _dispatch_subcommand
from pump_alerts.schedule_cmd import parse_session, run_schedule_command
from pump_alerts.task_cmd import run_task_command
from pump_alerts.timer_cmd import run_timer_command


def _capture_stdout(fn, *args):
    old = sys.stdout
    sys.stdout = buf = io.StringIO()
    try:
        fn(*args)
    finally:
        sys.stdout = old
    return buf.getvalue()


# --- Tasks ---


def test_task_add_and_list(data_dir):
    output = _capture_stdout(run_task_command, ["add", "Stretch", "--time", "07:30"])
    assert "added" in output
    assert "07:30 daily" in output

    output = _capture_stdout(run_task_command, ["list"])
    assert "Stretch" in output
    assert "[ ]" in output


def test_task_add_once(data_dir):
    _capture_stdout(run_task_command, ["add", "Water", "-t", "09:00", "--once"])

    (task,) = state.list_tasks()
    assert task.repeats is False


def test_task_add_bad_time(data_dir):
    with pytest.raises(SystemExit):
        _capture_stdout(run_task_command, ["add", "Stretch", "--time", "25:00"])
    assert state.list_tasks() == []


def test_task_done_marks_completion(data_dir):
    output = _capture_stdout(run_task_command, ["add", "Stretch", "--time", "07:30"])
    task_id = output.split()[1].rstrip(":")

    output = _capture_stdout(run_task_command, ["done", task_id])
    assert f"done {task_id}" in output

    assert task_id in state.load_completions().tasks
    assert "[x]" in _capture_stdout(run_task_command, ["list"])


def test_task_remove(data_dir):
    output = _capture_stdout(run_task_command, ["add", "Stretch", "--time", "07:30"])
    task_id = output.split()[1].rstrip(":")

    output = _capture_stdout(run_task_command, ["remove", task_id])
    assert "removed" in output

    assert "no daily tasks" in _capture_stdout(run_task_command, ["list"])


def test_task_remove_unknown(data_dir):
    with pytest.raises(SystemExit):
        _capture_stdout(run_task_command, ["remove", "nope"])


# --- Habits ---


def test_habit_lifecycle(data_dir):
    output = _capture_stdout(run_habit_command, ["add", "Read"])
    habit_id = output.split()[1].rstrip(":")

    _capture_stdout(run_habit_command, ["done", habit_id])
    assert habit_id in state.load_completions().habits

    _capture_stdout(run_habit_command, ["remove", habit_id])
    assert "no habits" in _capture_stdout(run_habit_command, ["list"])


# --- Timers ---


def test_timer_start_list_stop(data_dir):
    output = _capture_stdout(run_timer_command, ["start", "Plank", "--minutes", "2"])
    assert "started" in output
    assert "activity timer" in output
    timer_id = output.split()[1].rstrip(":")

    output = _capture_stdout(run_timer_command, ["list"])
    assert "Plank" in output

    output = _capture_stdout(run_timer_command, ["stop", timer_id])
    assert f"stopped {timer_id}" in output
    assert "no running timers" in _capture_stdout(run_timer_command, ["list"])


def test_timer_kind_and_body(data_dir):
    _capture_stdout(
        run_timer_command, ["start", "Posture", "--seconds", "90", "--kind", "tracking", "--body", "Sit up"]
    )

    (timer,) = state.list_timers()
    assert timer.kind == "tracking"
    assert timer.body == "Sit up"


def test_timer_requires_length(data_dir):
    with pytest.raises(SystemExit):
        _capture_stdout(run_timer_command, ["start", "Plank"])


# --- Supplements and itinerary ---


def test_supplement_add_list_remove(data_dir):
    _capture_stdout(run_supplement_command, ["add", "Vitamin D"])
    output = _capture_stdout(run_supplement_command, ["add", "Creatine", "--workout"])
    workout_id = output.split()[1].rstrip(":")

    output = _capture_stdout(run_supplement_command, ["list"])
    assert "Vitamin D" in output
    assert "Creatine" in output

    _capture_stdout(run_supplement_command, ["remove", workout_id])
    assert [s.name for s in state.list_supplements()] == ["Vitamin D"]


def test_itinerary_add_assumes_local_time(data_dir):
    output = _capture_stdout(run_itinerary_command, ["add", "Race", "--at", "2030-05-01T08:00"])
    assert "2030-05-01 08:00" in output

    (event,) = state.list_itinerary()
    assert event.when.tzinfo is not None

    assert "no itinerary events" not in _capture_stdout(run_itinerary_command, ["list"])


# --- Weekly schedule ---


def test_parse_session():
    session = parse_session("Push day@06:30")

    assert (session.name, session.hour, session.minute) == ("Push day", 6, 30)


def test_parse_session_rejects_missing_time():
    with pytest.raises(ValueError):
        parse_session("Push day")


def test_schedule_set_list_clear(data_dir):
    _capture_stdout(run_schedule_command, ["set", "Mon", "Push day@06:30", "Mobility@19:00"])
    _capture_stdout(run_schedule_command, ["set", "Thu", "Legs@07:00"])

    output = _capture_stdout(run_schedule_command, ["list"])
    assert "Push day" in output
    assert "Legs" in output

    _capture_stdout(run_schedule_command, ["clear", "Mon"])
    assert [d.day for d in state.load_schedule()] == ["Thu"]

    _capture_stdout(run_schedule_command, ["clear"])
    assert "no workout schedule" in _capture_stdout(run_schedule_command, ["list"])


# --- Alert preferences ---


def test_alerts_off_and_on(data_dir):
    _capture_stdout(run_alerts_command, ["off"])
    assert preferences.load().enabled is False
    assert "alerts are off" in _capture_stdout(run_pending_command, [])

    _capture_stdout(run_alerts_command, ["on"])
    assert preferences.load().enabled is True


def test_alerts_disable_domain(data_dir):
    output = _capture_stdout(run_alerts_command, ["disable", "habit.daily"])
    assert "disabled habit.daily" in output
    assert preferences.load().domain_enabled(Domain.HABIT) is False

    _capture_stdout(run_alerts_command, ["enable", "habit.daily"])
    assert preferences.load().domain_enabled(Domain.HABIT) is True


def test_alerts_time_and_photo(data_dir):
    _capture_stdout(run_alerts_command, ["time", "checkin", "19:15"])
    _capture_stdout(run_alerts_command, ["time", "photo", "08:00", "--day", "Sun"])

    prefs = preferences.load()
    assert prefs.check_in_time == "19:15"
    assert prefs.progress_photo_time == "08:00"
    assert prefs.progress_photo_weekday == 1

    _capture_stdout(run_alerts_command, ["time", "photo", "off"])
    assert preferences.load().progress_photo_time == ""


def test_alerts_time_day_only_for_photo(data_dir):
    with pytest.raises(SystemExit):
        _capture_stdout(run_alerts_command, ["time", "habits", "08:00", "--day", "Sun"])


def test_alerts_meal_rest_silence(data_dir):
    _capture_stdout(run_alerts_command, ["meal", "lunch", "12:30"])
    _capture_stdout(run_alerts_command, ["rest", "Sat", "Sun"])
    _capture_stdout(run_alerts_command, ["silence", "on"])

    prefs = preferences.load()
    assert prefs.meal_times == {"lunch": "12:30"}
    assert prefs.rest_days == [5, 6]
    assert prefs.silence_completed_tasks is True

    output = _capture_stdout(run_alerts_command, ["status"])
    assert "lunch 12:30" in output
    assert "rest days: Sat, Sun" in output

    _capture_stdout(run_alerts_command, ["meal", "lunch", "off"])
    assert preferences.load().meal_times == {}


def test_checkin_records_today(data_dir):
    output = _capture_stdout(run_checkin_command, [])

    assert "checked in" in output
    assert len(state.load_completions().check_ins) == 1


def test_pending_lists_registered_alerts(data_dir):
    _capture_stdout(run_task_command, ["add", "Stretch", "--time", "07:30"])

    output = _capture_stdout(run_pending_command, ["--domain", "dailyTask"])

    assert output.count("dailyTask.") == 7
    assert "Reminder: Stretch" in output


def test_pending_empty(data_dir):
    assert "no pending alerts" in _capture_stdout(run_pending_command, ["--domain", "itinerary"])


def test_dispatch_routes_and_help(data_dir):
    assert _dispatch_subcommand(["habit", "list"]) is True
    assert _dispatch_subcommand(["bogus"]) is False
    assert "commands:" in _capture_stdout(_dispatch_subcommand, ["help"])
