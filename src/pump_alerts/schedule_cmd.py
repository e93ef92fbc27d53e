"""CLI handler for `pump-alerts schedule` subcommand."""

import argparse
import sys

from pump_alerts.domain import ScheduleDay, WorkoutSession
from pump_alerts.identifiers import WEEKDAY_NUMBERS
from pump_alerts.rules import parse_hhmm
from pump_alerts.state import load_schedule, save_schedule


def parse_session(value: str) -> WorkoutSession:
    """Parse "name@HH:MM"."""
    name, sep, time = value.rpartition("@")
    if not sep or not name.strip():
        raise ValueError(f"Expected NAME@HH:MM, got {value!r}")
    hour, minute = parse_hhmm(time)
    return WorkoutSession(name=name.strip(), hour=hour, minute=minute)


def run_schedule_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="pump-alerts schedule")
    sub = parser.add_subparsers(dest="action")

    set_p = sub.add_parser("set", help="Replace the sessions for a weekday")
    set_p.add_argument("day", choices=list(WEEKDAY_NUMBERS), help="Weekday")
    set_p.add_argument("sessions", nargs="+", help='Sessions as "NAME@HH:MM"')

    sub.add_parser("list", help="Show the weekly workout schedule")

    clear_p = sub.add_parser("clear", help="Clear one weekday or the whole schedule")
    clear_p.add_argument("day", nargs="?", choices=list(WEEKDAY_NUMBERS), help="Weekday")

    args = parser.parse_args(argv)

    if args.action == "set":
        _handle_set(args.day, args.sessions)
    elif args.action == "list":
        _handle_list()
    elif args.action == "clear":
        days = [d for d in load_schedule() if args.day and d.day != args.day]
        save_schedule(days)
        print(f"cleared {args.day or 'schedule'}")
    else:
        parser.print_help()
        sys.exit(1)


def _handle_set(day: str, raw_sessions: list[str]) -> None:
    try:
        sessions = [parse_session(s) for s in raw_sessions]
    except ValueError as e:
        print(f"error: {e}")
        sys.exit(1)
    days = [d for d in load_schedule() if d.day != day]
    days.append(ScheduleDay(day=day, sessions=sessions))
    days.sort(key=lambda d: WEEKDAY_NUMBERS[d.day])
    save_schedule(days)
    print(f"set {day}: {', '.join(f'{s.name} {s.hour:02d}:{s.minute:02d}' for s in sessions)}")


def _handle_list() -> None:
    days = load_schedule()
    if not days:
        print("no workout schedule")
        return
    for d in days:
        sessions = ", ".join(f"{s.name} {s.hour:02d}:{s.minute:02d}" for s in d.sessions) or "-"
        print(f"  {d.day}  {sessions}")
