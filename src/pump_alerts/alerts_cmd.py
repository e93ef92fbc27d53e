"""CLI handlers for alert preferences, check-ins and the pending preview."""

import argparse
import asyncio
import sys

from pump_alerts import preferences
from pump_alerts.domain import MealType
from pump_alerts.identifiers import WEEKDAY_NAMES, WEEKDAY_NUMBERS, Domain, prefix
from pump_alerts.rules import parse_hhmm
from pump_alerts.state import mark_checked_in

_TIME_FIELDS = {
    "habits": "habits_time",
    "checkin": "check_in_time",
    "nutrition": "nutrition_supplement_time",
    "workout": "workout_supplement_time",
    "photo": "progress_photo_time",
}

# UI order for rest days: 0=Monday
_UI_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def _domain_arg(value: str) -> Domain:
    try:
        return Domain(value)
    except ValueError:
        names = ", ".join(d.value for d in Domain)
        raise argparse.ArgumentTypeError(f"unknown domain {value!r} (choose from {names})") from None


def run_alerts_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="pump-alerts alerts")
    sub = parser.add_subparsers(dest="action")

    sub.add_parser("status", help="Show alert preferences")
    sub.add_parser("on", help="Turn all alerts on")
    sub.add_parser("off", help="Turn all alerts off")

    enable_p = sub.add_parser("enable", help="Re-enable one alert domain")
    enable_p.add_argument("domain", type=_domain_arg, help="Domain, e.g. dailyTask")
    disable_p = sub.add_parser("disable", help="Disable one alert domain")
    disable_p.add_argument("domain", type=_domain_arg, help="Domain, e.g. habit.daily")

    time_p = sub.add_parser("time", help="Set an alert time of day")
    time_p.add_argument("which", choices=list(_TIME_FIELDS), help="Which alert")
    time_p.add_argument("time", help="HH:MM, or 'off' for the progress photo")
    time_p.add_argument(
        "--day",
        choices=list(WEEKDAY_NUMBERS),
        default=None,
        help="Weekday for the progress photo",
    )

    meal_p = sub.add_parser("meal", help="Set or clear a meal reminder time")
    meal_p.add_argument("meal", choices=[m.value for m in MealType], help="Meal")
    meal_p.add_argument("time", help="HH:MM, or 'off'")

    rest_p = sub.add_parser("rest", help="Set workout rest days (no check-in reminder)")
    rest_p.add_argument("days", nargs="*", choices=_UI_DAYS, help="Rest days; none clears")

    silence_p = sub.add_parser("silence", help="Skip today's alert for tasks already done")
    silence_p.add_argument("state", choices=["on", "off"])

    args = parser.parse_args(argv)

    try:
        if args.action == "status":
            _handle_status()
        elif args.action in ("on", "off"):
            preferences.update(enabled=args.action == "on")
            print(f"alerts {args.action}")
        elif args.action in ("enable", "disable"):
            preferences.set_domain_enabled(args.domain, args.action == "enable")
            print(f"{args.action}d {args.domain.value}")
        elif args.action == "time":
            _handle_time(args)
        elif args.action == "meal":
            preferences.set_meal_time(MealType(args.meal), None if args.time == "off" else args.time)
            print(f"{args.meal}: {args.time}")
        elif args.action == "rest":
            preferences.update(rest_days=sorted(_UI_DAYS.index(d) for d in args.days))
            print(f"rest days: {', '.join(args.days) or 'none'}")
        elif args.action == "silence":
            preferences.update(silence_completed_tasks=args.state == "on")
            print(f"silence completed tasks: {args.state}")
        else:
            parser.print_help()
            sys.exit(1)
    except ValueError as e:
        print(f"error: {e}")
        sys.exit(1)


def _handle_time(args: argparse.Namespace) -> None:
    field = _TIME_FIELDS[args.which]
    changes: dict[str, object] = {}
    if args.which == "photo" and args.time == "off":
        changes[field] = ""
    else:
        parse_hhmm(args.time)
        changes[field] = args.time
    if args.day is not None:
        if args.which != "photo":
            raise ValueError("--day only applies to the progress photo")
        changes["progress_photo_weekday"] = WEEKDAY_NUMBERS[args.day]
    preferences.update(**changes)
    print(f"{args.which}: {args.time}" + (f" on {args.day}" if args.day else ""))


def _handle_status() -> None:
    prefs = preferences.load()
    print(f"alerts: {'on' if prefs.enabled else 'off'}")
    for domain in Domain:
        flag = "on" if prefs.domain_enabled(domain) else "off"
        print(f"  {domain.value:16s} {flag}")
    print(f"habits at {prefs.habits_time}, check-in at {prefs.check_in_time}")
    print(
        f"supplements: nutrition {prefs.nutrition_supplement_time}, "
        f"workout {prefs.workout_supplement_time}"
    )
    photo = prefs.progress_photo_time or "off"
    print(f"progress photo: {photo} on {WEEKDAY_NAMES[prefs.progress_photo_weekday]}")
    meals = ", ".join(f"{m.meal_type.value} {m.hour:02d}:{m.minute:02d}" for m in prefs.meal_reminders())
    print(f"meals: {meals or 'none'}")
    print(f"rest days: {', '.join(_UI_DAYS[i] for i in prefs.rest_days) or 'none'}")
    print(f"silence completed tasks: {'on' if prefs.silence_completed_tasks else 'off'}")


def run_checkin_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="pump-alerts checkin")
    parser.parse_args(argv)
    mark_checked_in()
    print("checked in for today")


def run_pending_command(argv: list[str]) -> None:
    from pump_alerts.sync import preview

    parser = argparse.ArgumentParser(prog="pump-alerts pending")
    parser.add_argument("--domain", type=_domain_arg, default=None, help="Only this domain")
    args = parser.parse_args(argv)

    if not preferences.load().enabled:
        print("alerts are off")
        return
    alerts = asyncio.run(preview())
    if args.domain is not None:
        alerts = [a for a in alerts if a.identifier.startswith(prefix(args.domain))]
    if not alerts:
        print("no pending alerts")
        return
    for a in alerts:
        when = f"{a.next_fire:%a %Y-%m-%d %H:%M}" if a.next_fire else "-"
        print(f"  {when:20s}  {a.identifier:32s}  {a.content.title}: {a.content.body}")
