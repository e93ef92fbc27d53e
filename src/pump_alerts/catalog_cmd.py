"""CLI handlers for `pump-alerts supplement` and `pump-alerts itinerary`."""

import argparse
import sys
from datetime import datetime

from pump_alerts.config import TZ
from pump_alerts.domain import ItineraryEvent, Supplement
from pump_alerts.state import (
    list_itinerary,
    list_supplements,
    remove_itinerary_event,
    remove_supplement,
    save_itinerary_event,
    save_supplement,
)


def run_supplement_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="pump-alerts supplement")
    sub = parser.add_subparsers(dest="action")

    add_p = sub.add_parser("add", help="Add a supplement")
    add_p.add_argument("name", help="Supplement name")
    add_p.add_argument(
        "--workout",
        action="store_true",
        help="Pre-workout supplement (reminded at the workout supplement time)",
    )

    sub.add_parser("list", help="Show supplements")

    remove_p = sub.add_parser("remove", help="Remove a supplement by ID")
    remove_p.add_argument("id", help="Supplement ID")

    args = parser.parse_args(argv)

    if args.action == "add":
        supplement = Supplement.new(args.name, kind="workout" if args.workout else "nutrition")
        save_supplement(supplement)
        print(f"added {supplement.id}: [{supplement.kind}] {supplement.name}")
    elif args.action == "list":
        supplements = list_supplements()
        if not supplements:
            print("no supplements")
            return
        for s in supplements:
            print(f"  {s.id}  {s.kind:9s}  {s.name}")
    elif args.action == "remove":
        if remove_supplement(args.id):
            print(f"removed {args.id}")
        else:
            print(f"supplement {args.id} not found")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


def _parse_when(value: str) -> datetime:
    """ISO date-time; local timezone assumed when no offset is given."""
    when = datetime.fromisoformat(value)
    if when.tzinfo is None:
        when = when.replace(tzinfo=TZ)
    return when


def run_itinerary_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="pump-alerts itinerary")
    sub = parser.add_subparsers(dest="action")

    add_p = sub.add_parser("add", help="Add an itinerary event")
    add_p.add_argument("name", help="Event name")
    add_p.add_argument("--at", required=True, help="When, e.g. 2026-03-01T09:30")

    sub.add_parser("list", help="Show itinerary events")

    remove_p = sub.add_parser("remove", help="Remove an event by ID")
    remove_p.add_argument("id", help="Event ID")

    args = parser.parse_args(argv)

    if args.action == "add":
        try:
            when = _parse_when(args.at)
        except ValueError as e:
            print(f"error: {e}")
            sys.exit(1)
        event = ItineraryEvent.new(args.name, at=when)
        save_itinerary_event(event)
        print(f"added {event.id}: {when:%Y-%m-%d %H:%M} -- {event.name}")
    elif args.action == "list":
        events = sorted(list_itinerary(), key=lambda e: e.when)
        if not events:
            print("no itinerary events")
            return
        now = datetime.now(TZ)
        for e in events:
            past = "  (past)" if e.when <= now else ""
            print(f"  {e.id}  {e.when:%Y-%m-%d %H:%M}  {e.name}{past}")
    elif args.action == "remove":
        if remove_itinerary_event(args.id):
            print(f"removed {args.id}")
        else:
            print(f"event {args.id} not found")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)
