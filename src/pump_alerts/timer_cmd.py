"""CLI handler for `pump-alerts timer` subcommand.

Stopping a timer deletes its record; the daemon cancels the pending alert by
id on its next poll without touching any other timer.
"""

import argparse
import sys
from datetime import datetime, timedelta

from pump_alerts.config import TZ
from pump_alerts.domain import Timer
from pump_alerts.state import list_timers, remove_timer, save_timer


def _fmt_remaining(timer: Timer, now: datetime) -> str:
    seconds = int((timer.ends - now).total_seconds())
    if seconds <= 0:
        return "ended"
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}m{secs:02d}s left"


def run_timer_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="pump-alerts timer")
    sub = parser.add_subparsers(dest="action")

    start_p = sub.add_parser("start", help="Start a timer")
    start_p.add_argument("name", help="Activity, recovery category, or alert title")
    length = start_p.add_mutually_exclusive_group(required=True)
    length.add_argument("--minutes", type=float, help="Length in minutes")
    length.add_argument("--seconds", type=int, help="Length in seconds")
    start_p.add_argument(
        "--kind",
        default="activity",
        choices=["activity", "recovery", "tracking"],
        help="Which alert to raise when it ends",
    )
    start_p.add_argument("--body", default="", help="Alert text (tracking timers)")

    sub.add_parser("list", help="Show running timers")

    stop_p = sub.add_parser("stop", help="Stop a timer by ID")
    stop_p.add_argument("id", help="Timer ID")

    args = parser.parse_args(argv)

    if args.action == "start":
        _handle_start(args)
    elif args.action == "list":
        _handle_list()
    elif args.action == "stop":
        _handle_stop(args.id)
    else:
        parser.print_help()
        sys.exit(1)


def _handle_start(args: argparse.Namespace) -> None:
    seconds = args.seconds if args.seconds is not None else args.minutes * 60
    if seconds <= 0:
        print("error: timer length must be positive")
        sys.exit(1)
    end_at = datetime.now(TZ) + timedelta(seconds=seconds)
    timer = Timer.new(args.name, end_at=end_at, kind=args.kind, body=args.body)
    save_timer(timer)
    print(f"started {timer.id}: {timer.kind} timer ends at {end_at:%H:%M:%S} -- {timer.name}")


def _handle_list() -> None:
    timers = list_timers()
    if not timers:
        print("no running timers")
        return
    now = datetime.now(TZ)
    for t in timers:
        print(f"  {t.id}  {t.kind:9s}  {_fmt_remaining(t, now):14s}  {t.name}")


def _handle_stop(timer_id: str) -> None:
    if remove_timer(timer_id):
        print(f"stopped {timer_id}")
    else:
        print(f"timer {timer_id} not found")
        sys.exit(1)
