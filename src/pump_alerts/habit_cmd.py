"""CLI handler for `pump-alerts habit` subcommand."""

import argparse
import sys

from pump_alerts.domain import Habit
from pump_alerts.state import list_habits, load_completions, mark_habit_done, remove_habit, save_habit


def run_habit_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="pump-alerts habit")
    sub = parser.add_subparsers(dest="action")

    add_p = sub.add_parser("add", help="Track a habit")
    add_p.add_argument("name", help="Habit name")

    sub.add_parser("list", help="Show habits")

    done_p = sub.add_parser("done", help="Mark a habit done for today")
    done_p.add_argument("id", help="Habit ID")

    remove_p = sub.add_parser("remove", help="Stop tracking a habit")
    remove_p.add_argument("id", help="Habit ID")

    args = parser.parse_args(argv)

    if args.action == "add":
        habit = Habit.new(args.name)
        save_habit(habit)
        print(f"added {habit.id}: {habit.name}")
    elif args.action == "list":
        _handle_list()
    elif args.action == "done":
        _handle_done(args.id)
    elif args.action == "remove":
        if remove_habit(args.id):
            print(f"removed {args.id}")
        else:
            print(f"habit {args.id} not found")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


def _handle_list() -> None:
    habits = list_habits()
    if not habits:
        print("no habits")
        return
    done = set(load_completions().habits)
    for h in habits:
        mark = "x" if h.id in done else " "
        print(f"  [{mark}] {h.id}  {h.name}")


def _handle_done(habit_id: str) -> None:
    if habit_id not in {h.id for h in list_habits()}:
        print(f"habit {habit_id} not found")
        sys.exit(1)
    mark_habit_done(habit_id)
    print(f"done {habit_id} for today")
