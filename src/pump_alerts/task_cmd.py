"""CLI handler for `pump-alerts task` subcommand."""

import argparse
import sys

from pump_alerts.domain import DailyTask
from pump_alerts.state import list_tasks, load_completions, mark_task_done, remove_task, save_task


def _fmt_schedule(task: DailyTask) -> str:
    return f"{task.time} {'daily' if task.repeats else 'once'}"


def run_task_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="pump-alerts task")
    sub = parser.add_subparsers(dest="action")

    add_p = sub.add_parser("add", help="Add a daily task reminder")
    add_p.add_argument("name", help="Task name")
    add_p.add_argument("--time", "-t", required=True, help="Time of day, HH:MM")
    add_p.add_argument(
        "--once",
        action="store_true",
        help="Remind at the next HH:MM only instead of every day",
    )

    sub.add_parser("list", help="Show daily tasks")

    done_p = sub.add_parser("done", help="Mark a task done for today")
    done_p.add_argument("id", help="Task ID")

    remove_p = sub.add_parser("remove", help="Remove a task by ID")
    remove_p.add_argument("id", help="Task ID")

    args = parser.parse_args(argv)

    if args.action == "add":
        _handle_add(args)
    elif args.action == "list":
        _handle_list()
    elif args.action == "done":
        _handle_done(args.id)
    elif args.action == "remove":
        _handle_remove(args.id)
    else:
        parser.print_help()
        sys.exit(1)


def _handle_add(args: argparse.Namespace) -> None:
    try:
        task = DailyTask.new(args.name, time=args.time, repeats=not args.once)
    except ValueError as e:
        print(f"error: {e}")
        sys.exit(1)
    save_task(task)
    print(f"added {task.id}: {_fmt_schedule(task)} -- {task.name}")


def _handle_list() -> None:
    tasks = list_tasks()
    if not tasks:
        print("no daily tasks")
        return
    done = set(load_completions().tasks)
    for t in tasks:
        mark = "x" if t.id in done else " "
        print(f"  [{mark}] {t.id}  {_fmt_schedule(t):12s}  {t.name}")


def _handle_done(task_id: str) -> None:
    if task_id not in {t.id for t in list_tasks()}:
        print(f"task {task_id} not found")
        sys.exit(1)
    mark_task_done(task_id)
    print(f"done {task_id} for today")


def _handle_remove(task_id: str) -> None:
    if remove_task(task_id):
        print(f"removed {task_id}")
    else:
        print(f"task {task_id} not found")
        sys.exit(1)
