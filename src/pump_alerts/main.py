"""Entry point for pump-alerts."""

from __future__ import annotations

import asyncio
import atexit
import logging
import os
import signal
import sys
from pathlib import Path

from pump_alerts.config import LOG_LEVEL
from pump_alerts.storage import STATE_DIR

PID_FILE = STATE_DIR / "daemon.pid"


HELP = """\
pump-alerts -- local reminder scheduling for workouts, meals, habits and timers

commands:
  pump-alerts run                 Run the reminder daemon
  pump-alerts pending             Show the alerts the daemon would register
  pump-alerts task add            Add a daily task reminder
  pump-alerts task list           Show daily tasks
  pump-alerts task done           Mark a task done for today
  pump-alerts task remove         Remove a task by ID
  pump-alerts habit add           Track a habit
  pump-alerts habit list          Show habits
  pump-alerts habit done          Mark a habit done for today
  pump-alerts habit remove        Stop tracking a habit
  pump-alerts timer start         Start an activity, recovery or tracking timer
  pump-alerts timer list          Show running timers
  pump-alerts timer stop          Stop a timer by ID
  pump-alerts supplement add      Add a nutrition or workout supplement
  pump-alerts supplement list     Show supplements
  pump-alerts supplement remove   Remove a supplement by ID
  pump-alerts itinerary add       Add an itinerary event
  pump-alerts itinerary list      Show itinerary events
  pump-alerts itinerary remove    Remove an itinerary event by ID
  pump-alerts schedule set        Set the workout sessions for a weekday
  pump-alerts schedule list       Show the weekly workout schedule
  pump-alerts schedule clear      Clear one weekday or the whole schedule
  pump-alerts alerts status       Show alert preferences
  pump-alerts alerts on|off       Turn all alerts on or off
  pump-alerts alerts enable       Re-enable one alert domain
  pump-alerts alerts disable      Disable one alert domain
  pump-alerts alerts time         Set an alert time of day
  pump-alerts alerts meal         Set or clear a meal reminder time
  pump-alerts alerts rest         Set workout rest days
  pump-alerts alerts silence      Silence completed tasks for the rest of the day
  pump-alerts checkin             Record today's workout check-in
  pump-alerts help                Show this help message

examples:
  pump-alerts task add "Stretch" --time 07:30
  pump-alerts timer start "Plank" --minutes 2
  pump-alerts alerts meal lunch 12:30
  pump-alerts schedule set Mon "Push day@06:30" "Mobility@19:00"
"""


def _check_already_running() -> None:
    STATE_DIR.mkdir(parents=True, exist_ok=True)
    if PID_FILE.exists():
        pid = int(PID_FILE.read_text().strip())
        proc_cmdline = Path(f"/proc/{pid}/cmdline")
        if proc_cmdline.exists() and "pump-alerts" in proc_cmdline.read_bytes().decode(errors="replace"):
            print(f"pump-alerts is already running (pid {pid})")
            raise SystemExit(1)
    PID_FILE.write_text(str(os.getpid()))
    atexit.register(PID_FILE.unlink, missing_ok=True)


def _dispatch_subcommand(argv: list[str]) -> bool:
    """Route CLI subcommands. Returns True if handled."""
    if not argv:
        return False
    cmd = argv[0]
    rest = argv[1:]
    if cmd in ("help", "--help", "-h"):
        print(HELP)
        return True
    routes: dict[str, tuple[str, str]] = {
        "task": ("pump_alerts.task_cmd", "run_task_command"),
        "habit": ("pump_alerts.habit_cmd", "run_habit_command"),
        "timer": ("pump_alerts.timer_cmd", "run_timer_command"),
        "supplement": ("pump_alerts.catalog_cmd", "run_supplement_command"),
        "itinerary": ("pump_alerts.catalog_cmd", "run_itinerary_command"),
        "schedule": ("pump_alerts.schedule_cmd", "run_schedule_command"),
        "alerts": ("pump_alerts.alerts_cmd", "run_alerts_command"),
        "checkin": ("pump_alerts.alerts_cmd", "run_checkin_command"),
        "pending": ("pump_alerts.alerts_cmd", "run_pending_command"),
    }
    if cmd in routes:
        from importlib import import_module

        mod_path, func_name = routes[cmd]
        getattr(import_module(mod_path), func_name)(rest)
        return True
    return False


log = logging.getLogger(__name__)


async def _run() -> None:
    """Run the scheduler until SIGINT/SIGTERM."""
    from pump_alerts.sync import setup_scheduler

    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    loop.add_signal_handler(signal.SIGTERM, stop.set)
    loop.add_signal_handler(signal.SIGINT, stop.set)

    scheduler = setup_scheduler()
    scheduler.start()
    log.info("pump-alerts daemon started")
    try:
        await stop.wait()
    finally:
        scheduler.shutdown(wait=False)
        log.info("pump-alerts daemon stopped")


def main() -> None:
    argv = sys.argv[1:]
    if argv and argv[0] != "run":
        if _dispatch_subcommand(argv):
            return
        print(f"unknown command: {argv[0]}\n")
        print(HELP)
        raise SystemExit(1)

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _check_already_running()
    asyncio.run(_run())


if __name__ == "__main__":
    main()
