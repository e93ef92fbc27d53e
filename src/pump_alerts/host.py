"""The host notification store: the port the engine talks to, and the
APScheduler-backed store the daemon ships with.

The host is a flat bag of pending alerts keyed by opaque string ids. It can
enumerate, add and remove, all asynchronously, with no transaction spanning
calls.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from pump_alerts.errors import NotificationError
from pump_alerts.triggers import (
    CalendarDate,
    Content,
    DailyCalendar,
    PrimitiveTrigger,
    TimeInterval,
    WeeklyCalendar,
)

log = logging.getLogger(__name__)

ALERTS_JOBSTORE = "alerts"

# Host calendar weekdays (1=Sunday) to APScheduler day_of_week names.
# APScheduler's numeric day_of_week is 0=Monday; names avoid the mismatch.
_APS_DOW = {1: "sun", 2: "mon", 3: "tue", 4: "wed", 5: "thu", 6: "fri", 7: "sat"}


class HostNotificationStore(Protocol):
    async def is_authorized(self) -> bool: ...

    async def request_authorization(self) -> bool: ...

    async def list_pending(self) -> list[str]: ...

    async def add(self, identifier: str, trigger: PrimitiveTrigger, content: Content) -> None:
        """Register or replace one pending alert. Raises NotificationError."""
        ...

    async def remove(self, identifiers: list[str]) -> None:
        """Unknown ids are ignored. Raises NotificationError."""
        ...


Deliver = Callable[[str, Content], None]


def log_delivery(identifier: str, content: Content) -> None:
    log.info("alert %s: %s -- %s", identifier, content.title, content.body)
    print(f"[{content.title}] {content.body}", flush=True)


def to_aps_trigger(trigger: PrimitiveTrigger, tz: ZoneInfo, now: datetime) -> BaseTrigger:
    if isinstance(trigger, WeeklyCalendar):
        return CronTrigger(
            day_of_week=_APS_DOW[trigger.weekday],
            hour=trigger.hour,
            minute=trigger.minute,
            timezone=tz,
        )
    if isinstance(trigger, DailyCalendar):
        return CronTrigger(hour=trigger.hour, minute=trigger.minute, timezone=tz)
    if isinstance(trigger, CalendarDate):
        return DateTrigger(run_date=trigger.at, timezone=tz)
    if isinstance(trigger, TimeInterval):
        return DateTrigger(run_date=now + timedelta(seconds=trigger.seconds), timezone=tz)
    raise TypeError(f"Unknown trigger: {type(trigger).__name__}")


class SchedulerStore:
    """Pending alerts held as jobs in a dedicated APScheduler jobstore."""

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        *,
        tz: ZoneInfo,
        authorized: Callable[[], bool],
        deliver: Deliver = log_delivery,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._tz = tz
        self._authorized = authorized
        self._deliver = deliver
        self._clock = clock or (lambda: datetime.now(tz))
        # ValueError: several stores sharing one scheduler
        with contextlib.suppress(ValueError):
            scheduler.add_jobstore(MemoryJobStore(), ALERTS_JOBSTORE)

    async def is_authorized(self) -> bool:
        return self._authorized()

    async def request_authorization(self) -> bool:
        # No prompt to show; the user grants by turning alerts on
        return self._authorized()

    async def list_pending(self) -> list[str]:
        return [job.id for job in self._scheduler.get_jobs(jobstore=ALERTS_JOBSTORE)]

    def jobs(self) -> list[Job]:
        return self._scheduler.get_jobs(jobstore=ALERTS_JOBSTORE)

    async def add(self, identifier: str, trigger: PrimitiveTrigger, content: Content) -> None:
        try:
            aps_trigger = to_aps_trigger(trigger, self._tz, self._clock())
        except (TypeError, ValueError) as e:
            raise NotificationError(identifier, str(e)) from e
        # A stopped scheduler queues jobs without replace_existing checks
        self._discard(identifier)
        self._scheduler.add_job(
            self._fire,
            aps_trigger,
            args=[identifier, content],
            id=identifier,
            name=content.title,
            jobstore=ALERTS_JOBSTORE,
            replace_existing=True,
            misfire_grace_time=None,
        )

    async def remove(self, identifiers: list[str]) -> None:
        for ident in identifiers:
            self._discard(ident)

    def _fire(self, identifier: str, content: Content) -> None:
        # Alerts switched off since registration stay pending but never deliver
        if not self._authorized():
            log.info("alerts not authorized; dropping %s", identifier)
            return
        self._deliver(identifier, content)

    def _discard(self, identifier: str) -> None:
        try:
            self._scheduler.remove_job(identifier, jobstore=ALERTS_JOBSTORE)
        except JobLookupError:
            pass
