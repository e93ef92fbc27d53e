"""Keep pending alerts in step with the persisted domain state.

Polls the data dir every SYNC_SECONDS. A domain is reconciled when its rules
change, when the date rolls over (re-arming countdowns and lifting today's
suppressions), or when alerts are switched back on. Timer domains never get a
sweep after the first pass: a new timer is scheduled on its own and a stopped
one is cancelled by id straight away.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from pump_alerts import preferences, state
from pump_alerts.adapters import (
    TIMER_KIND_DOMAINS,
    check_in_rules,
    daily_task_rules,
    habit_rules,
    itinerary_rules,
    meal_rules,
    progress_photo_rules,
    supplement_rules,
    timer_rules,
    weekly_schedule_rules,
)
from pump_alerts.config import SYNC_SECONDS, TZ
from pump_alerts.domain import DailyTask, Habit, ItineraryEvent, ScheduleDay, Supplement, Timer
from pump_alerts.engine import ReconcileResult, ReconciliationEngine
from pump_alerts.host import Deliver, SchedulerStore, log_delivery
from pump_alerts.identifiers import TIMER_DOMAINS, Domain, parse, today_host_weekday
from pump_alerts.preferences import AlertPreferences
from pump_alerts.rules import ReminderRule, parse_hhmm
from pump_alerts.state import Completions
from pump_alerts.triggers import Content

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Snapshot:
    prefs: AlertPreferences
    tasks: list[DailyTask]
    habits: list[Habit]
    supplements: list[Supplement]
    timers: list[Timer]
    itinerary: list[ItineraryEvent]
    schedule: list[ScheduleDay]
    completions: Completions


def load_snapshot() -> Snapshot:
    return Snapshot(
        prefs=preferences.load(),
        tasks=state.list_tasks(),
        habits=state.list_habits(),
        supplements=state.list_supplements(),
        timers=state.list_timers(),
        itinerary=state.list_itinerary(),
        schedule=state.load_schedule(),
        completions=state.load_completions(),
    )


def rules_for(domain: Domain, snap: Snapshot, today: int) -> list[ReminderRule]:
    """Current rules for one domain. A disabled domain has none, which clears it."""
    prefs = snap.prefs
    if not prefs.domain_enabled(domain):
        return []

    if domain is Domain.DAILY_TASK:
        return daily_task_rules(
            snap.tasks,
            completed_ids=snap.completions.tasks,
            silence_completed=prefs.silence_completed_tasks,
        )
    if domain is Domain.HABIT:
        hour, minute = parse_hhmm(prefs.habits_time)
        return habit_rules(
            snap.habits, completed_ids=snap.completions.habits, hour=hour, minute=minute, today=today
        )
    if domain is Domain.MEAL:
        return meal_rules(prefs.meal_reminders())
    if domain is Domain.CHECK_IN:
        hour, minute = parse_hhmm(prefs.check_in_time)
        return check_in_rules(
            rest_days=prefs.rest_days,
            completed_days=snap.completions.check_ins,
            hour=hour,
            minute=minute,
            today=today,
        )
    if domain is Domain.NUTRITION_SUPPLEMENT:
        hour, minute = parse_hhmm(prefs.nutrition_supplement_time)
        return supplement_rules(snap.supplements, kind="nutrition", hour=hour, minute=minute)
    if domain is Domain.WORKOUT_SUPPLEMENT:
        hour, minute = parse_hhmm(prefs.workout_supplement_time)
        return supplement_rules(snap.supplements, kind="workout", hour=hour, minute=minute)
    if domain is Domain.WEEKLY_SCHEDULE:
        return weekly_schedule_rules(snap.schedule)
    if domain is Domain.ITINERARY:
        return itinerary_rules(snap.itinerary)
    if domain is Domain.PROGRESS_PHOTO:
        if not prefs.progress_photo_time:
            return []
        hour, minute = parse_hhmm(prefs.progress_photo_time)
        return progress_photo_rules(weekday=prefs.progress_photo_weekday, hour=hour, minute=minute)
    for kind, timer_domain in TIMER_KIND_DOMAINS.items():
        if domain is timer_domain:
            return timer_rules(snap.timers, kind=kind)
    raise ValueError(f"No rule adapter for {domain.value}")


class Syncer:
    def __init__(self, engine: ReconciliationEngine, *, clock: Callable[[], datetime]) -> None:
        self._engine = engine
        self._clock = clock
        self._fingerprints: dict[Domain, tuple[object, ...]] = {}
        self._timers: dict[Domain, set[str]] = {}

    async def sync(self, snap: Snapshot | None = None) -> list[ReconcileResult]:
        """One polling pass. Domains run concurrently; each is serialized by the engine."""
        snap = snap or load_snapshot()
        now = self._clock()
        today = today_host_weekday(now)

        passes = []
        for domain in Domain:
            if domain in TIMER_DOMAINS:
                passes.append(self._sync_timers(domain, snap))
            else:
                passes.append(self._sync_domain(domain, snap, today, now))
        results = await asyncio.gather(*passes)
        return [r for r in results if r is not None]

    async def _sync_domain(
        self, domain: Domain, snap: Snapshot, today: int, now: datetime
    ) -> ReconcileResult | None:
        rules = rules_for(domain, snap, today)
        fingerprint = (now.date(), snap.prefs.enabled, tuple(rules))
        if self._fingerprints.get(domain) == fingerprint:
            return None
        result = await self._engine.reconcile(domain, rules)
        if result.authorized:
            self._fingerprints[domain] = fingerprint
        else:
            self._fingerprints.pop(domain, None)
        return result

    async def _sync_timers(self, domain: Domain, snap: Snapshot) -> ReconcileResult | None:
        rules = rules_for(domain, snap, today_host_weekday(self._clock()))
        by_id = {rule.entity: rule for rule in rules}
        known = self._timers.get(domain)

        if known is None:
            # First pass sweeps anything left from a previous run
            result = await self._engine.reconcile(domain, rules)
            if result.authorized:
                self._timers[domain] = set(by_id)
            return result

        for stopped in sorted(known - set(by_id)):
            await self._engine.cancel(domain, stopped)
            known.discard(stopped)

        started = [rule for entity, rule in by_id.items() if entity not in known]
        if not started:
            return None
        result = await self._engine.schedule(domain, started)
        if result.authorized:
            known.update(rule.entity for rule in started)
        return result


def prune_expired_timers(now: datetime) -> list[str]:
    """Drop timers that ended while nothing was running to fire them."""
    dropped = []
    for timer in state.list_timers():
        if timer.ends <= now:
            state.remove_timer(timer.id)
            dropped.append(timer.id)
    if dropped:
        log.info("dropped %d expired timer(s): %s", len(dropped), ", ".join(dropped))
    return dropped


def deliver_and_retire(identifier: str, content: Content) -> None:
    """Deliver an alert; a finished timer is removed so it is never re-armed.

    A timer stopped since the last poll has no record left and is not delivered.
    """
    rid = parse(identifier)
    is_timer = rid.domain in TIMER_DOMAINS and rid.entity is not None
    if is_timer and rid.entity not in {t.id for t in state.list_timers()}:
        log.info("timer %s was stopped; not delivering", identifier)
        return
    log_delivery(identifier, content)
    if is_timer:
        state.remove_timer(rid.entity)


def _now() -> datetime:
    return datetime.now(TZ)


def setup_scheduler(*, deliver: Deliver = deliver_and_retire) -> AsyncIOScheduler:
    """Scheduler whose `alerts` jobstore is the host store, re-synced every SYNC_SECONDS."""
    scheduler = AsyncIOScheduler(timezone=TZ)
    store = SchedulerStore(
        scheduler,
        tz=TZ,
        authorized=lambda: preferences.load().enabled,
        deliver=deliver,
    )
    syncer = Syncer(ReconciliationEngine(store, clock=_now), clock=_now)

    @scheduler.scheduled_job(
        IntervalTrigger(seconds=SYNC_SECONDS),
        id="sync",
        max_instances=1,
        next_run_time=_now(),
    )
    async def sync_all() -> None:
        prune_expired_timers(_now())
        await syncer.sync()

    return scheduler


@dataclass(frozen=True, slots=True)
class PendingAlert:
    identifier: str
    next_fire: datetime | None
    content: Content


async def preview(snap: Snapshot | None = None) -> list[PendingAlert]:
    """What a fresh daemon would register right now, soonest first."""
    scheduler = AsyncIOScheduler(timezone=TZ)
    store = SchedulerStore(scheduler, tz=TZ, authorized=lambda: True)
    await Syncer(ReconciliationEngine(store, clock=_now), clock=_now).sync(snap)

    now = _now()
    alerts = [
        PendingAlert(job.id, job.trigger.get_next_fire_time(None, now), job.args[1])
        for job in store.jobs()
    ]
    return sorted(alerts, key=lambda a: (a.next_fire is None, a.next_fire or now, a.identifier))
