"""Reconciliation engine: make the host's pending alerts match current rules.

Each pass for a domain goes Authorizing -> Listing -> Removing -> Building ->
Adding. Removal is a full sweep of the domain's prefix rather than a diff, so
an alert whose source was deleted can never survive a pass. Adds and removes
are best-effort per identifier: one failure is logged and the rest go ahead.

Passes for the same domain are serialized; different domains run
concurrently since their identifier prefixes are disjoint. Nothing guards
against another process mutating the host store between listing and
mutating it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from pump_alerts.errors import NotificationError
from pump_alerts.gate import ensure_authorized
from pump_alerts.host import HostNotificationStore
from pump_alerts.identifiers import Domain, parse, prefix, today_host_weekday
from pump_alerts.rules import ReminderRule
from pump_alerts.triggers import ScheduledAlert, build_all

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconcileResult:
    domain: Domain
    authorized: bool = True
    removed: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def _dedupe(domain: Domain, alerts: list[ScheduledAlert]) -> list[ScheduledAlert]:
    """Last alert wins for a repeated identifier."""
    by_id: dict[str, ScheduledAlert] = {}
    for alert in alerts:
        if alert.identifier in by_id:
            log.warning("%s: duplicate alert id %s, keeping the last", domain.value, alert.identifier)
        by_id[alert.identifier] = alert
    return list(by_id.values())


class ReconciliationEngine:
    def __init__(self, store: HostNotificationStore, *, clock: Callable[[], datetime]) -> None:
        self._store = store
        self._clock = clock
        self._locks: dict[Domain, asyncio.Lock] = {}

    def _lock(self, domain: Domain) -> asyncio.Lock:
        lock = self._locks.get(domain)
        if lock is None:
            lock = self._locks[domain] = asyncio.Lock()
        return lock

    async def reconcile(self, domain: Domain, rules: list[ReminderRule]) -> ReconcileResult:
        """Replace every pending alert under the domain with those built from rules."""
        async with self._lock(domain):
            result = ReconcileResult(domain)

            if not await ensure_authorized(self._store):
                result.authorized = False
                return result

            prefix_ = prefix(domain)
            pending = await self._store.list_pending()
            stale = [ident for ident in pending if ident.startswith(prefix_)]
            if stale:
                result.removed = await self._remove(stale, result)

            now = self._clock()
            alerts = _dedupe(domain, build_all(domain, rules, today_host_weekday(now), now))
            for alert in alerts:
                await self._add(alert, result)

            log.info(
                "reconciled %s: removed %d, added %d, failed %d",
                domain.value,
                len(result.removed),
                len(result.added),
                len(result.failed),
            )
            return result

    async def schedule(self, domain: Domain, rules: list[ReminderRule]) -> ReconcileResult:
        """Add alerts for rules without sweeping the domain (e.g. a timer started)."""
        async with self._lock(domain):
            result = ReconcileResult(domain)
            if not await ensure_authorized(self._store):
                result.authorized = False
                return result
            now = self._clock()
            for alert in _dedupe(domain, build_all(domain, rules, today_host_weekday(now), now)):
                await self._add(alert, result)
            return result

    async def cancel(self, domain: Domain, entity: str) -> list[str]:
        """Remove an entity's alerts right away, outside any reconcile pass."""
        pending = await self._store.list_pending()
        targets = []
        for ident in pending:
            if not ident.startswith(prefix(domain)):
                continue
            try:
                owner = parse(ident).entity
            except ValueError:
                log.warning("ignoring malformed alert id %s", ident)
                continue
            if owner == entity:
                targets.append(ident)
        if not targets:
            return []
        result = ReconcileResult(domain)
        removed = await self._remove(targets, result)
        log.info("cancelled %s alerts: %s", domain.value, ", ".join(removed) or "none")
        return removed

    async def _remove(self, identifiers: list[str], result: ReconcileResult) -> list[str]:
        try:
            await self._store.remove(identifiers)
            return list(identifiers)
        except NotificationError:
            log.warning("batch remove of %d alerts failed; retrying one by one", len(identifiers))

        removed: list[str] = []
        for ident in identifiers:
            try:
                await self._store.remove([ident])
            except NotificationError as e:
                log.error("failed to remove %s: %s", ident, e.reason)
                result.failed.append(ident)
            else:
                removed.append(ident)
        return removed

    async def _add(self, alert: ScheduledAlert, result: ReconcileResult) -> None:
        try:
            await self._store.add(alert.identifier, alert.trigger, alert.content)
        except NotificationError as e:
            log.error("failed to schedule %s: %s", alert.identifier, e.reason)
            result.failed.append(alert.identifier)
        else:
            result.added.append(alert.identifier)
