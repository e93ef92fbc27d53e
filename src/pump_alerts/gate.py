"""Authorization check wrapped around every scheduling operation."""

from __future__ import annotations

import logging

from pump_alerts.host import HostNotificationStore

log = logging.getLogger(__name__)


async def ensure_authorized(store: HostNotificationStore) -> bool:
    """Check, and ask once if needed. Denial is not an error; callers just skip."""
    if await store.is_authorized():
        return True
    granted = await store.request_authorization()
    if not granted:
        log.info("notifications not authorized; skipping")
    return granted
