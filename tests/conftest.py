"""Shared fixtures for pump-alerts tests."""

import os

os.environ.setdefault("PUMP_ALERTS_TIMEZONE", "America/Los_Angeles")

import pytest

from pump_alerts.errors import NotificationError


class FakeStore:
    """In-memory host store recording every call in order."""

    def __init__(self, *, authorized=True, grant=False):
        self.pending: dict[str, tuple] = {}
        self.authorized = authorized
        self.grant = grant
        self.fail_add: set[str] = set()
        self.fail_remove: set[str] = set()
        self.calls: list[tuple] = []
        self.auth_requests = 0

    async def is_authorized(self):
        return self.authorized

    async def request_authorization(self):
        self.auth_requests += 1
        if self.grant:
            self.authorized = True
        return self.authorized

    async def list_pending(self):
        self.calls.append(("list",))
        return list(self.pending)

    async def add(self, identifier, trigger, content):
        self.calls.append(("add", identifier))
        if identifier in self.fail_add:
            raise NotificationError(identifier, "add rejected")
        self.pending[identifier] = (trigger, content)

    async def remove(self, identifiers):
        self.calls.append(("remove", tuple(identifiers)))
        bad = [i for i in identifiers if i in self.fail_remove]
        if bad:
            raise NotificationError(bad[0], "remove rejected")
        for ident in identifiers:
            self.pending.pop(ident, None)


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    """Redirect all data file paths to a temp directory."""
    import pump_alerts.main as main_mod
    import pump_alerts.preferences as preferences_mod
    import pump_alerts.state as state_mod
    import pump_alerts.storage as storage_mod

    state_dir = tmp_path / "state"
    monkeypatch.setattr(storage_mod, "DATA_DIR", tmp_path)
    monkeypatch.setattr(storage_mod, "STATE_DIR", state_dir)
    monkeypatch.setattr(state_mod, "TASKS_DIR", tmp_path / "tasks")
    monkeypatch.setattr(state_mod, "HABITS_DIR", tmp_path / "habits")
    monkeypatch.setattr(state_mod, "SUPPLEMENTS_DIR", tmp_path / "supplements")
    monkeypatch.setattr(state_mod, "TIMERS_DIR", tmp_path / "timers")
    monkeypatch.setattr(state_mod, "ITINERARY_DIR", tmp_path / "itinerary")
    monkeypatch.setattr(state_mod, "SCHEDULE_FILE", tmp_path / "schedule.yaml")
    monkeypatch.setattr(state_mod, "COMPLETIONS_FILE", state_dir / "completions.json")
    monkeypatch.setattr(preferences_mod, "PREFERENCES_FILE", state_dir / "preferences.json")
    monkeypatch.setattr(main_mod, "PID_FILE", state_dir / "daemon.pid")
    return tmp_path
