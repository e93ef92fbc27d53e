"""Exception hierarchy for pump-alerts."""


class PumpAlertsError(Exception):
    """Base class for errors raised by pump-alerts."""


class NotificationError(PumpAlertsError):
    """The host notification store rejected an add or remove."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"{identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason
