"""
Domain-specific exception hierarchy for the hourbook application.

Business-rule failures are not exceptions; they are reported as
``Rejection`` values. These classes cover infrastructure faults and
configuration problems only.
"""

from datetime import date, time


class HourbookError(Exception):
    """Base class for all application-level errors."""


class ConfigError(HourbookError):
    """Raised when the configuration file cannot be read or is invalid."""


class StoreError(HourbookError):
    """Base class for errors raised by store adapters."""


class StoreUnavailableError(StoreError):
    """Raised when the underlying store fails to respond; no decision was made."""


class DuplicateAppointmentError(StoreError):
    """Raised when an insert hits the (owner, date, start) uniqueness constraint."""

    def __init__(self, owner: str, day: date, start: time):
        super().__init__(
            f"Appointment already exists for {owner} on {day.isoformat()} at {start.strftime('%H:%M')}"
        )
        self.owner = owner
        self.day = day
        self.start = start
