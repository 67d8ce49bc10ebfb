"""
Domain models for availability windows, slots and appointments.
"""

from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from typing import Generic, Optional, TypeVar

import pendulum

SLOT_MINUTES = 60

T = TypeVar("T")


def add_minutes(start: time, minutes: int) -> time:
    """Shift a wall-clock time, wrapping at midnight."""
    shifted = pendulum.naive(2000, 1, 1, start.hour, start.minute, start.second).add(minutes=minutes)
    return time(shifted.hour, shifted.minute, shifted.second)


def minutes_between(start: time, end: time) -> int:
    """Whole minutes from ``start`` to ``end`` on the same day (negative if end is earlier)."""
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)


@dataclass(frozen=True)
class Owner:
    """The calendar holder; ``username`` is the identity."""
    username: str
    display_name: str = ""

    def __post_init__(self):
        if not self.username or not self.username.strip():
            raise ValueError("Owner username must not be empty")
        if not self.display_name:
            object.__setattr__(self, "display_name", self.username)


@dataclass(frozen=True)
class AvailabilityRule:
    """
    Daily availability window of an owner.

    Invariant (checked by ``validate_window`` before a rule is stored):
    start before end, at least one hour long, both on the hour.
    """
    owner: str
    start_time: time
    end_time: time

    def __str__(self) -> str:
        return f"{self.start_time.strftime('%H:%M')} - {self.end_time.strftime('%H:%M')}"


@dataclass(frozen=True, order=True)
class Slot:
    """
    A one-hour interval on a given date.

    Ordering compares (date, start, end), which is the display order.
    """
    date: date
    start: time
    end: time

    @classmethod
    def starting_at(cls, day: date, start: time) -> "Slot":
        return cls(date=day, start=start, end=add_minutes(start, SLOT_MINUTES))

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, YYYY-MM-DD | HH:MM - HH:MM
        """
        weekday = self.date.strftime("%A")
        return (
            f"{weekday}, {self.date.isoformat()} | "
            f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"
        )


@dataclass(frozen=True)
class Invitee:
    """The party booking a slot."""
    name: str
    email: Optional[str] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Invitee name is required")


@dataclass(frozen=True)
class Appointment:
    """A booked slot. Unique per (owner, date, start)."""
    owner: str
    date: date
    start: time
    end: time
    invitee_name: str
    invitee_email: Optional[str] = None
    id: Optional[int] = None

    @property
    def slot(self) -> Slot:
        return Slot(date=self.date, start=self.start, end=self.end)

    @property
    def key(self) -> tuple:
        return (self.owner, self.date, self.start)


class Rejection(str, Enum):
    """Reasons a booking engine operation can be refused."""
    OWNER_NOT_FOUND = "owner_not_found"
    INVALID_ORDER = "invalid_order"
    WINDOW_TOO_SHORT = "window_too_short"
    NOT_HOUR_ALIGNED = "not_hour_aligned"
    PAST_DATE = "past_date"
    SLOT_UNAVAILABLE = "slot_unavailable"
    SLOT_ALREADY_BOOKED = "slot_already_booked"

    @property
    def message(self) -> str:
        return _REJECTION_MESSAGES[self]


_REJECTION_MESSAGES = {
    Rejection.OWNER_NOT_FOUND: "Owner not found",
    Rejection.INVALID_ORDER: "Start time must be before end time",
    Rejection.WINDOW_TOO_SHORT: "Availability window must be at least 1 hour",
    Rejection.NOT_HOUR_ALIGNED: "Start and end times must be on the hour",
    Rejection.PAST_DATE: "Date is in the past",
    Rejection.SLOT_UNAVAILABLE: "Slot is not available",
    Rejection.SLOT_ALREADY_BOOKED: "Slot is already booked",
}


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Typed result of a mutating engine operation.

    Exactly one of ``value`` and ``rejection`` is meaningful: an accepted
    outcome carries the value, a rejected one carries the reason.
    """
    value: Optional[T] = None
    rejection: Optional[Rejection] = None

    @classmethod
    def accept(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def reject(cls, reason: Rejection) -> "Outcome[T]":
        return cls(rejection=reason)

    @property
    def accepted(self) -> bool:
        return self.rejection is None


def validate_window(start_time: time, end_time: time) -> Optional[Rejection]:
    """
    Validate an availability window.

    Checks run in order and the first failure wins:
    order, minimum length, hour alignment.

    Returns:
        The rejection reason, or None if the window is valid
    """
    if not start_time < end_time:
        return Rejection.INVALID_ORDER
    if minutes_between(start_time, end_time) < SLOT_MINUTES:
        return Rejection.WINDOW_TOO_SHORT
    if (start_time.minute, start_time.second) != (0, 0) or (end_time.minute, end_time.second) != (0, 0):
        return Rejection.NOT_HOUR_ALIGNED
    return None
