"""
Application service for publishing availability and booking slots.

The engine coordinates reads and writes against the store ports and
delegates slot derivation to the domain-level ``SlotGenerator``. It keeps
no state of its own: every call works on a fresh snapshot of the store and
reads the clock exactly once.
"""

from __future__ import annotations

import logging
from datetime import date, time
from typing import Callable, List, Optional, Protocol

import pendulum
from pendulum import DateTime

from ..domain.exceptions import DuplicateAppointmentError, StoreUnavailableError
from ..domain.models import (
    Appointment,
    AvailabilityRule,
    Invitee,
    Outcome,
    Owner,
    Rejection,
    Slot,
    validate_window,
)
from ..domain.slot_generator import HourlySlotGenerator, SlotGenerator

logger = logging.getLogger(__name__)

Clock = Callable[[], DateTime]


class OwnerLookup(Protocol):
    """Protocol describing owner access needed by the engine."""

    def exists(self, username: str) -> bool:
        """Return True if the owner has a record."""

    def get(self, username: str) -> Optional[Owner]:
        """Return the owner, or None."""

    def create_if_absent(self, username: str, display_name: str) -> Owner:
        """Create the owner unless it exists; return the stored owner."""


class AvailabilityStore(Protocol):
    """Protocol describing availability rule storage."""

    def find_rules(self, username: str) -> List[AvailabilityRule]:
        """Return all rules stored for the owner."""

    def replace_rule(self, rule: AvailabilityRule) -> AvailabilityRule:
        """Atomically replace every rule of ``rule.owner`` with ``rule``."""


class AppointmentStore(Protocol):
    """Protocol describing appointment storage."""

    def find_by_date(self, username: str, day: date) -> List[Appointment]:
        """Return the owner's appointments on ``day``."""

    def find_by_start(self, username: str, day: date, start: time) -> Optional[Appointment]:
        """Return the appointment at (owner, day, start), or None."""

    def insert(self, appointment: Appointment) -> Appointment:
        """Store the appointment; raise DuplicateAppointmentError on a uniqueness clash."""

    def find_upcoming(self, username: str, from_day: date) -> List[Appointment]:
        """Return appointments on or after ``from_day`` ordered by (date, start)."""


class BookingEngine:
    """
    Orchestrates availability rules, slot derivation and bookings.

    Validation and business-rule failures come back as ``Outcome`` rejections.
    Store faults (``StoreUnavailableError``) propagate from the mutating
    operations and are logged and degraded to empty results by the read ones.
    The store's uniqueness constraint is what guarantees a single booking per
    slot; the checks done here only turn a conflict into a precise rejection.
    """

    def __init__(
        self,
        owners: OwnerLookup,
        availability: AvailabilityStore,
        appointments: AppointmentStore,
        slot_generator: Optional[SlotGenerator] = None,
        clock: Optional[Clock] = None,
        timezone: str = "UTC",
    ) -> None:
        self._owners = owners
        self._availability = availability
        self._appointments = appointments
        self._slot_generator = slot_generator or HourlySlotGenerator()
        self._clock = clock or (lambda: pendulum.now(timezone))

    def register_owner(self, username: str, display_name: Optional[str] = None) -> Owner:
        """Create the owner if no record exists yet."""
        owner = self._owners.create_if_absent(username, display_name or username)
        logger.info("Owner %s registered", owner.username)
        return owner

    def set_availability(
        self,
        username: str,
        start_time: time,
        end_time: time,
    ) -> Outcome[AvailabilityRule]:
        """
        Validate a window and make it the owner's only availability rule.

        Checks run in order, first failure wins: owner exists, start before
        end, at least one hour, both on the hour.
        """
        if not self._owners.exists(username):
            logger.warning("Owner not found for username: %s", username)
            return Outcome.reject(Rejection.OWNER_NOT_FOUND)

        rejection = validate_window(start_time, end_time)
        if rejection is not None:
            logger.warning("Invalid availability window for %s: %s", username, rejection.value)
            return Outcome.reject(rejection)

        rule = self._availability.replace_rule(
            AvailabilityRule(owner=username, start_time=start_time, end_time=end_time)
        )
        logger.info("Availability for %s set to %s", username, rule)
        return Outcome.accept(rule)

    def search(self, username: str, day: date) -> List[Slot]:
        """
        Return the free slots of ``username`` on ``day``.

        Never raises: unknown owners, past dates, missing rules and store
        faults all yield an empty list.
        """
        try:
            return self._available_slots(username, day, self._clock())
        except StoreUnavailableError:
            logger.exception("Error searching available slots for user: %s", username)
            return []

    def book(self, username: str, day: date, start: time, invitee: Invitee) -> Outcome[Slot]:
        """
        Book the slot starting at ``start`` on ``day``.

        Steps, each a hard gate:
        1. owner exists
        2. day is not in the past
        3. no appointment exists at (owner, day, start)
        4. the slot is among the freshly computed free slots
        5. the insert passes the store's uniqueness constraint

        Raises:
            StoreUnavailableError: If the store fails; no decision was made
        """
        now = self._clock()

        if not self._owners.exists(username):
            logger.warning("Owner not found for username: %s", username)
            return Outcome.reject(Rejection.OWNER_NOT_FOUND)

        if day < self._today(now):
            logger.warning("Attempt to book appointment in the past: %s", day)
            return Outcome.reject(Rejection.PAST_DATE)

        requested = Slot.starting_at(day, start)
        is_free = requested in self._available_slots(username, day, now)

        # A taken slot is reported as booked even when it already dropped out of the free set
        if self._appointments.find_by_start(username, day, start) is not None:
            logger.warning("Slot already booked (pre-insert check): %s", requested.format_display())
            return Outcome.reject(Rejection.SLOT_ALREADY_BOOKED)

        if not is_free:
            logger.warning("Slot not available for booking: %s", requested.format_display())
            return Outcome.reject(Rejection.SLOT_UNAVAILABLE)

        try:
            saved = self._appointments.insert(
                Appointment(
                    owner=username,
                    date=requested.date,
                    start=requested.start,
                    end=requested.end,
                    invitee_name=invitee.name,
                    invitee_email=invitee.email,
                )
            )
        except DuplicateAppointmentError:
            logger.warning("Slot already booked (constraint): %s", requested.format_display())
            return Outcome.reject(Rejection.SLOT_ALREADY_BOOKED)

        logger.info("Booked %s for %s", saved.slot.format_display(), username)
        return Outcome.accept(saved.slot)

    def list_upcoming(self, username: str) -> List[Appointment]:
        """Return appointments from today on, ordered by (date, start)."""
        now = self._clock()
        try:
            if not self._owners.exists(username):
                logger.warning("Owner not found for username: %s", username)
                return []
            return self._appointments.find_upcoming(username, self._today(now))
        except StoreUnavailableError:
            logger.exception("Error listing upcoming appointments for user: %s", username)
            return []

    def _available_slots(self, username: str, day: date, now: DateTime) -> List[Slot]:
        """
        Derive free slots from a fresh store snapshot.

        Store faults propagate so that ``book`` never mistakes an outage for
        an unavailable slot.
        """
        if not self._owners.exists(username):
            logger.warning("Owner not found for username: %s", username)
            return []

        if day < self._today(now):
            logger.warning("Attempt to search availability for past date: %s", day)
            return []

        rules = self._availability.find_rules(username)
        if not rules:
            return []

        booked_starts = [a.start for a in self._appointments.find_by_date(username, day)]

        slots: List[Slot] = []
        for rule in rules:
            slots.extend(
                self._slot_generator.generate(
                    day=day,
                    window_start=rule.start_time,
                    window_end=rule.end_time,
                    booked_starts=booked_starts,
                    now=now,
                )
            )

        return sorted(slots)

    @staticmethod
    def _today(now: DateTime) -> date:
        current = now.date()
        return date(current.year, current.month, current.day)
