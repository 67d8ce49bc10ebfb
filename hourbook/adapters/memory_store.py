"""
In-memory calendar store for testing without a database.
"""

import itertools
import threading
from datetime import date, time
from typing import Dict, List, Optional, Tuple

from ..domain.exceptions import DuplicateAppointmentError
from ..domain.models import Appointment, AvailabilityRule, Owner


class InMemoryCalendarStore:
    """
    Store that keeps owners, rules and appointments in dictionaries.

    Implements the same ports as ``SqlCalendarStore`` so the booking engine
    can be exercised without SQLAlchemy. A single lock is held across every
    check-and-write, which gives inserts the same uniqueness guarantee the
    database constraint provides.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._owners: Dict[str, Owner] = {}
        self._rules: Dict[str, List[AvailabilityRule]] = {}
        self._appointments: Dict[Tuple[str, date, time], Appointment] = {}
        self._ids = itertools.count(1)

    # Owners

    def exists(self, username: str) -> bool:
        with self._lock:
            return username in self._owners

    def get(self, username: str) -> Optional[Owner]:
        with self._lock:
            return self._owners.get(username)

    def create_if_absent(self, username: str, display_name: str) -> Owner:
        with self._lock:
            if username not in self._owners:
                self._owners[username] = Owner(username=username, display_name=display_name)
            return self._owners[username]

    # Availability rules

    def find_rules(self, username: str) -> List[AvailabilityRule]:
        with self._lock:
            return list(self._rules.get(username, []))

    def replace_rule(self, rule: AvailabilityRule) -> AvailabilityRule:
        with self._lock:
            self._rules[rule.owner] = [rule]
            return rule

    # Appointments

    def find_by_date(self, username: str, day: date) -> List[Appointment]:
        with self._lock:
            return [
                appointment for (owner, appt_day, _), appointment in self._appointments.items()
                if owner == username and appt_day == day
            ]

    def find_by_start(self, username: str, day: date, start: time) -> Optional[Appointment]:
        with self._lock:
            return self._appointments.get((username, day, start))

    def insert(self, appointment: Appointment) -> Appointment:
        with self._lock:
            if appointment.key in self._appointments:
                raise DuplicateAppointmentError(appointment.owner, appointment.date, appointment.start)

            stored = Appointment(
                owner=appointment.owner,
                date=appointment.date,
                start=appointment.start,
                end=appointment.end,
                invitee_name=appointment.invitee_name,
                invitee_email=appointment.invitee_email,
                id=next(self._ids),
            )
            self._appointments[stored.key] = stored
            return stored

    def find_upcoming(self, username: str, from_day: date) -> List[Appointment]:
        with self._lock:
            upcoming = [
                appointment for appointment in self._appointments.values()
                if appointment.owner == username and appointment.date >= from_day
            ]
        return sorted(upcoming, key=lambda a: (a.date, a.start))
