"""
Core business logic for deriving bookable slots from an availability window.

Pure domain logic without any external dependencies (no store access,
no clock reads). The caller passes in the current instant.
"""

from datetime import date, time
from typing import Iterable, List, Optional, Protocol

import pendulum
from pendulum import DateTime

from .models import SLOT_MINUTES, Slot


class SlotGenerator(Protocol):
    """Capability for turning a window and existing bookings into free slots."""

    def generate(
        self,
        day: date,
        window_start: Optional[time],
        window_end: Optional[time],
        booked_starts: Iterable[time],
        now: DateTime,
    ) -> List[Slot]:
        """Return free slots for ``day`` in ascending start order."""


class HourlySlotGenerator:
    """
    Produces fixed one-hour slots.

    Algorithm:
    1. Start at the window start and step one hour at a time
    2. Stop once a full slot no longer fits before the window end
    3. Skip starts that are already booked
    4. If ``day`` is today, skip slots that have already started
    """

    def __init__(self, slot_minutes: int = SLOT_MINUTES):
        self.slot_minutes = slot_minutes

    def generate(
        self,
        day: date,
        window_start: Optional[time],
        window_end: Optional[time],
        booked_starts: Iterable[time],
        now: DateTime,
    ) -> List[Slot]:
        """
        Generate free slots for one window on one day.

        Args:
            day: The date the slots fall on
            window_start: Start of the availability window (inclusive)
            window_end: End of the availability window (exclusive)
            booked_starts: Start times of existing appointments on ``day``
            now: The current instant of the request

        Returns:
            List of Slot objects; empty if the window is missing or inverted
        """
        if window_start is None or window_end is None or not window_start < window_end:
            return []

        booked = {self._wall_clock(start) for start in booked_starts}
        current_now = now.naive()
        is_today = day == current_now.date()

        cursor = self._on_day(day, window_start)
        limit = self._on_day(day, window_end)
        slots: List[Slot] = []

        while cursor.add(minutes=self.slot_minutes) <= limit:
            start = self._wall_clock(cursor)
            next_cursor = cursor.add(minutes=self.slot_minutes)

            # Starting exactly now counts as ongoing
            if start not in booked and not (is_today and cursor <= current_now):
                slots.append(Slot(date=day, start=start, end=self._wall_clock(next_cursor)))

            cursor = next_cursor

        return slots

    @staticmethod
    def _on_day(day: date, wall_time: time) -> DateTime:
        return pendulum.naive(
            day.year, day.month, day.day,
            wall_time.hour, wall_time.minute, wall_time.second
        )

    @staticmethod
    def _wall_clock(value) -> time:
        """Normalise to a plain ``datetime.time`` so set membership is exact."""
        return time(value.hour, value.minute, value.second)
