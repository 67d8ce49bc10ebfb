"""
Tests for the hourly slot generator.
"""

from datetime import time

import pendulum
import pytest

from hourbook.domain.models import add_minutes
from hourbook.domain.slot_generator import HourlySlotGenerator

from .conftest import NOW, TODAY, TOMORROW


class TestHourlySlotGenerator:
    """Tests for HourlySlotGenerator."""

    def test_full_window_without_bookings(self):
        """Test a 10-17 window on a future day yields seven slots."""
        slots = HourlySlotGenerator().generate(TOMORROW, time(10, 0), time(17, 0), [], NOW)

        assert len(slots) == 7
        assert slots[0].start == time(10, 0)
        assert slots[0].end == time(11, 0)
        assert slots[-1].start == time(16, 0)
        assert slots[-1].end == time(17, 0)
        assert all(slot.date == TOMORROW for slot in slots)

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (time(0, 0), time(1, 0), 1),
            (time(9, 0), time(12, 0), 3),
            (time(8, 0), time(23, 0), 15),
            (time(0, 0), time(23, 59), 23),
        ],
    )
    def test_candidate_count_is_whole_hours(self, start, end, expected):
        """Test each slot is one hour and starts step by one hour."""
        slots = HourlySlotGenerator().generate(TOMORROW, start, end, [], NOW)

        assert len(slots) == expected
        for previous, current in zip(slots, slots[1:]):
            assert current.start == previous.end
        for slot in slots:
            assert slot.end == add_minutes(slot.start, 60)

    def test_mid_hour_end_truncates_last_slot(self):
        """Test a partial trailing hour is dropped."""
        slots = HourlySlotGenerator().generate(TOMORROW, time(10, 0), time(12, 30), [], NOW)

        assert [slot.start for slot in slots] == [time(10, 0), time(11, 0)]

    def test_booked_starts_are_excluded(self):
        """Test a booked start time removes exactly that slot."""
        slots = HourlySlotGenerator().generate(
            TOMORROW, time(10, 0), time(17, 0), [time(12, 0), time(16, 0)], NOW
        )

        starts = [slot.start for slot in slots]
        assert len(slots) == 5
        assert time(12, 0) not in starts
        assert time(16, 0) not in starts

    def test_today_excludes_started_slots(self):
        """Test that at 09:30 the 09:00 slot is gone but 10:00 remains."""
        slots = HourlySlotGenerator().generate(TODAY, time(8, 0), time(12, 0), [], NOW)

        assert [slot.start for slot in slots] == [time(10, 0), time(11, 0)]

    def test_slot_starting_exactly_now_is_excluded(self):
        """Test a slot starting at the current instant counts as ongoing."""
        now = pendulum.datetime(2024, 11, 25, 10, 0, tz="UTC")

        slots = HourlySlotGenerator().generate(TODAY, time(10, 0), time(12, 0), [], now)

        assert [slot.start for slot in slots] == [time(11, 0)]

    def test_today_after_window_yields_nothing(self):
        now = pendulum.datetime(2024, 11, 25, 18, 0, tz="UTC")

        assert HourlySlotGenerator().generate(TODAY, time(10, 0), time(17, 0), [], now) == []

    def test_other_days_ignore_current_time(self):
        """Test the current time only matters for today."""
        late = pendulum.datetime(2024, 11, 25, 23, 0, tz="UTC")

        slots = HourlySlotGenerator().generate(TOMORROW, time(10, 0), time(12, 0), [], late)

        assert len(slots) == 2

    @pytest.mark.parametrize(
        "start, end",
        [
            (None, time(17, 0)),
            (time(10, 0), None),
            (time(17, 0), time(10, 0)),
            (time(10, 0), time(10, 0)),
        ],
    )
    def test_invalid_window_yields_empty_list(self, start, end):
        """Test missing or inverted windows fail softly."""
        assert HourlySlotGenerator().generate(TOMORROW, start, end, [], NOW) == []

    def test_window_shorter_than_a_slot_yields_empty_list(self):
        assert HourlySlotGenerator().generate(TOMORROW, time(10, 0), time(10, 30), [], NOW) == []

    def test_is_deterministic(self):
        generator = HourlySlotGenerator()

        first = generator.generate(TODAY, time(8, 0), time(17, 0), [time(13, 0)], NOW)
        second = generator.generate(TODAY, time(8, 0), time(17, 0), [time(13, 0)], NOW)

        assert first == second
