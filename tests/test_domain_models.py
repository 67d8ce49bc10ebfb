"""
Tests for domain models.
"""

from datetime import date, time

import pytest

from hourbook.domain.models import (
    Appointment,
    Invitee,
    Outcome,
    Owner,
    Rejection,
    Slot,
    add_minutes,
    validate_window,
)


class TestSlot:
    """Tests for Slot model."""

    def test_starting_at_spans_one_hour(self):
        """A slot built from its start ends one hour later."""
        slot = Slot.starting_at(date(2024, 11, 25), time(10, 0))

        assert slot.start == time(10, 0)
        assert slot.end == time(11, 0)

    def test_ordering_by_date_then_start(self):
        """Slots sort by date first, then start time."""
        late_today = Slot.starting_at(date(2024, 11, 25), time(16, 0))
        early_tomorrow = Slot.starting_at(date(2024, 11, 26), time(9, 0))
        early_today = Slot.starting_at(date(2024, 11, 25), time(9, 0))

        assert sorted([early_tomorrow, late_today, early_today]) == [
            early_today,
            late_today,
            early_tomorrow,
        ]

    def test_format_display(self):
        """Display format includes weekday, date and times."""
        slot = Slot.starting_at(date(2024, 11, 25), time(10, 0))

        assert slot.format_display() == "Monday, 2024-11-25 | 10:00 - 11:00"


class TestOwnerAndInvitee:
    """Tests for Owner and Invitee models."""

    def test_display_name_defaults_to_username(self):
        assert Owner(username="alice").display_name == "alice"

    def test_blank_username_raises_error(self):
        with pytest.raises(ValueError, match="username"):
            Owner(username="  ")

    def test_invitee_name_is_required(self):
        with pytest.raises(ValueError, match="Invitee name is required"):
            Invitee(name="")

    def test_invitee_email_is_optional(self):
        assert Invitee(name="Bob").email is None


def test_appointment_slot_and_key():
    """An appointment exposes its slot and uniqueness key."""
    appointment = Appointment(
        owner="alice",
        date=date(2024, 11, 26),
        start=time(12, 0),
        end=time(13, 0),
        invitee_name="Bob",
    )

    assert appointment.slot == Slot.starting_at(date(2024, 11, 26), time(12, 0))
    assert appointment.key == ("alice", date(2024, 11, 26), time(12, 0))


def test_add_minutes_wraps_at_midnight():
    assert add_minutes(time(23, 0), 60) == time(0, 0)


class TestValidateWindow:
    """Tests for availability window validation."""

    def test_valid_window(self):
        assert validate_window(time(10, 0), time(17, 0)) is None

    def test_exactly_one_hour_is_valid(self):
        assert validate_window(time(10, 0), time(11, 0)) is None

    def test_inverted_window(self):
        assert validate_window(time(18, 0), time(17, 0)) == Rejection.INVALID_ORDER

    def test_empty_window(self):
        assert validate_window(time(10, 0), time(10, 0)) == Rejection.INVALID_ORDER

    def test_short_window(self):
        assert validate_window(time(10, 0), time(10, 30)) == Rejection.WINDOW_TOO_SHORT

    def test_length_is_checked_before_alignment(self):
        """A 30 minute window off the hour fails on length first."""
        assert validate_window(time(10, 15), time(10, 45)) == Rejection.WINDOW_TOO_SHORT

    def test_misaligned_window(self):
        assert validate_window(time(10, 30), time(12, 0)) == Rejection.NOT_HOUR_ALIGNED
        assert validate_window(time(10, 0), time(12, 30)) == Rejection.NOT_HOUR_ALIGNED


def test_outcome_accept_and_reject():
    accepted = Outcome.accept("value")
    rejected = Outcome.reject(Rejection.PAST_DATE)

    assert accepted.accepted
    assert accepted.value == "value"
    assert not rejected.accepted
    assert rejected.rejection is Rejection.PAST_DATE
    assert rejected.rejection.message == "Date is in the past"
