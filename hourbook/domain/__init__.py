"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    Appointment,
    AvailabilityRule,
    Invitee,
    Outcome,
    Owner,
    Rejection,
    Slot,
    validate_window,
)
from .slot_generator import HourlySlotGenerator, SlotGenerator

__all__ = [
    "Appointment",
    "AvailabilityRule",
    "Invitee",
    "Outcome",
    "Owner",
    "Rejection",
    "Slot",
    "validate_window",
    "HourlySlotGenerator",
    "SlotGenerator",
]
