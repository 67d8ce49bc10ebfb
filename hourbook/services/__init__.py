"""
Service layer helpers that orchestrate store adapters and domain logic.
"""

from .booking_engine import AppointmentStore, AvailabilityStore, BookingEngine, OwnerLookup

__all__ = ["AppointmentStore", "AvailabilityStore", "BookingEngine", "OwnerLookup"]
