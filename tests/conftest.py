"""
Shared fixtures: a fixed clock and an engine over the in-memory store.
"""

from datetime import date, time

import pendulum
import pytest

from hourbook.adapters.memory_store import InMemoryCalendarStore
from hourbook.services.booking_engine import BookingEngine

# Monday morning, half past nine
NOW = pendulum.datetime(2024, 11, 25, 9, 30, tz="UTC")
TODAY = date(2024, 11, 25)
TOMORROW = date(2024, 11, 26)
YESTERDAY = date(2024, 11, 24)


@pytest.fixture
def store() -> InMemoryCalendarStore:
    return InMemoryCalendarStore()


@pytest.fixture
def engine(store: InMemoryCalendarStore) -> BookingEngine:
    engine = BookingEngine(
        owners=store,
        availability=store,
        appointments=store,
        clock=lambda: NOW,
    )
    engine.register_owner("alice", "Alice Example")
    return engine


@pytest.fixture
def open_engine(engine: BookingEngine) -> BookingEngine:
    """Engine whose owner 'alice' is available 10:00-17:00."""
    outcome = engine.set_availability("alice", time(10, 0), time(17, 0))
    assert outcome.accepted
    return engine
