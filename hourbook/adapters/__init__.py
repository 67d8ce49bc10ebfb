"""
Adapters layer - Store implementations behind the booking engine ports.
"""

from .memory_store import InMemoryCalendarStore
from .sql_store import SqlCalendarStore, build_engine

__all__ = ["InMemoryCalendarStore", "SqlCalendarStore", "build_engine"]
