"""
SQLAlchemy-backed calendar store.

The ``appointment`` table carries a unique constraint on
(owner, date, start_time); it is the final arbiter for concurrent bookings.
"""

from datetime import date, time
from typing import List, Optional

from sqlalchemy import (
    Date,
    ForeignKey,
    Integer,
    String,
    Time,
    UniqueConstraint,
    create_engine,
    delete,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from ..domain.exceptions import DuplicateAppointmentError, StoreUnavailableError
from ..domain.models import Appointment, AvailabilityRule, Owner

SQLITE_BUSY_TIMEOUT_SECONDS = 30


class Base(DeclarativeBase):
    pass


class OwnerRow(Base):
    __tablename__ = "calendar_owner"

    username: Mapped[str] = mapped_column(String(255), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(255))


class AvailabilityRuleRow(Base):
    __tablename__ = "availability_rule"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(ForeignKey("calendar_owner.username"), index=True)
    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)


class AppointmentRow(Base):
    __tablename__ = "appointment"
    __table_args__ = (
        UniqueConstraint("owner", "date", "start_time", name="uq_appointment_owner_date_start"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(ForeignKey("calendar_owner.username"), index=True)
    day: Mapped[date] = mapped_column("date", Date)
    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)
    invitee_name: Mapped[str] = mapped_column(String(255))
    invitee_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


def build_engine(database_url: str) -> Engine:
    """
    Create a SQLAlchemy engine for ``database_url``.

    SQLite connections are shared across worker threads and wait for a
    writer lock instead of failing immediately.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT_SECONDS}
    return create_engine(database_url, connect_args=connect_args)


class SqlCalendarStore:
    """
    Durable store for owners, availability rules and appointments.

    Every method runs in its own transaction. Integrity errors on appointment
    insert become ``DuplicateAppointmentError``; every other database error
    becomes ``StoreUnavailableError``.
    """

    def __init__(self, database_url: str = "sqlite:///hourbook.db", engine: Optional[Engine] = None):
        """
        Initialize the store.

        Args:
            database_url: SQLAlchemy database URL
            engine: Optional pre-built engine (takes precedence over the URL)
        """
        self.engine = engine or build_engine(database_url)
        self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not create schema: {e}") from e

    # Owners

    def exists(self, username: str) -> bool:
        return self.get(username) is not None

    def get(self, username: str) -> Optional[Owner]:
        try:
            with self._sessions() as session:
                row = session.get(OwnerRow, username)
                return self._to_owner(row) if row else None
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to load owner {username}: {e}") from e

    def create_if_absent(self, username: str, display_name: str) -> Owner:
        try:
            with self._sessions.begin() as session:
                row = session.get(OwnerRow, username)
                if row is None:
                    row = OwnerRow(username=username, display_name=display_name)
                    session.add(row)
                return self._to_owner(row)
        except IntegrityError as e:
            # Created concurrently by another caller
            existing = self.get(username)
            if existing is None:
                raise StoreUnavailableError(f"Failed to create owner {username}: {e}") from e
            return existing
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to create owner {username}: {e}") from e

    # Availability rules

    def find_rules(self, username: str) -> List[AvailabilityRule]:
        try:
            with self._sessions() as session:
                rows = session.scalars(
                    select(AvailabilityRuleRow)
                    .where(AvailabilityRuleRow.owner == username)
                    .order_by(AvailabilityRuleRow.start_time)
                ).all()
                return [self._to_rule(row) for row in rows]
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to load rules for {username}: {e}") from e

    def replace_rule(self, rule: AvailabilityRule) -> AvailabilityRule:
        """Delete the owner's rules and insert ``rule`` in one transaction."""
        try:
            with self._sessions.begin() as session:
                session.execute(delete(AvailabilityRuleRow).where(AvailabilityRuleRow.owner == rule.owner))
                session.add(
                    AvailabilityRuleRow(owner=rule.owner, start_time=rule.start_time, end_time=rule.end_time)
                )
            return rule
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to replace rules for {rule.owner}: {e}") from e

    # Appointments

    def find_by_date(self, username: str, day: date) -> List[Appointment]:
        try:
            with self._sessions() as session:
                rows = session.scalars(
                    select(AppointmentRow)
                    .where(AppointmentRow.owner == username, AppointmentRow.day == day)
                    .order_by(AppointmentRow.start_time)
                ).all()
                return [self._to_appointment(row) for row in rows]
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to load appointments for {username}: {e}") from e

    def find_by_start(self, username: str, day: date, start: time) -> Optional[Appointment]:
        try:
            with self._sessions() as session:
                row = session.scalars(
                    select(AppointmentRow).where(
                        AppointmentRow.owner == username,
                        AppointmentRow.day == day,
                        AppointmentRow.start_time == start,
                    )
                ).first()
                return self._to_appointment(row) if row else None
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to load appointment for {username}: {e}") from e

    def insert(self, appointment: Appointment) -> Appointment:
        row = AppointmentRow(
            owner=appointment.owner,
            day=appointment.date,
            start_time=appointment.start,
            end_time=appointment.end,
            invitee_name=appointment.invitee_name,
            invitee_email=appointment.invitee_email,
        )
        try:
            with self._sessions.begin() as session:
                session.add(row)
            return self._to_appointment(row)
        except IntegrityError as e:
            raise DuplicateAppointmentError(appointment.owner, appointment.date, appointment.start) from e
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to insert appointment for {appointment.owner}: {e}") from e

    def find_upcoming(self, username: str, from_day: date) -> List[Appointment]:
        try:
            with self._sessions() as session:
                rows = session.scalars(
                    select(AppointmentRow)
                    .where(AppointmentRow.owner == username, AppointmentRow.day >= from_day)
                    .order_by(AppointmentRow.day, AppointmentRow.start_time)
                ).all()
                return [self._to_appointment(row) for row in rows]
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to load upcoming appointments for {username}: {e}") from e

    @staticmethod
    def _to_owner(row: OwnerRow) -> Owner:
        return Owner(username=row.username, display_name=row.display_name)

    @staticmethod
    def _to_rule(row: AvailabilityRuleRow) -> AvailabilityRule:
        return AvailabilityRule(owner=row.owner, start_time=row.start_time, end_time=row.end_time)

    @staticmethod
    def _to_appointment(row: AppointmentRow) -> Appointment:
        return Appointment(
            owner=row.owner,
            date=row.day,
            start=row.start_time,
            end=row.end_time,
            invitee_name=row.invitee_name,
            invitee_email=row.invitee_email,
            id=row.id,
        )
