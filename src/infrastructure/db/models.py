# src/infrastructure/db/models.py

from sqlalchemy import (
    String,
    Integer,
    DateTime,
    Enum,
    UniqueConstraint,
    CheckConstraint,
    ForeignKey,
)
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone

from src.infrastructure.db.session import Base
from src.domain.state_machine import TicketStatus


class UTCDateTime(TypeDecorator):
    """
    Timestamps are kept in UTC. SQLite has no offset storage, so values are
    written as naive UTC there and always read back as aware UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Trip(Base):
    """
    A scheduled journey with a fixed seat pool.
    seats_available is only ever changed by conditional updates
    issued from the reservation service.
    """

    __tablename__ = "trips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    origin: Mapped[str] = mapped_column(String(128), nullable=False)
    destination: Mapped[str] = mapped_column(String(128), nullable=False)
    depart_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        index=True,
    )
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    seats_available: Mapped[int] = mapped_column(Integer, nullable=False)

    tickets: Mapped[list["Ticket"]] = relationship(back_populates="trip")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_trip_capacity_positive"),
        CheckConstraint("seats_available >= 0", name="ck_trip_seats_available_nonnegative"),
        CheckConstraint("seats_available <= capacity", name="ck_trip_seats_available_lte_capacity"),
    )


class Ticket(Base):
    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ref: Mapped[str] = mapped_column(String(32), nullable=False)
    trip_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("trips.id"),
        nullable=False,
        index=True,
    )
    passenger_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[TicketStatus] = mapped_column(
        Enum(
            TicketStatus,
            name="ticket_status",
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        nullable=False,
        default=TicketStatus.PENDING,
    )
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    paid_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    trip: Mapped[Trip] = relationship(back_populates="tickets")

    __table_args__ = (
        UniqueConstraint("ref", name="uq_ticket_ref"),
        CheckConstraint("price_cents >= 0", name="ck_ticket_price_nonnegative"),
    )
