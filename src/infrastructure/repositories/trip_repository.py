# src/infrastructure/repositories/trip_repository.py

from datetime import datetime

from sqlalchemy.orm import Session
from sqlalchemy import select, update

from src.infrastructure.db.models import Trip


class TripRepository:

    def __init__(self, db: Session):
        self.db = db

    def list_trips(self) -> list[Trip]:
        stmt = select(Trip).order_by(Trip.depart_at, Trip.id)
        return list(self.db.execute(stmt).scalars().all())

    def get_by_id(self, trip_id: int) -> Trip | None:
        stmt = select(Trip).where(Trip.id == trip_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_trip(
        self,
        origin: str,
        destination: str,
        depart_at: datetime,
        capacity: int,
    ) -> Trip:
        trip = Trip(
            origin=origin,
            destination=destination,
            depart_at=depart_at,
            capacity=capacity,
            seats_available=capacity,
        )
        self.db.add(trip)
        return trip

    def reserve_seat(self, trip_id: int) -> bool:
        """
        UPDATE ... SET seats_available = seats_available - 1
        WHERE id = :trip_id AND seats_available > 0

        The row lock taken by the UPDATE serializes concurrent reservations;
        the WHERE clause is re-checked after the lock is granted.
        Returns False when the trip is missing or sold out.
        """

        stmt = (
            update(Trip)
            .where(Trip.id == trip_id)
            .where(Trip.seats_available > 0)
            .values(seats_available=Trip.seats_available - 1)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def release_seat(self, trip_id: int) -> bool:
        stmt = (
            update(Trip)
            .where(Trip.id == trip_id)
            .values(seats_available=Trip.seats_available + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1
