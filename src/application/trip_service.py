import logging

from sqlalchemy.orm import Session

from src.application.transaction import atomic
from src.domain.exceptions import TripNotFoundError
from src.domain.validators import (
    require_positive_int,
    require_text,
    require_timestamp,
)
from src.infrastructure.db.models import Trip
from src.infrastructure.repositories.trip_repository import TripRepository

logger = logging.getLogger(__name__)


class TripService:
    """Trip inventory reads and trip administration."""

    def __init__(self, db: Session):
        self.db = db
        self.trip_repository = TripRepository(db)

    def list_trips(self) -> list[Trip]:
        return self.trip_repository.list_trips()

    def get_trip(self, trip_id: int) -> Trip:
        trip = self.trip_repository.get_by_id(trip_id)

        if not trip:
            raise TripNotFoundError(trip_id)

        return trip

    def create_trip(
        self,
        origin,
        destination,
        depart_at,
        capacity,
    ) -> Trip:
        origin = require_text(origin, "origin")
        destination = require_text(destination, "destination")
        depart_at = require_timestamp(depart_at, "depart_at")
        capacity = require_positive_int(capacity, "capacity")

        with atomic(self.db, "create_trip"):
            trip = self.trip_repository.create_trip(
                origin=origin,
                destination=destination,
                depart_at=depart_at,
                capacity=capacity,
            )
            self.db.flush()

        logger.info(
            "Created trip id=%s %s -> %s capacity=%s",
            trip.id,
            origin,
            destination,
            capacity,
        )
        return trip
