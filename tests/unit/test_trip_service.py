from datetime import datetime, timezone

import pytest

from src.application.trip_service import TripService
from src.domain.exceptions import InvalidInputError, TripNotFoundError


def test_create_trip_starts_with_full_capacity(db):
    trip = TripService(db).create_trip(
        origin="A",
        destination="B",
        depart_at="2030-01-01T08:00:00",
        capacity=2,
    )

    assert trip.id is not None
    assert trip.capacity == 2
    assert trip.seats_available == 2
    assert trip.depart_at == datetime(2030, 1, 1, 8, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "overrides",
    [
        {"origin": None},
        {"origin": "   "},
        {"destination": ""},
        {"depart_at": None},
        {"depart_at": "next tuesday"},
        {"capacity": None},
        {"capacity": 0},
        {"capacity": -3},
        {"capacity": True},
    ],
)
def test_create_trip_rejects_missing_or_invalid_fields(db, overrides):
    fields = {
        "origin": "A",
        "destination": "B",
        "depart_at": "2030-01-01T08:00:00",
        "capacity": 2,
    }
    fields.update(overrides)

    with pytest.raises(InvalidInputError):
        TripService(db).create_trip(**fields)

    assert TripService(db).list_trips() == []


def test_list_trips_orders_by_departure(db, make_trip):
    late = make_trip(depart_at="2030-03-01T10:00:00", origin="Late")
    early = make_trip(depart_at="2030-01-01T10:00:00", origin="Early")
    middle = make_trip(depart_at="2030-02-01T10:00:00", origin="Middle")

    trips = TripService(db).list_trips()

    assert [trip.id for trip in trips] == [early, middle, late]


def test_get_trip_not_found(db):
    with pytest.raises(TripNotFoundError):
        TripService(db).get_trip(999)


def test_list_trips_orders_by_instant_across_offsets(db, make_trip):
    # 10:00+05:00 is 05:00Z, an hour before 06:00Z
    first = make_trip(depart_at="2030-01-01T10:00:00+05:00")
    second = make_trip(depart_at="2030-01-01T06:00:00+00:00")

    trips = TripService(db).list_trips()

    assert [trip.id for trip in trips] == [first, second]
    assert trips[0].depart_at == datetime(2030, 1, 1, 5, 0, tzinfo=timezone.utc)
    assert trips[1].depart_at == datetime(2030, 1, 1, 6, 0, tzinfo=timezone.utc)
