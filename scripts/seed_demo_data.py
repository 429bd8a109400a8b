from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from src.infrastructure.db.models import Base, Trip
from src.infrastructure.db.session import engine, get_db_session


def _dt(days_from_now: int, hour: int, minute: int) -> datetime:
    now_utc = datetime.now(timezone.utc)
    target = now_utc + timedelta(days=days_from_now)
    return target.replace(hour=hour, minute=minute, second=0, microsecond=0)


def seed_trips(db) -> int:
    trip_defs = [
        {
            "origin": "Paris",
            "destination": "Lyon",
            "depart_at": _dt(days_from_now=1, hour=8, minute=15),
            "capacity": 50,
        },
        {
            "origin": "Lyon",
            "destination": "Marseille",
            "depart_at": _dt(days_from_now=1, hour=14, minute=40),
            "capacity": 40,
        },
        {
            "origin": "Marseille",
            "destination": "Nice",
            "depart_at": _dt(days_from_now=2, hour=9, minute=0),
            "capacity": 2,
        },
    ]

    created = 0
    for item in trip_defs:
        # Trips already seeded keep their seat counts; tickets may reference them.
        existing = db.execute(
            select(Trip)
            .where(Trip.origin == item["origin"])
            .where(Trip.destination == item["destination"])
        ).scalars().first()
        if existing:
            continue

        db.add(
            Trip(
                origin=item["origin"],
                destination=item["destination"],
                depart_at=item["depart_at"],
                capacity=item["capacity"],
                seats_available=item["capacity"],
            )
        )
        created += 1
    return created


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with get_db_session() as db:
        created = seed_trips(db)
    print(f"Seed complete: {created} trip(s) added.")


if __name__ == "__main__":
    main()
