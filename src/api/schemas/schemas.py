from pydantic import BaseModel


# Fields are optional at the schema level; the services report missing
# ones as InvalidInputError.
class TripCreate(BaseModel):
    origin: str | None = None
    destination: str | None = None
    depart_at: str | None = None
    capacity: int | None = None


class TripResponse(BaseModel):
    id: int
    origin: str
    destination: str
    depart_at: str
    capacity: int
    seats_available: int
    booked_seats: int


class TicketCreate(BaseModel):
    trip_id: int | None = None
    passenger_name: str | None = None
    price_cents: int | None = None


class TicketResponse(BaseModel):
    id: int
    ref: str
    trip_id: int
    passenger_name: str | None = None
    status: str
    price_cents: int
    created_at: str
    paid_at: str | None = None
