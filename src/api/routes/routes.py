import logging

from fastapi import APIRouter, Depends, HTTPException, status

from sqlalchemy.orm import Session

from src.infrastructure.db.session import SessionLocal
from src.infrastructure.db.models import Ticket, Trip
from src.application.reservation_service import ReservationService
from src.application.trip_service import TripService
from src.api.schemas.schemas import (
    TicketCreate,
    TicketResponse,
    TripCreate,
    TripResponse,
)
from src.domain.exceptions import (
    InvalidInputError,
    InvalidStateTransitionError,
    NoCapacityError,
    NotFoundError,
    StorageFailureError,
)


router = APIRouter()
logger = logging.getLogger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def _trip_response(trip: Trip) -> TripResponse:
    return TripResponse(
        id=trip.id,
        origin=trip.origin,
        destination=trip.destination,
        depart_at=trip.depart_at.isoformat(),
        capacity=trip.capacity,
        seats_available=trip.seats_available,
        booked_seats=trip.capacity - trip.seats_available,
    )


def _ticket_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse(
        id=ticket.id,
        ref=ticket.ref,
        trip_id=ticket.trip_id,
        passenger_name=ticket.passenger_name,
        status=ticket.status.value,
        price_cents=ticket.price_cents,
        created_at=ticket.created_at.isoformat(),
        paid_at=ticket.paid_at.isoformat() if ticket.paid_at else None,
    )


def _storage_unavailable(exc: StorageFailureError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"{exc}. Please retry.",
    )


@router.get("/health")
def health():
    return {"message": "Trip Reservation Engine is running"}


@router.get("/trips", response_model=list[TripResponse])
def list_trips(db: Session = Depends(get_db)):
    trips = TripService(db).list_trips()
    return [_trip_response(trip) for trip in trips]


@router.get("/trips/{trip_id}", response_model=TripResponse)
def get_trip(trip_id: int, db: Session = Depends(get_db)):
    try:
        trip = TripService(db).get_trip(trip_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    return _trip_response(trip)


@router.post(
    "/trips/create",
    response_model=TripResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_trip(request: TripCreate, db: Session = Depends(get_db)):
    try:
        trip = TripService(db).create_trip(
            origin=request.origin,
            destination=request.destination,
            depart_at=request.depart_at,
            capacity=request.capacity,
        )
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StorageFailureError as exc:
        raise _storage_unavailable(exc) from exc

    return _trip_response(trip)


@router.post(
    "/tickets",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_ticket(request: TicketCreate, db: Session = Depends(get_db)):
    service = ReservationService(db)

    try:
        ticket = service.create_ticket(
            trip_id=request.trip_id,
            passenger_name=request.passenger_name,
            price_cents=request.price_cents,
        )
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except NoCapacityError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except StorageFailureError as exc:
        raise _storage_unavailable(exc) from exc

    return _ticket_response(ticket)


@router.get("/tickets/{ref}", response_model=TicketResponse)
def get_ticket(ref: str, db: Session = Depends(get_db)):
    try:
        ticket = ReservationService(db).get_ticket(ref)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    return _ticket_response(ticket)


@router.post("/tickets/{ref}/pay", response_model=TicketResponse)
def pay_ticket(ref: str, db: Session = Depends(get_db)):
    service = ReservationService(db)

    try:
        ticket = service.pay_ticket(ref)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except InvalidStateTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except StorageFailureError as exc:
        raise _storage_unavailable(exc) from exc

    return _ticket_response(ticket)


@router.post("/tickets/{ref}/cancel", response_model=TicketResponse)
def cancel_ticket(ref: str, db: Session = Depends(get_db)):
    service = ReservationService(db)

    try:
        ticket = service.cancel_ticket(ref)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except InvalidStateTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except StorageFailureError as exc:
        raise _storage_unavailable(exc) from exc

    return _ticket_response(ticket)
