import logging
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from sqlalchemy.orm import Session

from src.application.transaction import atomic
from src.domain.exceptions import (
    InvalidStateTransitionError,
    NoCapacityError,
    StorageFailureError,
    TicketNotFoundError,
    TripNotFoundError,
)
from src.domain.state_machine import TicketStateMachine, TicketStatus
from src.domain.validators import (
    optional_text,
    require_non_negative_int,
    require_positive_int,
)
from src.infrastructure.db.models import Ticket
from src.infrastructure.repositories.ticket_repository import TicketRepository
from src.infrastructure.repositories.trip_repository import TripRepository

logger = logging.getLogger(__name__)

DEFAULT_PRICE_CENTS = 10000
REF_LENGTH = 8
MAX_REF_ATTEMPTS = 5


def generate_ref() -> str:
    return str(uuid4())[:REF_LENGTH]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReservationService:
    """
    Seat reservation protocol.

    Every change to a trip's seats_available goes through here, and every
    multi-row change runs in a single transaction:
      - create_ticket: conditional decrement + ticket insert
      - cancel_ticket: conditional status change + seat increment
    Status changes are compare-and-set updates, so concurrent pay/cancel
    calls on the same ticket cannot both win.
    """

    def __init__(
        self,
        db: Session,
        ref_factory: Callable[[], str] = generate_ref,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.db = db
        self.trip_repository = TripRepository(db)
        self.ticket_repository = TicketRepository(db)
        self._ref_factory = ref_factory
        self._clock = clock

    def get_ticket(self, ref: str) -> Ticket:
        ticket = self.ticket_repository.get_by_ref(ref)

        if not ticket:
            raise TicketNotFoundError(ref)

        return ticket

    def create_ticket(
        self,
        trip_id,
        passenger_name=None,
        price_cents=DEFAULT_PRICE_CENTS,
    ) -> Ticket:
        trip_id = require_positive_int(trip_id, "trip_id")
        passenger_name = optional_text(passenger_name, "passenger_name")
        if price_cents is None:
            price_cents = DEFAULT_PRICE_CENTS
        price_cents = require_non_negative_int(price_cents, "price_cents")

        with atomic(self.db, "create_ticket"):
            if not self.trip_repository.reserve_seat(trip_id):
                logger.warning("No seats available for trip id=%s", trip_id)
                raise NoCapacityError(trip_id)

            ticket = self.ticket_repository.create_ticket(
                ref=self._new_ref(),
                trip_id=trip_id,
                passenger_name=passenger_name,
                price_cents=price_cents,
                created_at=self._clock(),
            )
            self.db.flush()

        logger.info("Reserved ticket ref=%s on trip id=%s", ticket.ref, trip_id)
        return ticket

    def pay_ticket(self, ref: str) -> Ticket:
        with atomic(self.db, "pay_ticket"):
            ticket = self.get_ticket(ref)

            if ticket.status == TicketStatus.PAID:
                logger.info("Ticket ref=%s already paid", ref)
                return ticket

            self._validate_transition(ticket, TicketStatus.PAID)

            changed = self.ticket_repository.update_status_if(
                ticket.id,
                allowed_from=TicketStateMachine.sources_for(TicketStatus.PAID),
                new_status=TicketStatus.PAID,
                paid_at=self._clock(),
            )
            self.db.refresh(ticket)

            # Lost a race: a concurrent pay is fine, a concurrent cancel is not.
            if not changed and ticket.status != TicketStatus.PAID:
                self._validate_transition(ticket, TicketStatus.PAID)

        logger.info("Ticket ref=%s paid", ref)
        return ticket

    def cancel_ticket(self, ref: str) -> Ticket:
        with atomic(self.db, "cancel_ticket"):
            ticket = self.get_ticket(ref)

            if ticket.status == TicketStatus.CANCELLED:
                logger.info("Ticket ref=%s already cancelled; no seat released", ref)
                return ticket

            self._validate_transition(ticket, TicketStatus.CANCELLED)

            changed = self.ticket_repository.update_status_if(
                ticket.id,
                allowed_from=TicketStateMachine.sources_for(TicketStatus.CANCELLED),
                new_status=TicketStatus.CANCELLED,
            )

            # The seat goes back only with the status change that won.
            if changed and not self.trip_repository.release_seat(ticket.trip_id):
                raise TripNotFoundError(ticket.trip_id)

            self.db.refresh(ticket)

        if changed:
            logger.info(
                "Ticket ref=%s cancelled; seat returned to trip id=%s",
                ref,
                ticket.trip_id,
            )
        return ticket

    def _new_ref(self) -> str:
        # The unique constraint on tickets.ref is the final guard.
        for _ in range(MAX_REF_ATTEMPTS):
            ref = self._ref_factory()
            if not self.ticket_repository.ref_exists(ref):
                return ref

        logger.error("Could not generate a unique ticket ref in %s attempts", MAX_REF_ATTEMPTS)
        raise StorageFailureError("create_ticket")

    def _validate_transition(self, ticket: Ticket, to_status: TicketStatus) -> None:
        try:
            TicketStateMachine.validate_transition(ticket.status, to_status)
        except InvalidStateTransitionError:
            logger.warning(
                "Rejected transition for ticket ref=%s: %s -> %s",
                ticket.ref,
                ticket.status.value,
                to_status.value,
            )
            raise
