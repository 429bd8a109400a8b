# src/infrastructure/repositories/ticket_repository.py

from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session
from sqlalchemy import select, update

from src.infrastructure.db.models import Ticket
from src.domain.state_machine import TicketStatus


class TicketRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_ref(
        self,
        ref: str,
    ) -> Ticket | None:

        stmt = (
            select(Ticket)
            .where(Ticket.ref == ref)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def ref_exists(self, ref: str) -> bool:
        stmt = select(Ticket.id).where(Ticket.ref == ref)
        return self.db.execute(stmt).first() is not None

    def create_ticket(
        self,
        ref: str,
        trip_id: int,
        passenger_name: str | None,
        price_cents: int,
        created_at: datetime,
    ) -> Ticket:

        ticket = Ticket(
            ref=ref,
            trip_id=trip_id,
            passenger_name=passenger_name,
            status=TicketStatus.PENDING,
            price_cents=price_cents,
            created_at=created_at,
        )

        self.db.add(ticket)
        return ticket

    def update_status_if(
        self,
        ticket_id: int,
        allowed_from: Iterable[TicketStatus],
        new_status: TicketStatus,
        **values,
    ) -> bool:
        """
        Compare-and-set on the ticket status.
        Only applies when the current status is one of `allowed_from`;
        returns whether the row changed.
        """

        stmt = (
            update(Ticket)
            .where(Ticket.id == ticket_id)
            .where(Ticket.status.in_(list(allowed_from)))
            .values(status=new_status, **values)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1
