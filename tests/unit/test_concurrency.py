import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import func, select

from src.application.reservation_service import ReservationService
from src.domain.exceptions import InvalidStateTransitionError, NoCapacityError
from src.domain.state_machine import TicketStatus
from src.infrastructure.db.models import Ticket


def _run_concurrently(session_factory, workers, action):
    """Runs `action(service)` on `workers` threads released at the same moment."""
    barrier = threading.Barrier(workers)

    def worker():
        session = session_factory()
        try:
            barrier.wait()
            return action(ReservationService(session))
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(worker) for _ in range(workers)]
        return [future.result() for future in futures]


def test_concurrent_reservations_never_oversell(session_factory, make_trip, seats_available):
    capacity = 5
    attempts = 20
    trip_id = make_trip(capacity=capacity)

    def reserve(service):
        try:
            return service.create_ticket(trip_id).ref
        except NoCapacityError:
            return None

    results = _run_concurrently(session_factory, attempts, reserve)

    refs = [ref for ref in results if ref is not None]
    assert len(refs) == capacity
    assert len(set(refs)) == capacity
    assert results.count(None) == attempts - capacity
    assert seats_available(trip_id) == 0

    session = session_factory()
    try:
        ticket_count = session.execute(
            select(func.count(Ticket.id)).where(Ticket.trip_id == trip_id)
        ).scalar_one()
    finally:
        session.close()
    assert ticket_count == capacity


def test_concurrent_cancels_release_one_seat(session_factory, make_trip, seats_available):
    trip_id = make_trip(capacity=1)
    session = session_factory()
    try:
        ref = ReservationService(session).create_ticket(trip_id).ref
    finally:
        session.close()
    assert seats_available(trip_id) == 0

    statuses = _run_concurrently(
        session_factory,
        8,
        lambda service: service.cancel_ticket(ref).status,
    )

    assert statuses == [TicketStatus.CANCELLED] * 8
    assert seats_available(trip_id) == 1


def test_pay_loses_to_a_cancel_committed_after_its_read(session_factory, make_trip, seats_available):
    trip_id = make_trip(capacity=1)
    session = session_factory()
    try:
        ref = ReservationService(session).create_ticket(trip_id).ref
    finally:
        session.close()

    def cancel_in_other_session():
        other = session_factory()
        try:
            return ReservationService(other).cancel_ticket(ref).status
        finally:
            other.close()

    pay_session = session_factory()
    try:
        service = ReservationService(pay_session)
        read_ticket = service.ticket_repository.get_by_ref

        # Pay sees the ticket as pending; the cancel commits before pay writes.
        def read_then_cancel(ticket_ref):
            ticket = read_ticket(ticket_ref)
            with ThreadPoolExecutor(max_workers=1) as pool:
                assert pool.submit(cancel_in_other_session).result() == TicketStatus.CANCELLED
            return ticket

        service.ticket_repository.get_by_ref = read_then_cancel

        with pytest.raises(InvalidStateTransitionError):
            service.pay_ticket(ref)
    finally:
        pay_session.close()

    check = session_factory()
    try:
        ticket = ReservationService(check).get_ticket(ref)
        assert ticket.status == TicketStatus.CANCELLED
        assert ticket.paid_at is None
    finally:
        check.close()
    assert seats_available(trip_id) == 1
