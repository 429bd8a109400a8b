

class TripReservationError(Exception):
    """
    Base exception for all domain-level errors
    inside the Trip Reservation Engine.
    """


class InvalidInputError(TripReservationError):
    """Raised when a request is missing a field or carries a malformed one."""


class NotFoundError(TripReservationError):
    """Raised when a referenced trip or ticket does not exist."""


class TripNotFoundError(NotFoundError):

    def __init__(self, trip_id: int):
        self.trip_id = trip_id
        super().__init__("Trip not found")


class TicketNotFoundError(NotFoundError):

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__("Ticket not found")


class NoCapacityError(TripReservationError):
    """
    Raised when a seat could not be reserved, either because the trip
    is sold out or because it does not exist.
    """

    def __init__(self, trip_id: int):
        self.trip_id = trip_id
        super().__init__("No seats available")


class InvalidStateTransitionError(TripReservationError):
    """
    Raised when an illegal ticket state transition is attempted.
    """

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state

        message = (
            f"Illegal state transition attempted: "
            f"{from_state} -> {to_state}"
        )
        super().__init__(message)


class StorageFailureError(TripReservationError):
    """
    Raised when a transaction could not be committed.
    Nothing from the failed operation was persisted; the caller may retry.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Storage failure during {operation}")
