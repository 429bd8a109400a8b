# src/domain/state_machine.py

from enum import Enum
from typing import Dict, Set

from src.domain.exceptions import InvalidStateTransitionError


class TicketStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class TicketStateMachine:
    """
    Central lifecycle controller for ticket transitions.
    Defines the legal state transitions.
    """

    _ALLOWED_TRANSITIONS: Dict[TicketStatus, Set[TicketStatus]] = {
        TicketStatus.PENDING: {
            TicketStatus.PAID,
            TicketStatus.CANCELLED,
        },
        TicketStatus.PAID: {
            TicketStatus.CANCELLED,
        },
        TicketStatus.CANCELLED: set(),
    }

    @classmethod
    def can_transition(
        cls,
        from_status: TicketStatus,
        to_status: TicketStatus,
    ) -> bool:
        """
        Returns True if transition is allowed.
        """
        cls._ensure_valid_status(from_status)
        cls._ensure_valid_status(to_status)

        return to_status in cls._ALLOWED_TRANSITIONS.get(from_status, set())

    @classmethod
    def validate_transition(
        cls,
        from_status: TicketStatus,
        to_status: TicketStatus,
    ) -> None:
        """
        Raises InvalidStateTransitionError if transition is illegal.
        """
        if not cls.can_transition(from_status, to_status):
            raise InvalidStateTransitionError(
                from_state=from_status.value,
                to_state=to_status.value,
            )

    @classmethod
    def is_terminal(cls, status: TicketStatus) -> bool:
        cls._ensure_valid_status(status)
        return len(cls._ALLOWED_TRANSITIONS.get(status, set())) == 0

    @classmethod
    def sources_for(cls, to_status: TicketStatus) -> Set[TicketStatus]:
        """
        Returns every state from which `to_status` may be entered.
        Used as the guard of conditional status updates.
        """
        cls._ensure_valid_status(to_status)
        return {
            from_status
            for from_status, targets in cls._ALLOWED_TRANSITIONS.items()
            if to_status in targets
        }

    @staticmethod
    def _ensure_valid_status(status: TicketStatus) -> None:
        if not isinstance(status, TicketStatus):
            raise TypeError(
                f"Expected TicketStatus, got {type(status)}"
            )
