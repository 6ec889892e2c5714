"""
Booking status state machine.

    Pending  -> Approved | Rejected | Cancelled
    Approved -> Completed | Cancelled

Rejected, Completed and Cancelled are terminal.
"""

from enum import Enum
from typing import Dict, FrozenSet

from unispace.errors import BadRequestError
from unispace.models.enums import BookingStatus

TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED}
    ),
    BookingStatus.APPROVED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_transition(current: BookingStatus, target: BookingStatus) -> None:
    if not can_transition(current, target):
        raise BadRequestError(
            f"Cannot move booking from {current.value} to {target.value}"
        )


class BookingDecision(str, Enum):
    APPROVE = "Approve"
    REJECT = "Reject"

    @property
    def target_status(self) -> BookingStatus:
        if self is BookingDecision.APPROVE:
            return BookingStatus.APPROVED
        return BookingStatus.REJECTED
