"""
    Legal Book status transitions.

    Only the lending coordinator and the reservation queue move a book
    between AVAILABLE, BORROWED and RESERVED. DAMAGED, LOST and DELETED
    are absorbing: administrative events can enter them, nothing leaves.
"""

import enum
from circdesk.core.exceptions import InvalidTransition
from circdesk.core.models import BookStatus


class BookEvent(enum.Enum):
    BORROW = "borrow"
    RETURN = "return"
    RESERVE = "reserve"
    RELEASE = "release"
    MARK_DAMAGED = "mark_damaged"
    MARK_LOST = "mark_lost"
    DELETE = "delete"


ABSORBING = frozenset({BookStatus.DAMAGED, BookStatus.LOST, BookStatus.DELETED})
_IN_CIRCULATION = (BookStatus.AVAILABLE, BookStatus.BORROWED, BookStatus.RESERVED)

TRANSITIONS = {
    (BookStatus.AVAILABLE, BookEvent.BORROW): BookStatus.BORROWED,
    (BookStatus.RESERVED, BookEvent.BORROW): BookStatus.BORROWED,
    (BookStatus.BORROWED, BookEvent.RETURN): BookStatus.AVAILABLE,
    (BookStatus.AVAILABLE, BookEvent.RESERVE): BookStatus.RESERVED,
    # further reservations queue without touching the book
    (BookStatus.RESERVED, BookEvent.RESERVE): BookStatus.RESERVED,
    (BookStatus.BORROWED, BookEvent.RESERVE): BookStatus.BORROWED,
    (BookStatus.RESERVED, BookEvent.RELEASE): BookStatus.AVAILABLE,
}
for _status in _IN_CIRCULATION:
    TRANSITIONS[(_status, BookEvent.MARK_DAMAGED)] = BookStatus.DAMAGED
    TRANSITIONS[(_status, BookEvent.MARK_LOST)] = BookStatus.LOST
    TRANSITIONS[(_status, BookEvent.DELETE)] = BookStatus.DELETED


class InventoryStatusMachine:

    transitions = TRANSITIONS

    @classmethod
    def can_transition(cls, current: BookStatus, event: BookEvent) -> bool:
        return (current, event) in cls.transitions

    @classmethod
    def apply(cls, current: BookStatus, event: BookEvent) -> BookStatus:
        try:
            return cls.transitions[(current, event)]
        except KeyError:
            raise InvalidTransition(
                f"Cannot {event.value} a book in status {current.name}."
            ) from None

    @classmethod
    def is_absorbing(cls, status: BookStatus) -> bool:
        return status in ABSORBING
