import datetime
import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from circdesk.configs import RESERVATION_DAYS
from circdesk.core import audit
from circdesk.core.inventory import InventoryStatusMachine, BookEvent
from circdesk.core.lending import lendable_book, active_reader, transition_book
from circdesk.core.models import (
    Book,
    BookStatus,
    Reservation,
    ReservationStatus,
    HELD_RESERVATION_STATUSES,
)
from circdesk.core.exceptions import (
    ReservationNotFoundError,
    AlreadyProcessedError,
    DuplicateReservationError,
)

logger = logging.getLogger(__name__)


def next_in_queue(session, book_id) -> Optional[Reservation]:
    """Oldest PENDING reservation on a book (FIFO by reserve date)."""
    return session.query(Reservation).filter(
        Reservation.book_id == book_id,
        Reservation.status == ReservationStatus.PENDING,
    ).order_by(Reservation.reserve_date.asc(), Reservation.reservation_id.asc()).first()


def release_if_unclaimed(session, book_id) -> Optional[Reservation]:
    """
    Promotion check run after a reservation leaves the queue.

    Returns the reservation now at the head of the queue, if any. When
    the queue is empty a RESERVED book goes back to AVAILABLE. Deleted
    books are never touched.
    """
    book = Book.get(session, book_id)
    if book is None or book.is_deleted:
        return None
    successor = next_in_queue(session, book_id)
    if successor is None and book.status == BookStatus.RESERVED:
        book.status = InventoryStatusMachine.apply(book.status, BookEvent.RELEASE)
        logger.info(f"Book {book_id} released: no pending reservations remain")
    return successor


class ReservationQueue:

    def __init__(self, store, audit_sink=None, clock=None, hold_days=RESERVATION_DAYS):
        self.store = store
        self.audit_sink = audit_sink
        self.clock = clock or datetime.datetime.now
        self.hold_days = hold_days

    def reserve(self, book_id: int, reader_id: int) -> Reservation:
        now = self.clock()
        with self.store.transaction() as session:
            book = lendable_book(session, book_id)
            active_reader(session, reader_id)

            held = session.query(Reservation).filter(
                Reservation.book_id == book_id,
                Reservation.reader_id == reader_id,
                Reservation.status.in_(HELD_RESERVATION_STATUSES),
            ).first()
            if held is not None:
                raise DuplicateReservationError(
                    f"Reader {reader_id} already holds reservation "
                    f"{held.reservation_id} for book {book_id}."
                )

            reservation = Reservation(
                book_id=book_id,
                reader_id=reader_id,
                reserve_date=now,
                expiry_date=now.date() + datetime.timedelta(days=self.hold_days),
                status=ReservationStatus.PENDING,
            )
            transition_book(session, book, BookEvent.RESERVE)
            session.add(reservation)
            try:
                session.flush()
            except IntegrityError:
                raise DuplicateReservationError(
                    f"Reader {reader_id} already holds a reservation for book {book_id}."
                ) from None
            session.expunge(reservation)

        logger.info(f"Reader {reader_id} reserved book {book_id} as reservation {reservation.reservation_id}")
        audit.emit(self.audit_sink, None, "reserve",
                   f"reservation_id={reservation.reservation_id} book_id={book_id} reader_id={reader_id}")
        return reservation

    def cancel(self, reservation_id: int) -> Optional[Reservation]:
        """Cancel a pending reservation and release the book if nobody
        else is waiting. Returns the reservation now heading the queue."""
        with self.store.transaction() as session:
            reservation = Reservation.get(session, reservation_id)
            if reservation is None:
                raise ReservationNotFoundError(f"Reservation {reservation_id} does not exist.")
            if reservation.status != ReservationStatus.PENDING:
                raise AlreadyProcessedError(
                    f"Reservation {reservation_id} is {reservation.status.name.lower()} "
                    "and cannot be cancelled."
                )
            reservation.status = ReservationStatus.CANCELLED
            session.flush()
            successor = release_if_unclaimed(session, reservation.book_id)
            if successor is not None:
                session.expunge(successor)

        logger.info(f"Reservation {reservation_id} cancelled")
        audit.emit(self.audit_sink, None, "cancel_reservation", f"reservation_id={reservation_id}")
        return successor
