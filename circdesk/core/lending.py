#!/usr/bin/env python

"""
    Lending coordinator for circdesk: borrow, return and renew.

    Each operation runs inside one Store transaction. Rejections raise
    a CircDeskError from inside the transaction, so nothing it wrote
    survives. Audit events are emitted after the commit.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from circdesk.core import audit
from circdesk.core.fines import compute_fine
from circdesk.core.inventory import InventoryStatusMachine, BookEvent
from circdesk.core.models import (
    Book,
    BookStatus,
    Reader,
    BorrowRecord,
    BorrowStatus,
    Reservation,
    ReservationStatus,
)
from circdesk.core.exceptions import (
    BookNotFoundError,
    BookDeletedError,
    BookUnavailableError,
    BookAlreadyOnLoanError,
    BookStatusConflictError,
    ReaderNotFoundError,
    ReaderInactiveError,
    BorrowRecordNotFoundError,
    AlreadyReturnedError,
    QuotaExceededError,
    RenewalNotPermittedError,
    RenewalLimitExceededError,
)

logger = logging.getLogger(__name__)


def lendable_book(session, book_id) -> Book:
    """Loads a book and rejects it if it has left circulation."""
    book = Book.get(session, book_id)
    if book is None:
        raise BookNotFoundError(f"Book {book_id} does not exist.")
    if book.is_deleted:
        raise BookDeletedError(f"Book {book_id} has been deleted.")
    if InventoryStatusMachine.is_absorbing(book.status):
        raise BookUnavailableError(
            f"Book {book_id} is {book.status.name.lower()} and cannot be lent."
        )
    return book


def transition_book(session, book, event) -> BookStatus:
    """
    Applies `event` to a book with a conditional UPDATE that only matches
    while the row still holds the status this transaction read. A
    concurrent writer that got there first leaves nothing to match and
    the caller gets BookStatusConflictError.
    """
    new_status = InventoryStatusMachine.apply(book.status, event)
    matched = session.query(Book).filter(
        Book.book_id == book.book_id,
        Book.status == book.status,
    ).update({Book.status: new_status}, synchronize_session="evaluate")
    if not matched:
        raise BookStatusConflictError(
            f"Book {book.book_id} changed status during {event.value}."
        )
    return new_status


def active_reader(session, reader_id) -> Reader:
    reader = Reader.get(session, reader_id)
    if reader is None:
        raise ReaderNotFoundError(f"Reader {reader_id} does not exist.")
    if not reader.is_active:
        raise ReaderInactiveError(
            f"Reader {reader_id} is {reader.status.name.lower()} and cannot borrow or reserve."
        )
    return reader


def open_loan_count(session, reader_id=None, book_id=None) -> int:
    q = session.query(BorrowRecord).filter(BorrowRecord.is_open)
    if reader_id is not None:
        q = q.filter(BorrowRecord.reader_id == reader_id)
    if book_id is not None:
        q = q.filter(BorrowRecord.book_id == book_id)
    return q.count()


class LendingCoordinator:

    def __init__(self, store, policy, audit_sink=None, clock=None):
        self.store = store
        self.policy = policy
        self.audit_sink = audit_sink
        self.clock = clock or datetime.datetime.now

    def today(self) -> datetime.date:
        return self.clock().date()

    def borrow(self, book_id: int, reader_id: int, operator_id: Optional[int] = None) -> BorrowRecord:
        """
        Lend a book to a reader.

        Returns:
            The new ACTIVE BorrowRecord.

        Raises:
            BookNotFoundError, BookDeletedError, BookUnavailableError,
            BookAlreadyOnLoanError, ReaderNotFoundError,
            ReaderInactiveError, QuotaExceededError
        """
        today = self.today()
        with self.store.transaction() as session:
            book = lendable_book(session, book_id)
            if not InventoryStatusMachine.can_transition(book.status, BookEvent.BORROW):
                raise BookUnavailableError(
                    f"Book {book_id} is {book.status.name.lower()} and cannot be borrowed."
                )
            if open_loan_count(session, book_id=book_id):
                raise BookAlreadyOnLoanError(f"Book {book_id} already has an open loan.")

            reader = active_reader(session, reader_id)
            reader_type = reader.reader_type
            if open_loan_count(session, reader_id=reader_id) >= reader_type.max_borrow_count:
                raise QuotaExceededError(
                    f"Reader {reader_id} has reached the limit of "
                    f"{reader_type.max_borrow_count} borrowed books."
                )

            record = BorrowRecord(
                book_id=book_id,
                reader_id=reader_id,
                borrow_date=today,
                due_date=today + datetime.timedelta(days=reader_type.max_loan_days),
                renew_count=0,
                fine_amount=0.0,
                status=BorrowStatus.ACTIVE,
                operator_id=operator_id,
            )
            transition_book(session, book, BookEvent.BORROW)
            session.add(record)
            try:
                session.flush()
            except IntegrityError:
                raise BookAlreadyOnLoanError(f"Book {book_id} already has an open loan.") from None

            # The borrower's own pending reservation is consumed
            fulfilled = session.query(Reservation).filter(
                Reservation.book_id == book_id,
                Reservation.reader_id == reader_id,
                Reservation.status == ReservationStatus.PENDING,
            ).update({Reservation.status: ReservationStatus.FULFILLED}, synchronize_session=False)

            session.flush()
            session.expunge(record)

        logger.info(f"Book {book_id} lent to reader {reader_id} as borrow {record.borrow_id}"
                    + (f", fulfilling {fulfilled} reservation(s)" if fulfilled else ""))
        audit.emit(self.audit_sink, operator_id, "borrow",
                   f"borrow_id={record.borrow_id} book_id={book_id} reader_id={reader_id}")
        return record

    def return_book(self, borrow_id: int, operator_id: Optional[int] = None) -> float:
        """Close a loan, charge any overdue fine and put the book back.

        Returns the fine amount.
        """
        now = self.clock()
        with self.store.transaction() as session:
            record = BorrowRecord.get(session, borrow_id)
            if record is None:
                raise BorrowRecordNotFoundError(f"Borrow record {borrow_id} does not exist.")
            if record.status == BorrowStatus.RETURNED:
                raise AlreadyReturnedError(f"Borrow record {borrow_id} has already been returned.")

            fine = compute_fine(record.due_date, now, self.policy.fine_rate(session=session))
            record.status = BorrowStatus.RETURNED
            record.return_date = now
            record.fine_amount = fine

            book = Book.get(session, record.book_id)
            if book is not None and InventoryStatusMachine.can_transition(book.status, BookEvent.RETURN):
                book.status = InventoryStatusMachine.apply(book.status, BookEvent.RETURN)
            elif book is not None:
                # deleted, lost and damaged books stay where administration put them
                logger.info(f"Book {book.book_id} left {book.status.name} on return of {borrow_id}")

        logger.info(f"Borrow {borrow_id} returned with fine {fine:.2f}")
        audit.emit(self.audit_sink, operator_id, "return",
                   f"borrow_id={borrow_id} fine_amount={fine:.2f}")
        return fine

    def renew(self, borrow_id: int, operator_id: Optional[int] = None) -> datetime.date:
        """Extend a loan by the reader type's loan period, counted from
        the current due date. Returns the new due date.
        """
        today = self.today()
        with self.store.transaction() as session:
            record = BorrowRecord.get(session, borrow_id)
            if record is None:
                raise BorrowRecordNotFoundError(f"Borrow record {borrow_id} does not exist.")
            if record.status == BorrowStatus.RETURNED:
                raise AlreadyReturnedError(
                    f"Borrow record {borrow_id} has already been returned and cannot be renewed."
                )

            lendable_book(session, record.book_id)
            reader = active_reader(session, record.reader_id)
            reader_type = reader.reader_type
            if not reader_type.renewable:
                raise RenewalNotPermittedError(
                    f"Reader type '{reader_type.type_name}' does not allow renewals."
                )
            if record.renew_count >= reader_type.max_renew_count:
                raise RenewalLimitExceededError(
                    f"Borrow record {borrow_id} has reached the limit of "
                    f"{reader_type.max_renew_count} renewal(s)."
                )

            new_due_date = record.due_date + datetime.timedelta(days=reader_type.max_loan_days)
            record.due_date = new_due_date
            record.renew_count += 1
            if record.status == BorrowStatus.OVERDUE and new_due_date > today:
                record.status = BorrowStatus.ACTIVE

        logger.info(f"Borrow {borrow_id} renewed until {new_due_date.isoformat()}")
        audit.emit(self.audit_sink, operator_id, "renew",
                   f"borrow_id={borrow_id} due_date={new_due_date.isoformat()}")
        return new_due_date
