#!/usr/bin/env python

"""
    CirculationAPI: the entry point callers (HTTP routes, the sweep CLI,
    embedding applications) use to drive the lending engine.

    Expected rejections come back as OperationResult objects with
    success=False and a specific reason. PersistenceFailure is raised.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from functools import wraps
from typing import List, Optional
from sqlalchemy.orm import joinedload
from circdesk.core.audit import AuditSink
from circdesk.core.exceptions import EXPECTED_ERRORS
from circdesk.core.lending import LendingCoordinator
from circdesk.core.models import (
    BorrowRecord,
    BorrowStatus,
    Reservation,
    OPEN_BORROW_STATUSES,
)
from circdesk.core.policy import PolicyConfig
from circdesk.core.reservations import ReservationQueue
from circdesk.core.sweeps import OverdueSweeper, ExpiryScanner
from circdesk.schemas.borrow_record import BorrowRecordView
from circdesk.schemas.reservation import ReservationView
from circdesk.schemas.results import (
    BorrowResult,
    ReturnResult,
    RenewResult,
    ReserveResult,
    CancelResult,
    SweepResult,
)

logger = logging.getLogger(__name__)


def structured(result_cls):
    """Turns expected CircDeskErrors raised by the wrapped operation into
    a failed `result_cls`."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except EXPECTED_ERRORS as e:
                logger.info(f"{func.__name__} rejected ({e.code}): {e.message}")
                return result_cls(success=False, message=e.message, code=e.code, category=e.category)
        return wrapper
    return decorator


class CirculationAPI:

    def __init__(self, store, policy=None, audit_sink=None, clock=None):
        self.store = store
        self.policy = policy or PolicyConfig(store)
        self.audit_sink = audit_sink if audit_sink is not None else AuditSink(store)
        self.lending = LendingCoordinator(store, self.policy, self.audit_sink, clock=clock)
        self.reservations = ReservationQueue(store, self.audit_sink, clock=clock)
        self.overdue_sweeper = OverdueSweeper(store, clock=clock)
        self.expiry_scanner = ExpiryScanner(store, clock=clock)

    # Lending

    @structured(BorrowResult)
    def borrow(self, book_id: int, reader_id: int, operator_id: Optional[int] = None) -> BorrowResult:
        record = self.lending.borrow(book_id, reader_id, operator_id)
        return BorrowResult(success=True, message="Book borrowed.", borrow_id=record.borrow_id)

    @structured(ReturnResult)
    def return_book(self, borrow_id: int, operator_id: Optional[int] = None) -> ReturnResult:
        fine = self.lending.return_book(borrow_id, operator_id)
        return ReturnResult(success=True, message="Book returned.", fine_amount=fine)

    @structured(RenewResult)
    def renew(self, borrow_id: int, operator_id: Optional[int] = None) -> RenewResult:
        due = self.lending.renew(borrow_id, operator_id)
        return RenewResult(success=True, message="Loan renewed.", new_due_date=due)

    # Reservations

    @structured(ReserveResult)
    def reserve(self, book_id: int, reader_id: int) -> ReserveResult:
        reservation = self.reservations.reserve(book_id, reader_id)
        return ReserveResult(success=True, message="Book reserved.",
                             reservation_id=reservation.reservation_id)

    @structured(CancelResult)
    def cancel_reservation(self, reservation_id: int) -> CancelResult:
        successor = self.reservations.cancel(reservation_id)
        return CancelResult(
            success=True, message="Reservation cancelled.",
            next_reservation_id=successor.reservation_id if successor else None,
        )

    # Sweeps

    @structured(SweepResult)
    def sweep_overdue(self) -> SweepResult:
        updated = self.overdue_sweeper.sweep_overdue()
        return SweepResult(success=True, message=f"{updated} loan(s) marked overdue.", updated=updated)

    @structured(SweepResult)
    def sweep_expired_reservations(self) -> SweepResult:
        updated = self.expiry_scanner.sweep_expired_reservations()
        return SweepResult(success=True, message=f"{updated} reservation(s) expired.", updated=updated)

    # Read queries

    def _borrow_views(self, *criteria, order_by=None) -> List[BorrowRecordView]:
        with self.store.transaction() as session:
            q = session.query(BorrowRecord).options(
                joinedload(BorrowRecord.book), joinedload(BorrowRecord.reader)
            )
            if criteria:
                q = q.filter(*criteria)
            if order_by is None:
                order_by = (BorrowRecord.borrow_date.desc(), BorrowRecord.borrow_id.desc())
            return [BorrowRecordView.from_record(r) for r in q.order_by(*order_by).all()]

    def _reservation_views(self, *criteria, oldest_first=False) -> List[ReservationView]:
        if oldest_first:
            order_by = (Reservation.reserve_date.asc(), Reservation.reservation_id.asc())
        else:
            order_by = (Reservation.reserve_date.desc(), Reservation.reservation_id.desc())
        with self.store.transaction() as session:
            q = session.query(Reservation).options(
                joinedload(Reservation.book), joinedload(Reservation.reader)
            )
            if criteria:
                q = q.filter(*criteria)
            return [ReservationView.from_reservation(r) for r in q.order_by(*order_by).all()]

    def get_borrow_record(self, borrow_id: int) -> Optional[BorrowRecordView]:
        views = self._borrow_views(BorrowRecord.borrow_id == borrow_id)
        return views[0] if views else None

    def get_all_borrow_records(self) -> List[BorrowRecordView]:
        return self._borrow_views()

    def get_current_borrows(self) -> List[BorrowRecordView]:
        return self._borrow_views(BorrowRecord.status.in_(OPEN_BORROW_STATUSES))

    def get_overdue_borrows(self) -> List[BorrowRecordView]:
        return self._borrow_views(
            BorrowRecord.status == BorrowStatus.OVERDUE,
            order_by=(BorrowRecord.due_date.asc(), BorrowRecord.borrow_id.asc()),
        )

    def get_book_borrow_history(self, book_id: int) -> List[BorrowRecordView]:
        return self._borrow_views(BorrowRecord.book_id == book_id)

    def get_reader_borrow_history(self, reader_id: int) -> List[BorrowRecordView]:
        return self._borrow_views(BorrowRecord.reader_id == reader_id)

    def get_all_reservations(self) -> List[ReservationView]:
        return self._reservation_views()

    def get_book_reservations(self, book_id: int) -> List[ReservationView]:
        return self._reservation_views(Reservation.book_id == book_id, oldest_first=True)

    def get_reader_reservations(self, reader_id: int) -> List[ReservationView]:
        return self._reservation_views(Reservation.reader_id == reader_id)
