#!/usr/bin/env python

"""
    Sweep jobs for circdesk: age loans into OVERDUE and lapse pending
    reservations past their expiry date.

    Both are idempotent and meant to be triggered externally (app
    startup, cron via `circdesk-sweep`). Each sweeper holds a non-blocking
    lock, so overlapping calls on the same instance are rejected. The lock
    is per process: the app and a cron-run `circdesk-sweep` can still
    overlap, which is harmless since both sweeps are idempotent UPDATEs.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
import logging
import threading
from contextlib import contextmanager
from circdesk.core.exceptions import SweepInProgressError
from circdesk.core.models import BorrowRecord, BorrowStatus, Reservation, ReservationStatus
from circdesk.core.reservations import release_if_unclaimed

logger = logging.getLogger(__name__)


@contextmanager
def single_flight(lock, name):
    if not lock.acquire(blocking=False):
        raise SweepInProgressError(f"{name} is already running.")
    try:
        yield
    finally:
        lock.release()


class OverdueSweeper:

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or datetime.datetime.now
        self._lock = threading.Lock()

    def sweep_overdue(self) -> int:
        """Flags every open loan past its due date as OVERDUE."""
        today = self.clock().date()
        with single_flight(self._lock, "Overdue sweep"):
            with self.store.transaction() as session:
                updated = session.query(BorrowRecord).filter(
                    BorrowRecord.due_date < today,
                    BorrowRecord.status.notin_([BorrowStatus.RETURNED, BorrowStatus.OVERDUE]),
                ).update({BorrowRecord.status: BorrowStatus.OVERDUE}, synchronize_session=False)
        logger.info(f"Overdue sweep flagged {updated} loan(s)")
        return updated


class ExpiryScanner:

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or datetime.datetime.now
        self._lock = threading.Lock()

    def sweep_expired_reservations(self) -> int:
        """Expires lapsed PENDING reservations, then runs the same
        promotion check as a cancellation for each affected book."""
        today = self.clock().date()
        with single_flight(self._lock, "Reservation expiry sweep"):
            with self.store.transaction() as session:
                lapsed = session.query(Reservation).filter(
                    Reservation.expiry_date < today,
                    Reservation.status == ReservationStatus.PENDING,
                ).order_by(Reservation.reserve_date.asc()).all()
                for reservation in lapsed:
                    reservation.status = ReservationStatus.EXPIRED
                session.flush()
                for book_id in sorted({r.book_id for r in lapsed}):
                    release_if_unclaimed(session, book_id)
                updated = len(lapsed)
        logger.info(f"Reservation expiry sweep expired {updated} reservation(s)")
        return updated
