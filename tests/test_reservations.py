#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_reservations
    ~~~~~~~~~~~~~~~~~~~~~~~

    Reservation queueing, cancellation and book release.

    :copyright: (c) 2025 by Authors.
    :license: see LICENSE for more details.
"""

import datetime
import pytest
from unittest.mock import patch
from circdesk.core import reservations
from circdesk.core.models import (
    Book,
    BookStatus,
    ReaderStatus,
    Reservation,
    ReservationStatus,
)


def test_reserve_available_book_puts_it_on_hold(circulation, clock, make_book, make_reader, fetch, book_status):
    book = make_book()
    result = circulation.reserve(book, make_reader())
    assert result.success
    reservation = fetch(Reservation, result.reservation_id)
    assert reservation.status == ReservationStatus.PENDING
    assert reservation.reserve_date == clock.now
    assert reservation.expiry_date == clock.today() + datetime.timedelta(days=30)
    assert book_status(book) == BookStatus.RESERVED

def test_reserving_a_borrowed_book_queues_without_status_change(circulation, make_book, make_reader, book_status):
    book = make_book()
    circulation.borrow(book, make_reader("Borrower"))
    assert circulation.reserve(book, make_reader("Waiter")).success
    assert book_status(book) == BookStatus.BORROWED

def test_fifo_release(circulation, clock, make_book, make_reader, book_status):
    book = make_book()
    first = circulation.reserve(book, make_reader("R1"))
    clock.advance(hours=1)
    second = circulation.reserve(book, make_reader("R2"))
    assert book_status(book) == BookStatus.RESERVED

    cancelled = circulation.cancel_reservation(first.reservation_id)
    assert cancelled.success
    assert cancelled.next_reservation_id == second.reservation_id
    assert book_status(book) == BookStatus.RESERVED

    cancelled = circulation.cancel_reservation(second.reservation_id)
    assert cancelled.success
    assert cancelled.next_reservation_id is None
    assert book_status(book) == BookStatus.AVAILABLE

def test_cancel_never_promotes_successor_to_fulfilled(circulation, clock, make_book, make_reader, fetch):
    book = make_book()
    first = circulation.reserve(book, make_reader("R1"))
    clock.advance(hours=1)
    second = circulation.reserve(book, make_reader("R2"))
    circulation.cancel_reservation(first.reservation_id)
    assert fetch(Reservation, second.reservation_id).status == ReservationStatus.PENDING

def test_duplicate_reservation_rejected(circulation, make_book, make_reader):
    book, reader = make_book(), make_reader()
    assert circulation.reserve(book, reader).success
    result = circulation.reserve(book, reader)
    assert (result.success, result.code, result.category) == (False, "duplicate_reservation", "policy_violation")

def test_fulfilled_reservation_also_blocks_a_new_one(circulation, make_book, make_reader):
    book, reader = make_book(), make_reader()
    circulation.reserve(book, reader)
    circulation.borrow(book, reader)
    assert circulation.reserve(book, reader).code == "duplicate_reservation"

def test_reader_may_reserve_again_after_cancelling(circulation, make_book, make_reader):
    book, reader = make_book(), make_reader()
    first = circulation.reserve(book, reader)
    circulation.cancel_reservation(first.reservation_id)
    assert circulation.reserve(book, reader).success

@pytest.mark.parametrize("status,code", [
    (BookStatus.DELETED, "book_deleted"),
    (BookStatus.LOST, "book_unavailable"),
])
def test_reserve_rejects_retired_books(circulation, make_book, make_reader, status, code):
    assert circulation.reserve(make_book(status=status), make_reader()).code == code

def test_reserve_requires_active_reader(circulation, make_book, make_reader, book_status):
    book = make_book()
    result = circulation.reserve(book, make_reader(status=ReaderStatus.DEREGISTERED))
    assert result.code == "reader_inactive"
    assert book_status(book) == BookStatus.AVAILABLE

def test_reserve_unknown_book(circulation, make_reader):
    assert circulation.reserve(404, make_reader()).code == "book_not_found"

def test_cancel_unknown_reservation(circulation):
    result = circulation.cancel_reservation(77)
    assert (result.success, result.code, result.category) == (False, "reservation_not_found", "not_found")

def test_cancel_processed_reservation_rejected(circulation, make_book, make_reader):
    book = make_book()
    reservation = circulation.reserve(book, make_reader())
    circulation.cancel_reservation(reservation.reservation_id)
    result = circulation.cancel_reservation(reservation.reservation_id)
    assert (result.success, result.code) == (False, "already_processed")

def test_cancel_leaves_deleted_book_alone(circulation, make_book, make_reader, set_status, book_status):
    book = make_book()
    reservation = circulation.reserve(book, make_reader())
    set_status(Book, book, BookStatus.DELETED)
    assert circulation.cancel_reservation(reservation.reservation_id).success
    assert book_status(book) == BookStatus.DELETED

def test_cancel_does_not_release_a_borrowed_book(circulation, make_book, make_reader, book_status):
    book = make_book()
    circulation.borrow(book, make_reader("Borrower"))
    reservation = circulation.reserve(book, make_reader("Waiter"))
    circulation.cancel_reservation(reservation.reservation_id)
    assert book_status(book) == BookStatus.BORROWED

def test_held_reservation_index_backs_up_the_read_check(circulation, make_book, make_reader):
    book, reader = make_book(), make_reader()
    assert circulation.reserve(book, reader).success
    with patch("circdesk.core.reservations.HELD_RESERVATION_STATUSES", ()):
        result = circulation.reserve(book, reader)
    assert (result.success, result.code) == (False, "duplicate_reservation")
    assert len(circulation.get_reader_reservations(reader)) == 1

def test_concurrent_duplicate_reservation(desks):
    desk_a, desk_b = desks
    assert desk_a.reserve(1, 3).success
    real_transition = reservations.transition_book
    inner = []

    def interleaved(session, book, event):
        if not inner:
            inner.append(None)
            inner[0] = desk_b.reserve(1, 1)
        return real_transition(session, book, event)

    with patch("circdesk.core.reservations.transition_book", side_effect=interleaved):
        outer = desk_a.reserve(1, 1)

    assert inner[0].success
    assert (outer.success, outer.code) == (False, "duplicate_reservation")
    assert [v.reader_id for v in desk_a.get_book_reservations(1)] == [3, 1]

def test_reserve_loses_to_a_concurrent_borrow(desks):
    desk_a, desk_b = desks
    real_transition = reservations.transition_book
    inner = []

    def interleaved(session, book, event):
        if not inner:
            inner.append(None)
            inner[0] = desk_b.borrow(1, 2)
        return real_transition(session, book, event)

    with patch("circdesk.core.reservations.transition_book", side_effect=interleaved):
        outer = desk_a.reserve(1, 1)

    assert inner[0].success
    assert (outer.success, outer.code) == (False, "book_conflict")
    assert desk_a.get_all_reservations() == []
    assert desk_a.get_current_borrows()[0].book_title == "Shared"
