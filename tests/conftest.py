#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.conftest
    ~~~~~~~~~~~~~~

    Shared fixtures: a fresh in-memory Store per test, a controllable
    clock and small factories for books, readers and reader types.

    :copyright: (c) 2025 by Authors.
    :license: see LICENSE for more details.
"""

import datetime
import pytest
from circdesk.core.api import CirculationAPI
from circdesk.core.db import Store
from circdesk.core.models import (
    Book,
    BookStatus,
    Reader,
    ReaderStatus,
    ReaderType,
    SystemConfig,
)
from circdesk.core.policy import FINE_RATE_KEY

START = datetime.datetime(2025, 3, 1, 10, 30)


class FakeClock:
    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, days=0, hours=0):
        self.now += datetime.timedelta(days=days, hours=hours)
        return self.now

    def today(self):
        return self.now.date()


@pytest.fixture
def store():
    store = Store.from_uri("sqlite://", echo=False)
    store.init_db()
    try:
        yield store
    finally:
        store.drop_db()
        store.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fine_rate(store):
    with store.transaction() as session:
        session.add(SystemConfig(config_key=FINE_RATE_KEY, config_value="0.5"))
    return 0.5


@pytest.fixture
def circulation(store, clock, fine_rate):
    return CirculationAPI(store, clock=clock)


@pytest.fixture
def make_reader_type(store):
    def _make(name="Standard", max_borrow_count=5, max_loan_days=30,
              renewable=True, max_renew_count=1):
        with store.transaction() as session:
            rt = ReaderType(
                type_name=name,
                max_borrow_count=max_borrow_count,
                max_loan_days=max_loan_days,
                renewable=renewable,
                max_renew_count=max_renew_count,
            )
            session.add(rt)
            session.flush()
            return rt.type_id
    return _make


@pytest.fixture
def standard_type(make_reader_type):
    return make_reader_type()


@pytest.fixture
def make_book(store):
    counter = iter(range(1, 10_000))

    def _make(title=None, status=BookStatus.AVAILABLE):
        n = next(counter)
        with store.transaction() as session:
            book = Book(title=title or f"Book {n}", isbn=f"978-{n:09d}", status=status)
            session.add(book)
            session.flush()
            return book.book_id
    return _make


@pytest.fixture
def make_reader(store, standard_type):
    def _make(name="Reader", type_id=None, status=ReaderStatus.ACTIVE):
        with store.transaction() as session:
            reader = Reader(name=name, type_id=type_id or standard_type, status=status)
            session.add(reader)
            session.flush()
            return reader.reader_id
    return _make


@pytest.fixture
def fetch(store):
    """Reads a row back in a fresh transaction."""
    def _fetch(model, pk):
        with store.transaction() as session:
            row = session.get(model, pk)
            if row is not None:
                session.expunge(row)
            return row
    return _fetch


@pytest.fixture
def book_status(fetch):
    return lambda book_id: fetch(Book, book_id).status


@pytest.fixture
def set_status(store):
    """Forces a status column, standing in for administrative tools."""
    def _set(model, pk, status):
        with store.transaction() as session:
            session.get(model, pk).status = status
    return _set


@pytest.fixture
def desks(tmp_path, clock):
    """Two circulation desks, each with its own Store, over one
    file-backed database. Holds book 1 and readers 1 to 3."""
    uri = f"sqlite:///{tmp_path / 'circdesk.db'}"
    stores = [Store.from_uri(uri, echo=False) for _ in range(2)]
    stores[0].init_db()
    with stores[0].transaction() as session:
        session.add(SystemConfig(config_key=FINE_RATE_KEY, config_value="0.5"))
        rt = ReaderType(type_name="Standard", max_borrow_count=5, max_loan_days=30,
                        renewable=True, max_renew_count=1)
        session.add(rt)
        session.add(Book(title="Shared", isbn="978-000000001"))
        session.flush()
        for name in ("A", "B", "C"):
            session.add(Reader(name=name, type_id=rt.type_id))
    try:
        yield tuple(CirculationAPI(store, clock=clock) for store in stores)
    finally:
        for store in stores:
            store.dispose()
