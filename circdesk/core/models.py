#!/usr/bin/env python

"""
    Circulation models for circdesk: books, readers and their policy
    bundles, borrow records, reservations, system config and the
    operation log.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from sqlalchemy import (
    Column, String, Boolean, Integer, Float, Date, DateTime, Text,
    ForeignKey, Index, Enum as SQLAlchemyEnum, text
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sqlalchemy.ext.hybrid import hybrid_property
from circdesk.core.db import Base
import enum


class BookStatus(enum.Enum):
    AVAILABLE = 1
    BORROWED = 2
    RESERVED = 3
    DAMAGED = 4
    LOST = 5
    DELETED = 6

class ReaderStatus(enum.Enum):
    ACTIVE = 1
    SUSPENDED = 2
    DEREGISTERED = 3

class BorrowStatus(enum.Enum):
    ACTIVE = 1
    RETURNED = 2
    OVERDUE = 3
    # Reserved; renewals never write it
    RENEWED = 4

class ReservationStatus(enum.Enum):
    PENDING = 1
    FULFILLED = 2
    EXPIRED = 3
    CANCELLED = 4


# A book may have at most one loan in these statuses
OPEN_BORROW_STATUSES = (BorrowStatus.ACTIVE, BorrowStatus.OVERDUE, BorrowStatus.RENEWED)
# A (book, reader) pair may hold at most one reservation in these statuses
HELD_RESERVATION_STATUSES = (ReservationStatus.PENDING, ReservationStatus.FULFILLED)


class Book(Base):
    __tablename__ = 'book'

    book_id = Column(Integer, primary_key=True)
    isbn = Column(String(32), unique=True)
    title = Column(String, nullable=False)
    author = Column(String)
    status = Column(SQLAlchemyEnum(BookStatus), default=BookStatus.AVAILABLE, nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now())

    @hybrid_property
    def is_deleted(self):
        return self.status == BookStatus.DELETED


class ReaderType(Base):
    __tablename__ = 'reader_type'

    type_id = Column(Integer, primary_key=True)
    type_name = Column(String(50), nullable=False)
    max_borrow_count = Column(Integer, default=5, nullable=False)
    max_loan_days = Column(Integer, default=30, nullable=False)
    renewable = Column(Boolean, default=True, nullable=False)
    max_renew_count = Column(Integer, default=1, nullable=False)


class Reader(Base):
    __tablename__ = 'reader'

    reader_id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255))
    status = Column(SQLAlchemyEnum(ReaderStatus), default=ReaderStatus.ACTIVE, nullable=False)
    type_id = Column(Integer, ForeignKey('reader_type.type_id'), nullable=False)
    registered_at = Column(DateTime(timezone=True), default=func.now())

    reader_type = relationship('ReaderType')

    @hybrid_property
    def is_active(self):
        return self.status == ReaderStatus.ACTIVE


class BorrowRecord(Base):
    __tablename__ = 'borrow_record'

    borrow_id = Column(Integer, primary_key=True)
    book_id = Column(Integer, ForeignKey('book.book_id'), nullable=False)
    reader_id = Column(Integer, ForeignKey('reader.reader_id'), nullable=False)
    borrow_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    return_date = Column(DateTime, nullable=True)
    renew_count = Column(Integer, default=0, nullable=False)
    fine_amount = Column(Float, default=0.0, nullable=False)
    status = Column(SQLAlchemyEnum(BorrowStatus), default=BorrowStatus.ACTIVE, nullable=False)
    operator_id = Column(Integer, nullable=True)

    book = relationship('Book')
    reader = relationship('Reader')

    @hybrid_property
    def is_open(self):
        """True while the loan still holds the book."""
        return self.status in OPEN_BORROW_STATUSES

    @is_open.expression
    def is_open(cls):
        return cls.status.in_(OPEN_BORROW_STATUSES)


class Reservation(Base):
    __tablename__ = 'reservation'

    reservation_id = Column(Integer, primary_key=True)
    book_id = Column(Integer, ForeignKey('book.book_id'), nullable=False)
    reader_id = Column(Integer, ForeignKey('reader.reader_id'), nullable=False)
    reserve_date = Column(DateTime, nullable=False)
    expiry_date = Column(Date, nullable=False)
    status = Column(SQLAlchemyEnum(ReservationStatus), default=ReservationStatus.PENDING, nullable=False)

    book = relationship('Book')
    reader = relationship('Reader')


class SystemConfig(Base):
    __tablename__ = 'system_config'

    config_id = Column(Integer, primary_key=True)
    config_key = Column(String(100), unique=True, nullable=False)
    config_value = Column(String)
    description = Column(String)


class OperationLog(Base):
    __tablename__ = 'operation_log'

    log_id = Column(Integer, primary_key=True)
    user_id = Column(Integer)
    operation = Column(String(50), nullable=False)
    details = Column(Text)
    operation_time = Column(DateTime(timezone=True), default=func.now())


def _status_in(statuses):
    names = ", ".join(f"'{s.name}'" for s in statuses)
    return text(f"status IN ({names})")


# One open loan per book, one held reservation per (book, reader)
Index("uq_borrow_record_open_book", BorrowRecord.book_id, unique=True,
      sqlite_where=_status_in(OPEN_BORROW_STATUSES),
      postgresql_where=_status_in(OPEN_BORROW_STATUSES))
Index("uq_reservation_held", Reservation.book_id, Reservation.reader_id, unique=True,
      sqlite_where=_status_in(HELD_RESERVATION_STATUSES),
      postgresql_where=_status_in(HELD_RESERVATION_STATUSES))
