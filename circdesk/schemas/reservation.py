from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date, datetime
import enum

class ReservationView(BaseModel):
    reservation_id: int
    book_id: int
    reader_id: int
    book_title: Optional[str] = None
    reader_name: Optional[str] = None
    reserve_date: datetime
    expiry_date: date
    status: str

    class Config:
        from_attributes = True

    @field_validator("status", mode="before")
    @classmethod
    def status_name(cls, value):
        return value.name if isinstance(value, enum.Enum) else value

    @classmethod
    def from_reservation(cls, reservation):
        view = cls.model_validate(reservation)
        if reservation.book is not None:
            view.book_title = reservation.book.title
        if reservation.reader is not None:
            view.reader_name = reservation.reader.name
        return view
