from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date, datetime
import enum

class BorrowRecordView(BaseModel):
    borrow_id: int
    book_id: int
    reader_id: int
    book_title: Optional[str] = None
    reader_name: Optional[str] = None
    borrow_date: date
    due_date: date
    return_date: Optional[datetime] = None
    renew_count: int = 0
    fine_amount: float = 0.0
    status: str
    operator_id: Optional[int] = None

    class Config:
        from_attributes = True

    @field_validator("status", mode="before")
    @classmethod
    def status_name(cls, value):
        return value.name if isinstance(value, enum.Enum) else value

    @classmethod
    def from_record(cls, record):
        view = cls.model_validate(record)
        if record.book is not None:
            view.book_title = record.book.title
        if record.reader is not None:
            view.reader_name = record.reader.name
        return view
