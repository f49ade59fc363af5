from pydantic import BaseModel
from typing import Optional

class BorrowRequest(BaseModel):
    book_id: int
    reader_id: int
    operator_id: Optional[int] = None

class OperatorRequest(BaseModel):
    operator_id: Optional[int] = None

class ReserveRequest(BaseModel):
    book_id: int
    reader_id: int
