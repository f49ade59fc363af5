#!/usr/bin/env python
"""
    Result Schemas for circdesk,
    the structured outcome every circulation operation hands its caller.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from pydantic import BaseModel
from typing import Optional
from datetime import date

class OperationResult(BaseModel):
    success: bool
    message: str
    code: Optional[str] = None
    category: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "message": "Reader 7 has reached the limit of 5 borrowed books.",
                "code": "quota_exceeded",
                "category": "policy_violation"
            }
        }

class BorrowResult(OperationResult):
    borrow_id: Optional[int] = None

class ReturnResult(OperationResult):
    fine_amount: Optional[float] = None

class RenewResult(OperationResult):
    new_due_date: Optional[date] = None

class ReserveResult(OperationResult):
    reservation_id: Optional[int] = None

class CancelResult(OperationResult):
    next_reservation_id: Optional[int] = None

class SweepResult(OperationResult):
    updated: int = 0
