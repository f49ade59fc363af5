#!/usr/bin/env python

"""
    API routes for circdesk,
    exposing lending, reservation, sweep and history operations.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from circdesk.core.api import CirculationAPI
from circdesk.core.exceptions import PersistenceFailure
from circdesk.routes.schemas import BorrowRequest, OperatorRequest, ReserveRequest

logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_state": status.HTTP_409_CONFLICT,
    "policy_violation": status.HTTP_422_UNPROCESSABLE_ENTITY,
}

router = APIRouter()


def get_circulation(request: Request) -> CirculationAPI:
    return request.app.state.circulation


def respond(operation, *args):
    """Runs a CirculationAPI operation and maps its result onto a
    response; failed results keep their body, with a status code per
    error category."""
    try:
        result = operation(*args)
    except PersistenceFailure as e:
        logger.error(f"{operation.__name__} failed: {e.message}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
    status_code = status.HTTP_200_OK if result.success else STATUS_BY_CATEGORY.get(
        result.category, status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


@router.post("/borrows")
async def borrow_book(payload: BorrowRequest, circulation: CirculationAPI = Depends(get_circulation)):
    return respond(circulation.borrow, payload.book_id, payload.reader_id, payload.operator_id)

@router.post("/borrows/{borrow_id}/return")
async def return_book(borrow_id: int, payload: Optional[OperatorRequest] = None,
                      circulation: CirculationAPI = Depends(get_circulation)):
    operator_id = payload.operator_id if payload else None
    return respond(circulation.return_book, borrow_id, operator_id)

@router.post("/borrows/{borrow_id}/renew")
async def renew_book(borrow_id: int, payload: Optional[OperatorRequest] = None,
                     circulation: CirculationAPI = Depends(get_circulation)):
    operator_id = payload.operator_id if payload else None
    return respond(circulation.renew, borrow_id, operator_id)

@router.get("/borrows")
async def get_borrows(circulation: CirculationAPI = Depends(get_circulation)):
    return circulation.get_all_borrow_records()

@router.get("/borrows/current")
async def get_current_borrows(circulation: CirculationAPI = Depends(get_circulation)):
    return circulation.get_current_borrows()

@router.get("/borrows/overdue")
async def get_overdue_borrows(circulation: CirculationAPI = Depends(get_circulation)):
    return circulation.get_overdue_borrows()

@router.get("/borrows/{borrow_id}")
async def get_borrow(borrow_id: int, circulation: CirculationAPI = Depends(get_circulation)):
    if record := circulation.get_borrow_record(borrow_id):
        return record
    raise HTTPException(status_code=404, detail=f"Borrow record {borrow_id} does not exist.")

@router.get("/books/{book_id}/borrows")
async def get_book_borrows(book_id: int, circulation: CirculationAPI = Depends(get_circulation)):
    return circulation.get_book_borrow_history(book_id)

@router.get("/readers/{reader_id}/borrows")
async def get_reader_borrows(reader_id: int, circulation: CirculationAPI = Depends(get_circulation)):
    return circulation.get_reader_borrow_history(reader_id)

@router.post("/reservations")
async def reserve_book(payload: ReserveRequest, circulation: CirculationAPI = Depends(get_circulation)):
    return respond(circulation.reserve, payload.book_id, payload.reader_id)

@router.post("/reservations/{reservation_id}/cancel")
async def cancel_reservation(reservation_id: int, circulation: CirculationAPI = Depends(get_circulation)):
    return respond(circulation.cancel_reservation, reservation_id)

@router.get("/reservations")
async def get_reservations(circulation: CirculationAPI = Depends(get_circulation)):
    return circulation.get_all_reservations()

@router.get("/books/{book_id}/reservations")
async def get_book_reservations(book_id: int, circulation: CirculationAPI = Depends(get_circulation)):
    return circulation.get_book_reservations(book_id)

@router.get("/readers/{reader_id}/reservations")
async def get_reader_reservations(reader_id: int, circulation: CirculationAPI = Depends(get_circulation)):
    return circulation.get_reader_reservations(reader_id)

@router.post("/sweeps/overdue")
async def sweep_overdue(circulation: CirculationAPI = Depends(get_circulation)):
    return respond(circulation.sweep_overdue)

@router.post("/sweeps/reservations")
async def sweep_reservations(circulation: CirculationAPI = Depends(get_circulation)):
    return respond(circulation.sweep_expired_reservations)
