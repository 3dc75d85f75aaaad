# api/routes/borrowings.py
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_lending_service
from api.schemas.borrowing import (
    BorrowingCreate, BorrowingReturn, BorrowingRenew, FinePayment,
    BorrowingRecord, BorrowingRecordList, LendingStatistics
)
from lending.enums import BorrowingStatus
from lending.services import LendingService

router = APIRouter(prefix="/borrowings", tags=["borrowings"])


def _snapshots(service: LendingService, records) -> List[BorrowingRecord]:
    today = service.today()
    return [BorrowingRecord.from_record(record, today) for record in records]


def _snapshot(service: LendingService, record) -> BorrowingRecord:
    return BorrowingRecord.from_record(record, service.today())


@router.post("", response_model=BorrowingRecord, status_code=status.HTTP_201_CREATED)
def create_borrowing(payload: BorrowingCreate, service: LendingService = Depends(get_lending_service)):
    """
    Lend a copy of a book to a patron.

    The due date defaults to today plus the loan period of the patron's role.
    Fails with 400 when the patron cannot borrow, has reached their limit, or
    the book has no copy on the shelf.
    """
    record = service.borrow_book(
        payload.patron_id,
        payload.book_id,
        expected_return_date=payload.expected_return_date,
        notes=payload.notes,
    )
    return _snapshot(service, record)


@router.get("", response_model=BorrowingRecordList)
def search_borrowings(
    patron_id: Optional[int] = Query(None),
    book_id: Optional[int] = Query(None),
    borrowing_status: Optional[BorrowingStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    service: LendingService = Depends(get_lending_service)
):
    records, total = service.search_records(
        patron_id=patron_id, book_id=book_id, status=borrowing_status, page=page, size=size
    )
    return BorrowingRecordList(items=_snapshots(service, records), total=total, page=page, size=size)


@router.get("/active", response_model=List[BorrowingRecord])
def get_active_borrowings(service: LendingService = Depends(get_lending_service)):
    return _snapshots(service, service.active_records())


@router.get("/overdue", response_model=List[BorrowingRecord])
def get_overdue_borrowings(service: LendingService = Depends(get_lending_service)):
    return _snapshots(service, service.overdue_records())


@router.get("/outstanding-fines", response_model=List[BorrowingRecord])
def get_borrowings_with_outstanding_fines(service: LendingService = Depends(get_lending_service)):
    return _snapshots(service, service.records_with_outstanding_fines())


@router.get("/due-soon", response_model=List[BorrowingRecord])
def get_borrowings_due_soon(
    days: Optional[int] = Query(None, ge=0, description="Window in days; defaults to the configured value"),
    service: LendingService = Depends(get_lending_service)
):
    return _snapshots(service, service.due_soon(days))


@router.get("/renewable", response_model=List[BorrowingRecord])
def get_renewable_borrowings(service: LendingService = Depends(get_lending_service)):
    return _snapshots(service, service.renewable_records())


@router.get("/status/{borrowing_status}", response_model=List[BorrowingRecord])
def get_borrowings_by_status(borrowing_status: BorrowingStatus, service: LendingService = Depends(get_lending_service)):
    return _snapshots(service, service.records_by_status(borrowing_status))


@router.get("/borrowed-range", response_model=List[BorrowingRecord])
def get_borrowings_in_borrowed_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    service: LendingService = Depends(get_lending_service)
):
    return _snapshots(service, service.records_in_borrowed_range(start_date, end_date))


@router.get("/returned-range", response_model=List[BorrowingRecord])
def get_borrowings_in_return_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    service: LendingService = Depends(get_lending_service)
):
    """Loans closed between the two dates, inclusive"""
    return _snapshots(service, service.records_in_return_range(start_date, end_date))


@router.get("/statistics", response_model=LendingStatistics)
def get_lending_statistics(service: LendingService = Depends(get_lending_service)):
    return LendingStatistics(**service.lending_statistics())


@router.get("/{record_id}", response_model=BorrowingRecord)
def get_borrowing(record_id: int, service: LendingService = Depends(get_lending_service)):
    return _snapshot(service, service.get_record(record_id))


@router.post("/{record_id}/return", response_model=BorrowingRecord)
def return_borrowing(
    record_id: int,
    payload: Optional[BorrowingReturn] = None,
    service: LendingService = Depends(get_lending_service)
):
    notes = payload.notes if payload else None
    return _snapshot(service, service.return_book(record_id, notes=notes))


@router.post("/{record_id}/renew", response_model=BorrowingRecord)
def renew_borrowing(
    record_id: int,
    payload: Optional[BorrowingRenew] = None,
    service: LendingService = Depends(get_lending_service)
):
    additional_days = payload.additional_days if payload else None
    return _snapshot(service, service.renew_loan(record_id, additional_days=additional_days))


@router.post("/{record_id}/pay-fine", response_model=BorrowingRecord)
def pay_fine(
    record_id: int,
    payload: Optional[FinePayment] = None,
    service: LendingService = Depends(get_lending_service)
):
    amount = payload.fine_amount if payload else None
    return _snapshot(service, service.pay_fine(record_id, amount=amount))
