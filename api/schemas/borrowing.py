# api/schemas/borrowing.py
from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from lending.enums import BorrowingStatus


class BorrowingCreate(BaseModel):
    patron_id: int
    book_id: int
    expected_return_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class BorrowingReturn(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=1000)


class BorrowingRenew(BaseModel):
    additional_days: Optional[int] = Field(default=None, ge=1, le=365)


class FinePayment(BaseModel):
    fine_amount: Optional[float] = Field(default=None, gt=0)


class BorrowingRecord(BaseModel):
    """Snapshot of one loan, with the date-dependent figures as of ``today``"""
    id: int
    patron_id: int
    patron_full_name: str
    book_id: int
    book_title: str
    borrowed_date: date
    expected_return_date: date
    actual_return_date: Optional[date] = None
    status: BorrowingStatus
    fine_amount: float
    fine_paid_date: Optional[date] = None
    is_fine_paid: bool
    notes: Optional[str] = None
    renewal_count: int
    max_renewals: int
    is_overdue: bool
    days_overdue: int
    can_be_renewed: bool
    borrowing_duration_days: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_record(cls, record, today: date) -> "BorrowingRecord":
        return cls(
            id=record.id,
            patron_id=record.patron_id,
            patron_full_name=record.patron.full_name,
            book_id=record.book_id,
            book_title=record.book.title,
            borrowed_date=record.borrowed_date,
            expected_return_date=record.expected_return_date,
            actual_return_date=record.actual_return_date,
            status=record.status,
            fine_amount=record.fine_amount or 0.0,
            fine_paid_date=record.fine_paid_date,
            is_fine_paid=record.is_fine_paid,
            notes=record.notes,
            renewal_count=record.renewal_count,
            max_renewals=record.max_renewals,
            is_overdue=record.is_overdue(today),
            days_overdue=record.days_overdue(today),
            can_be_renewed=record.can_be_renewed(today),
            borrowing_duration_days=record.borrowing_duration_days(today),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class BorrowingRecordList(BaseModel):
    items: List[BorrowingRecord]
    total: int
    page: int
    size: int


class LendingStatistics(BaseModel):
    status_counts: Dict[str, int]
    active_loans: int
    overdue_loans: int
    outstanding_fines: float
    collected_fines: float
