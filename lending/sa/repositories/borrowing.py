# lending/sa/repositories/borrowing.py
from datetime import date, timedelta
from typing import Optional, List, Tuple
from sqlalchemy import desc, func
from sqlalchemy.orm import joinedload
from lending.sa.models import BorrowingRecord, BorrowingStatus
from .base import BaseRepository


class BorrowingRecordRepository(BaseRepository[BorrowingRecord]):
    """Repository for the loan ledger. Records are never physically deleted."""
    model = BorrowingRecord

    def query(self):
        return super().query().options(
            joinedload(BorrowingRecord.patron, innerjoin=True),
            joinedload(BorrowingRecord.book, innerjoin=True),
        )

    def get_history_for_patron(self, patron_id: int, page: int = 1, size: int = 20) -> Tuple[List[BorrowingRecord], int]:
        query = (
            self.query()
            .filter(BorrowingRecord.patron_id == patron_id)
            .order_by(desc(BorrowingRecord.borrowed_date), desc(BorrowingRecord.id))
        )
        return self.paginate(query, page, size)

    def get_history_for_book(self, book_id: int, page: int = 1, size: int = 20) -> Tuple[List[BorrowingRecord], int]:
        query = (
            self.query()
            .filter(BorrowingRecord.book_id == book_id)
            .order_by(desc(BorrowingRecord.borrowed_date), desc(BorrowingRecord.id))
        )
        return self.paginate(query, page, size)

    def get_by_status(self, status: BorrowingStatus) -> List[BorrowingRecord]:
        return self.query().filter(BorrowingRecord.status == status).order_by(BorrowingRecord.id).all()

    def get_active(self) -> List[BorrowingRecord]:
        return self.get_by_status(BorrowingStatus.BORROWED)

    def count_active_for_patron(self, patron_id: int) -> int:
        return (
            self.session.query(func.count(BorrowingRecord.id))
            .filter(
                BorrowingRecord.deleted.is_(False),
                BorrowingRecord.patron_id == patron_id,
                BorrowingRecord.status == BorrowingStatus.BORROWED,
            )
            .scalar() or 0
        )

    def get_overdue(self, today: date) -> List[BorrowingRecord]:
        """Loans still out whose due date has passed"""
        return (
            self.query()
            .filter(BorrowingRecord.status == BorrowingStatus.BORROWED, BorrowingRecord.expected_return_date < today)
            .order_by(BorrowingRecord.expected_return_date)
            .all()
        )

    def get_due_soon(self, today: date, days: int) -> List[BorrowingRecord]:
        """Loans still out that fall due between today and ``today + days`` inclusive"""
        return (
            self.query()
            .filter(
                BorrowingRecord.status == BorrowingStatus.BORROWED,
                BorrowingRecord.expected_return_date >= today,
                BorrowingRecord.expected_return_date <= today + timedelta(days=days),
            )
            .order_by(BorrowingRecord.expected_return_date)
            .all()
        )

    def get_renewable(self, today: date) -> List[BorrowingRecord]:
        return (
            self.query()
            .filter(
                BorrowingRecord.status == BorrowingStatus.BORROWED,
                BorrowingRecord.renewal_count < BorrowingRecord.max_renewals,
                BorrowingRecord.expected_return_date >= today,
            )
            .order_by(BorrowingRecord.expected_return_date)
            .all()
        )

    def get_with_outstanding_fines(self) -> List[BorrowingRecord]:
        return (
            self.query()
            .filter(BorrowingRecord.fine_amount > 0, BorrowingRecord.fine_paid_date.is_(None))
            .order_by(desc(BorrowingRecord.fine_amount))
            .all()
        )

    def get_borrowed_between(self, start_date: date, end_date: date) -> List[BorrowingRecord]:
        return (
            self.query()
            .filter(BorrowingRecord.borrowed_date >= start_date, BorrowingRecord.borrowed_date <= end_date)
            .order_by(BorrowingRecord.borrowed_date)
            .all()
        )

    def get_returned_between(self, start_date: date, end_date: date) -> List[BorrowingRecord]:
        return (
            self.query()
            .filter(BorrowingRecord.actual_return_date >= start_date, BorrowingRecord.actual_return_date <= end_date)
            .order_by(BorrowingRecord.actual_return_date)
            .all()
        )

    def search_records(
        self,
        patron_id: Optional[int] = None,
        book_id: Optional[int] = None,
        status: Optional[BorrowingStatus] = None,
        page: int = 1,
        size: int = 20
    ) -> Tuple[List[BorrowingRecord], int]:
        """Filter the ledger on any combination of patron, book and status, newest first"""
        query = self.query()
        if patron_id is not None:
            query = query.filter(BorrowingRecord.patron_id == patron_id)
        if book_id is not None:
            query = query.filter(BorrowingRecord.book_id == book_id)
        if status is not None:
            query = query.filter(BorrowingRecord.status == status)
        query = query.order_by(desc(BorrowingRecord.borrowed_date), desc(BorrowingRecord.id))
        return self.paginate(query, page, size)

    def count_by_status(self, status: BorrowingStatus) -> int:
        return (
            self.session.query(func.count(BorrowingRecord.id))
            .filter(BorrowingRecord.deleted.is_(False), BorrowingRecord.status == status)
            .scalar() or 0
        )

    def sum_fines(self, paid: bool) -> float:
        """Total of fines already paid (``paid=True``) or still outstanding"""
        query = self.session.query(func.coalesce(func.sum(BorrowingRecord.fine_amount), 0.0)).filter(
            BorrowingRecord.deleted.is_(False),
            BorrowingRecord.fine_amount > 0,
        )
        if paid:
            query = query.filter(BorrowingRecord.fine_paid_date.is_not(None))
        else:
            query = query.filter(BorrowingRecord.fine_paid_date.is_(None))
        return float(query.scalar() or 0.0)
