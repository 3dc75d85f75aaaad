# lending/services/lending_service.py
import logging
from datetime import date, timedelta
from typing import List, Optional, Tuple
from lending.config import settings
from lending.exceptions import (
    BookNotFoundError, BorrowingRecordNotFoundError, InvalidArgumentError, PatronNotFoundError
)
from lending.sa.models import Book, BorrowingRecord, BorrowingStatus, Patron
from lending.sa.repositories import BookRepository, BorrowingRecordRepository, PatronRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class LendingService(BaseService):
    """The borrowing ledger: issuing, renewing and closing loans.

    Every operation that touches both a book's copy counters and a loan
    record does so inside one transaction, so the two either change
    together or not at all.
    """

    def __init__(self, session, today=date.today, max_renewals: Optional[int] = None):
        super().__init__(session, today)
        self.books = BookRepository(session)
        self.patrons = PatronRepository(session)
        self.records = BorrowingRecordRepository(session)
        self.max_renewals = settings.max_renewals if max_renewals is None else max_renewals

    def borrow_book(
        self,
        patron_id: int,
        book_id: int,
        expected_return_date: Optional[date] = None,
        notes: Optional[str] = None
    ) -> BorrowingRecord:
        """Lend one copy of a book to a patron.

        Args:
            patron_id: The borrowing patron
            book_id: The book to lend
            expected_return_date: Due date override; defaults to today plus the
                patron's role loan period
            notes: Free text stored on the record

        Returns:
            The new BorrowingRecord in status BORROWED

        Raises:
            PatronNotFoundError, BookNotFoundError: If either id does not resolve
            InvalidArgumentError: If the patron may not borrow, has reached their
                limit, or no copy is available
            ConflictError: If another request changed the book or the patron concurrently
        """
        logger.info("Creating loan of book %s for patron %s", book_id, patron_id)
        today = self.today()

        with self.transaction():
            patron = self.patrons.get_for_update(patron_id)
            if patron is None:
                raise PatronNotFoundError(f"Patron not found with ID: {patron_id}")
            book = self.books.get_for_update(book_id)
            if book is None:
                raise BookNotFoundError(f"Book not found with ID: {book_id}")

            self._check_patron_may_borrow(patron)

            if not book.is_available:
                logger.warning("Book %s has no copies available", book_id)
                raise InvalidArgumentError(f"Book '{book.title}' has no copies available")

            if expected_return_date is None:
                expected_return_date = today + timedelta(days=patron.borrowing_period_days)
            elif expected_return_date <= today:
                raise InvalidArgumentError("Expected return date must be after the borrowing date")

            if not book.borrow_copy():
                raise InvalidArgumentError(f"Book '{book.title}' has no copies available")
            patron.mark_loans_changed()

            record = BorrowingRecord(
                patron=patron,
                book=book,
                borrowed_date=today,
                expected_return_date=expected_return_date,
                status=BorrowingStatus.BORROWED,
                notes=notes,
                max_renewals=self.max_renewals,
            )
            self.records.add(record)

        logger.info("Successfully created loan %s (book %s due %s)", record.id, book_id, expected_return_date)
        return record

    def return_book(self, record_id: int, notes: Optional[str] = None) -> BorrowingRecord:
        """Close a loan and put the copy back on the shelf.

        A late return stores the flat daily fine for each day past the due date.
        """
        logger.info("Returning loan %s", record_id)
        with self.transaction():
            record = self._get_record_for_update(record_id)
            if not record.return_book(self.today()):
                raise InvalidArgumentError(f"Loan {record_id} is not currently borrowed")

            book = self.books.get_for_update(record.book_id)
            if book is None or not book.return_copy():
                # Every copy is already on the shelf: the counters and the ledger disagree
                logger.error("Book %s rejected the return of loan %s", record.book_id, record_id)
                raise InvalidArgumentError(f"Book {record.book_id} has no copy on loan to take back")

            if notes:
                record.notes = f"{record.notes}\n{notes}" if record.notes else notes

        if record.fine_amount:
            logger.info("Loan %s returned late, fine %.2f", record_id, record.fine_amount)
        logger.info("Successfully returned loan %s", record_id)
        return record

    def renew_loan(self, record_id: int, additional_days: Optional[int] = None) -> BorrowingRecord:
        """Push the due date of a loan back.

        Args:
            record_id: Loan to renew
            additional_days: Extension; defaults to the patron's role loan period

        Raises:
            InvalidArgumentError: If the loan is returned, overdue or out of renewals
        """
        logger.info("Renewing loan %s by %s days", record_id, additional_days)
        with self.transaction():
            record = self._get_record_for_update(record_id)
            if additional_days is None:
                additional_days = record.patron.borrowing_period_days
            if additional_days <= 0:
                raise InvalidArgumentError("Additional days must be positive")
            if not record.renew(additional_days, self.today()):
                raise InvalidArgumentError(self._renewal_refusal(record))

        logger.info("Successfully renewed loan %s, now due %s", record_id, record.expected_return_date)
        return record

    def pay_fine(self, record_id: int, amount: Optional[float] = None) -> BorrowingRecord:
        """Mark the fine on a loan as paid.

        Args:
            record_id: Loan carrying the fine
            amount: Amount tendered; when given it must settle the whole fine
        """
        logger.info("Paying fine on loan %s", record_id)
        with self.transaction():
            record = self._get_record_for_update(record_id)
            if amount is not None and abs(amount - (record.fine_amount or 0.0)) > 0.005:
                raise InvalidArgumentError(
                    f"Payment of {amount:.2f} does not match the outstanding fine of {record.fine_amount:.2f}"
                )
            if not record.pay_fine(self.today()):
                if record.is_fine_paid:
                    raise InvalidArgumentError(f"Fine on loan {record_id} has already been paid")
                raise InvalidArgumentError(f"Loan {record_id} has no fine to pay")

        logger.info("Successfully paid fine of %.2f on loan %s", record.fine_amount, record_id)
        return record

    # Queries

    def get_record(self, record_id: int) -> BorrowingRecord:
        record = self.records.get_by_id(record_id)
        if record is None:
            raise BorrowingRecordNotFoundError(f"Borrowing record not found with ID: {record_id}")
        return record

    def records_for_patron(self, patron_id: int, page: int = 1, size: int = 20) -> Tuple[List[BorrowingRecord], int]:
        self._get_patron(patron_id)
        return self.records.get_history_for_patron(patron_id, page=page, size=size)

    def records_for_book(self, book_id: int, page: int = 1, size: int = 20) -> Tuple[List[BorrowingRecord], int]:
        if self.books.get_by_id(book_id) is None:
            raise BookNotFoundError(f"Book not found with ID: {book_id}")
        return self.records.get_history_for_book(book_id, page=page, size=size)

    def search_records(
        self,
        patron_id: Optional[int] = None,
        book_id: Optional[int] = None,
        status: Optional[BorrowingStatus] = None,
        page: int = 1,
        size: int = 20
    ) -> Tuple[List[BorrowingRecord], int]:
        return self.records.search_records(
            patron_id=patron_id,
            book_id=book_id,
            status=BorrowingStatus(status) if status else None,
            page=page,
            size=size,
        )

    def records_by_status(self, status: BorrowingStatus) -> List[BorrowingRecord]:
        return self.records.get_by_status(BorrowingStatus(status))

    def active_records(self) -> List[BorrowingRecord]:
        return self.records.get_active()

    def overdue_records(self) -> List[BorrowingRecord]:
        return self.records.get_overdue(self.today())

    def records_with_outstanding_fines(self) -> List[BorrowingRecord]:
        return self.records.get_with_outstanding_fines()

    def due_soon(self, days: Optional[int] = None) -> List[BorrowingRecord]:
        return self.records.get_due_soon(self.today(), settings.due_soon_days if days is None else days)

    def renewable_records(self) -> List[BorrowingRecord]:
        return self.records.get_renewable(self.today())

    def records_in_borrowed_range(self, start_date: date, end_date: date) -> List[BorrowingRecord]:
        if start_date > end_date:
            raise InvalidArgumentError("Start date cannot be after end date")
        return self.records.get_borrowed_between(start_date, end_date)

    def records_in_return_range(self, start_date: date, end_date: date) -> List[BorrowingRecord]:
        if start_date > end_date:
            raise InvalidArgumentError("Start date cannot be after end date")
        return self.records.get_returned_between(start_date, end_date)

    def count_by_status(self) -> dict:
        return {status.value: self.records.count_by_status(status) for status in BorrowingStatus}

    def lending_statistics(self) -> dict:
        counts = self.count_by_status()
        return {
            "status_counts": counts,
            "active_loans": counts[BorrowingStatus.BORROWED.value],
            "overdue_loans": len(self.records.get_overdue(self.today())),
            "outstanding_fines": round(self.records.sum_fines(paid=False), 2),
            "collected_fines": round(self.records.sum_fines(paid=True), 2),
        }

    # Helpers

    def _get_patron(self, patron_id: int) -> Patron:
        patron = self.patrons.get_by_id(patron_id)
        if patron is None:
            raise PatronNotFoundError(f"Patron not found with ID: {patron_id}")
        return patron

    def _get_record_for_update(self, record_id: int) -> BorrowingRecord:
        record = self.records.get_for_update(record_id)
        if record is None:
            raise BorrowingRecordNotFoundError(f"Borrowing record not found with ID: {record_id}")
        return record

    def _check_patron_may_borrow(self, patron: Patron) -> None:
        if not patron.can_borrow_books:
            logger.warning("Patron %s (%s/%s) may not borrow", patron.id, patron.role.value, patron.status.value)
            raise InvalidArgumentError(
                f"Patron {patron.username} is not eligible to borrow books "
                f"(role {patron.role.value}, status {patron.status.value})"
            )
        active = self.records.count_active_for_patron(patron.id)
        if active >= patron.max_books_allowed:
            logger.warning("Patron %s already has %s of %s loans", patron.id, active, patron.max_books_allowed)
            raise InvalidArgumentError(
                f"Patron {patron.username} has reached the maximum of {patron.max_books_allowed} borrowed books"
            )

    def _renewal_refusal(self, record: BorrowingRecord) -> str:
        if not record.is_active:
            return f"Loan {record.id} is not currently borrowed"
        if record.renewal_count >= record.max_renewals:
            return f"Loan {record.id} has used all {record.max_renewals} renewals"
        return f"Loan {record.id} is overdue and cannot be renewed"
