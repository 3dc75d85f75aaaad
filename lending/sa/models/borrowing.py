# lending/sa/models/borrowing.py
from datetime import date, timedelta
from typing import Optional
from sqlalchemy import Integer, Float, Date, Text, ForeignKey, Enum as SAEnum, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column, validates
from lending.exceptions import InvalidArgumentError
from lending.policies import DAILY_FINE_RATE, DEFAULT_MAX_RENEWALS
from .base import Base, AuditMixin
from lending.enums import BorrowingStatus


class BorrowingRecord(Base, AuditMixin):
    """One loan of one copy of a book to one patron.

    ``OVERDUE`` is never stored by the lending flow; overdue-ness is derived
    from the due date every time it is read. ``actual_return_date`` is set
    exactly when the status becomes ``RETURNED``.
    """
    __tablename__ = 'borrowing_records'

    patron_id: Mapped[int] = mapped_column(ForeignKey('patrons.id'), nullable=False)
    book_id: Mapped[int] = mapped_column(ForeignKey('books.id'), nullable=False)
    borrowed_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_return_date: Mapped[date] = mapped_column(Date, nullable=False)
    actual_return_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[BorrowingStatus] = mapped_column(
        SAEnum(BorrowingStatus, native_enum=False, length=20), nullable=False, default=BorrowingStatus.BORROWED
    )
    fine_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    fine_paid_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    renewal_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_renewals: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_MAX_RENEWALS)

    # Relationships
    patron = relationship('Patron', back_populates='borrowing_records')
    book = relationship('Book', back_populates='borrowing_records')

    __table_args__ = (
        Index('idx_borrowing_records_patron_status', 'patron_id', 'status'),
        Index('idx_borrowing_records_book_status', 'book_id', 'status'),
        Index('idx_borrowing_records_expected_return_date', 'expected_return_date'),
    )

    def __init__(self, **kwargs):
        kwargs.setdefault('status', BorrowingStatus.BORROWED)
        kwargs.setdefault('fine_amount', 0.0)
        kwargs.setdefault('renewal_count', 0)
        kwargs.setdefault('max_renewals', DEFAULT_MAX_RENEWALS)
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return (
            f"<BorrowingRecord id={self.id} patron={self.patron_id} book={self.book_id} "
            f"{self.status} due={self.expected_return_date}>"
        )

    @validates('patron_id', 'book_id', 'patron', 'book')
    def _validate_immutable_parties(self, key, value):
        current = getattr(self, key)
        if current is not None and current != value:
            raise InvalidArgumentError(f"A loan cannot be reassigned ({key} is fixed once set)")
        return value

    @property
    def is_active(self) -> bool:
        return self.status == BorrowingStatus.BORROWED

    def is_overdue(self, today: Optional[date] = None) -> bool:
        if self.actual_return_date is not None:
            return False
        today = today or date.today()
        return today > self.expected_return_date

    def days_overdue(self, today: Optional[date] = None) -> int:
        today = today or date.today()
        if not self.is_overdue(today):
            return 0
        return today.toordinal() - self.expected_return_date.toordinal()

    def calculate_fine(self, daily_rate: float, today: Optional[date] = None) -> float:
        """Fine accrued so far at ``daily_rate`` per overdue day; does not store it"""
        if not self.is_overdue(today):
            return 0.0
        return self.days_overdue(today) * daily_rate

    def can_be_renewed(self, today: Optional[date] = None) -> bool:
        return (
            self.is_active
            and self.renewal_count < self.max_renewals
            and not self.is_overdue(today)
        )

    def renew(self, additional_days: int, today: Optional[date] = None) -> bool:
        if not self.can_be_renewed(today):
            return False
        self.expected_return_date = self.expected_return_date + timedelta(days=additional_days)
        self.renewal_count += 1
        return True

    def return_book(self, today: Optional[date] = None) -> bool:
        """Close the loan, charging the flat daily fine when it comes back late"""
        if not self.is_active:
            return False
        today = today or date.today()
        # Lateness has to be measured before the return date is recorded
        fine = self.calculate_fine(DAILY_FINE_RATE, today)
        self.actual_return_date = today
        self.status = BorrowingStatus.RETURNED
        if fine > 0:
            self.fine_amount = fine
        return True

    def borrowing_duration_days(self, today: Optional[date] = None) -> int:
        end_date = self.actual_return_date or today or date.today()
        return end_date.toordinal() - self.borrowed_date.toordinal()

    @property
    def is_fine_paid(self) -> bool:
        return self.fine_paid_date is not None

    def pay_fine(self, today: Optional[date] = None) -> bool:
        if (self.fine_amount or 0) > 0 and not self.is_fine_paid:
            self.fine_paid_date = today or date.today()
            return True
        return False
