# lending/sa/models/book.py
from datetime import date
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import String, Integer, Numeric, Date, Text, Enum as SAEnum, Index, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from lending.exceptions import InvalidArgumentError
from .base import Base, AuditMixin
from lending.enums import BookStatus


class Book(Base, AuditMixin):
    __tablename__ = 'books'

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[str] = mapped_column(String(20), nullable=False)
    publisher: Mapped[str] = mapped_column(String(255), nullable=False)
    publication_date: Mapped[date] = mapped_column(Date, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    pages: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    copies_available: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total_copies: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[BookStatus] = mapped_column(
        SAEnum(BookStatus, native_enum=False, length=20), nullable=False, default=BookStatus.AVAILABLE
    )
    language: Mapped[str] = mapped_column(String(50), nullable=False, default="English")
    cover_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    # Bumped on every UPDATE; a concurrent writer holding an older value fails to flush
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Relationships
    borrowing_records = relationship(
        'BorrowingRecord', back_populates='book', order_by='desc(BorrowingRecord.borrowed_date)'
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint('copies_available >= 0', name='ck_books_copies_available_non_negative'),
        CheckConstraint('copies_available <= total_copies', name='ck_books_copies_within_total'),
        Index('idx_books_isbn', 'isbn'),
        Index('idx_books_title', 'title'),
        Index('idx_books_status', 'status'),
    )

    def __init__(self, **kwargs):
        kwargs.setdefault('total_copies', 1)
        kwargs.setdefault('copies_available', kwargs['total_copies'])
        kwargs.setdefault('status', BookStatus.AVAILABLE)
        kwargs.setdefault('language', "English")
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<Book id={self.id} isbn={self.isbn!r} {self.copies_available}/{self.total_copies} {self.status}>"

    @property
    def is_available(self) -> bool:
        return self.status == BookStatus.AVAILABLE and self.copies_available > 0

    @property
    def availability_percentage(self) -> float:
        if not self.total_copies:
            return 0.0
        return self.copies_available / self.total_copies * 100

    def borrow_copy(self) -> bool:
        """Take one copy off the shelf.

        Returns:
            False when no copies are left; the caller must check before lending
        """
        if self.copies_available > 0:
            self.copies_available -= 1
            if self.copies_available == 0:
                self.status = BookStatus.BORROWED
            return True
        return False

    def return_copy(self) -> bool:
        """Put one copy back on the shelf.

        Returns:
            False when every copy is already on the shelf (an over-return)
        """
        if self.copies_available < self.total_copies:
            self.copies_available += 1
            if self.status == BookStatus.BORROWED and self.copies_available > 0:
                self.status = BookStatus.AVAILABLE
            return True
        return False

    def add_copies(self, count: int) -> None:
        if count is None or count <= 0:
            raise InvalidArgumentError("Additional copies must be positive")
        self.total_copies += count
        self.copies_available += count
        if self.status == BookStatus.BORROWED and self.copies_available > 0:
            self.status = BookStatus.AVAILABLE

    def remove_copies(self, count: int) -> None:
        if count is None or count <= 0:
            raise InvalidArgumentError("Copies to remove must be positive")
        if count > self.total_copies:
            raise InvalidArgumentError("Cannot remove more copies than total copies")
        if count > self.copies_available:
            # Copies out on loan cannot be withdrawn
            raise InvalidArgumentError("Cannot remove more copies than available copies")
        self.total_copies -= count
        self.copies_available -= count
        if self.copies_available == 0:
            self.status = BookStatus.BORROWED
