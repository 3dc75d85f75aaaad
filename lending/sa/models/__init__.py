# lending/sa/models/__init__.py
from lending.enums import BookStatus, PatronRole, PatronStatus, BorrowingStatus, display_name
from .base import Base, AuditMixin, utcnow
from .book import Book
from .patron import Patron
from .borrowing import BorrowingRecord

__all__ = [
    'Base',
    'AuditMixin',
    'utcnow',
    'Book',
    'Patron',
    'BorrowingRecord',
    'BookStatus',
    'PatronRole',
    'PatronStatus',
    'BorrowingStatus',
    'display_name',
]
