# lending/sa/__init__.py
from .database import Database, get_db, get_database, set_database
from .models import (
    Base, AuditMixin, Book, Patron, BorrowingRecord,
    BookStatus, PatronRole, PatronStatus, BorrowingStatus
)

__all__ = [
    'Database',
    'get_db',
    'get_database',
    'set_database',
    'Base',
    'AuditMixin',
    'Book',
    'Patron',
    'BorrowingRecord',
    'BookStatus',
    'PatronRole',
    'PatronStatus',
    'BorrowingStatus',
]
