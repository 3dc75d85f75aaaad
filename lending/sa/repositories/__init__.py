# lending/sa/repositories/__init__.py
from .base import BaseRepository
from .book import BookRepository
from .patron import PatronRepository
from .borrowing import BorrowingRecordRepository

__all__ = ['BaseRepository', 'BookRepository', 'PatronRepository', 'BorrowingRecordRepository']
