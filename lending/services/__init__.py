# lending/services/__init__.py
from .base import BaseService
from .book_service import BookService
from .patron_service import PatronService
from .lending_service import LendingService

__all__ = ['BaseService', 'BookService', 'PatronService', 'LendingService']
