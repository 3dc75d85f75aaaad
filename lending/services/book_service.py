# lending/services/book_service.py
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from lending.config import settings
from lending.exceptions import BookNotFoundError, ConflictError, InvalidArgumentError
from lending.sa.models import Book, BookStatus
from lending.sa.repositories import BookRepository
from lending.validators import require_isbn, require_not_future, require_positive
from .base import BaseService

logger = logging.getLogger(__name__)

# Catalog fields a caller may set directly; copy counts go through add/remove copies
EDITABLE_FIELDS = (
    "title", "author", "isbn", "publisher", "publication_date", "category",
    "pages", "price", "description", "language", "cover_image_url",
)


class BookService(BaseService):
    """Catalog entries and the copy inventory of each title."""

    def __init__(self, session, today=date.today):
        super().__init__(session, today)
        self.books = BookRepository(session)

    def create_book(self, data: Dict[str, Any]) -> Book:
        """Add a title to the catalog.

        Args:
            data: Book fields; ``copies_available`` defaults to ``total_copies``

        Returns:
            The persisted Book

        Raises:
            InvalidArgumentError: If validation fails or the ISBN is already catalogued
        """
        logger.info("Creating new book with title: %s", data.get("title"))
        self._validate(data)

        if self.books.get_by_isbn(data["isbn"]):
            raise InvalidArgumentError(f"Book with ISBN {data['isbn']} already exists")

        fields = {key: data[key] for key in EDITABLE_FIELDS if data.get(key) is not None}
        total_copies = data.get("total_copies") or 1
        copies_available = data.get("copies_available")
        if copies_available is None:
            copies_available = total_copies
        book = Book(total_copies=total_copies, copies_available=copies_available, **fields)
        if copies_available == 0:
            book.status = BookStatus.BORROWED
        if data.get("status") is not None:
            self._apply_status(book, BookStatus(data["status"]))
        with self.transaction():
            self.books.add(book)

        logger.info("Successfully created book with ID: %s", book.id)
        return book

    def get_book(self, book_id: int) -> Book:
        book = self.books.get_by_id(book_id)
        if book is None:
            raise BookNotFoundError(f"Book not found with ID: {book_id}")
        return book

    def get_book_by_isbn(self, isbn: str) -> Book:
        book = self.books.get_by_isbn(isbn)
        if book is None:
            raise BookNotFoundError(f"Book not found with ISBN: {isbn}")
        return book

    def list_books(self, page: int = 1, size: int = 20, sort: str = "id", order: str = "asc") -> Tuple[List[Book], int]:
        return self.books.list_books(page=page, size=size, sort_field=sort, sort_order=order)

    def update_book(self, book_id: int, data: Dict[str, Any]) -> Book:
        """Update catalog fields of a book.

        A changed ``total_copies`` is applied as an add/remove of copies so the
        shelf count stays consistent with the copies out on loan. An explicit
        ``status`` may not contradict the shelf count.
        """
        logger.info("Updating book with ID: %s", book_id)
        book = self.get_book(book_id)
        self._validate(data)

        new_isbn = data.get("isbn")
        if new_isbn and new_isbn != book.isbn:
            existing = self.books.get_by_isbn(new_isbn)
            if existing is not None and existing.id != book.id:
                raise InvalidArgumentError(f"Book with ISBN {new_isbn} already exists")

        with self.transaction():
            for key in EDITABLE_FIELDS:
                if key in data and data[key] is not None:
                    setattr(book, key, data[key])

            new_total = data.get("total_copies")
            if new_total is not None and new_total != book.total_copies:
                delta = new_total - book.total_copies
                if delta > 0:
                    book.add_copies(delta)
                else:
                    book.remove_copies(-delta)

            if data.get("status") is not None:
                self._apply_status(book, BookStatus(data["status"]))

        logger.info("Successfully updated book with ID: %s", book.id)
        return book

    def delete_book(self, book_id: int) -> None:
        """Soft delete a book that has no loan outstanding"""
        logger.info("Deleting book with ID: %s", book_id)
        book = self.get_book(book_id)
        if self.books.has_active_loans(book.id):
            logger.warning("Refusing to delete book %s: it has active borrowing records", book_id)
            raise ConflictError("Cannot delete book with active borrowing records")

        with self.transaction():
            book.soft_delete()
        logger.info("Successfully deleted book with ID: %s", book_id)

    def add_copies(self, book_id: int, additional_copies: int) -> Book:
        logger.info("Adding %s copies to book with ID: %s", additional_copies, book_id)
        require_positive(additional_copies, "Additional copies must be positive")
        with self.transaction():
            book = self._get_locked(book_id)
            book.add_copies(additional_copies)
        logger.info("Successfully added %s copies to book with ID: %s", additional_copies, book_id)
        return book

    def remove_copies(self, book_id: int, copies_to_remove: int) -> Book:
        logger.info("Removing %s copies from book with ID: %s", copies_to_remove, book_id)
        require_positive(copies_to_remove, "Copies to remove must be positive")
        with self.transaction():
            book = self._get_locked(book_id)
            book.remove_copies(copies_to_remove)
        logger.info("Successfully removed %s copies from book with ID: %s", copies_to_remove, book_id)
        return book

    # Searches

    def search_by_title(self, title: str) -> List[Book]:
        logger.info("Searching books by title: %s", title)
        return self.books.search_by_title(title)

    def search_by_author(self, author: str) -> List[Book]:
        logger.info("Searching books by author: %s", author)
        return self.books.search_by_author(author)

    def search_by_category(self, category: str) -> List[Book]:
        logger.info("Searching books by category: %s", category)
        return self.books.search_by_category(category)

    def search_by_criteria(
        self,
        title: Optional[str] = None,
        author: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        size: int = 20
    ) -> Tuple[List[Book], int]:
        logger.info("Searching books by criteria - title: %s, author: %s, category: %s", title, author, category)
        return self.books.search_by_criteria(title=title, author=author, category=category, page=page, size=size)

    def full_text_search(self, term: str, page: int = 1, size: int = 20) -> Tuple[List[Book], int]:
        logger.info("Full-text searching books with term: %s", term)
        return self.books.full_text_search(term, page=page, size=size)

    def available_books(self) -> List[Book]:
        return self.books.get_available_books()

    def low_availability(self, min_copies: Optional[int] = None) -> List[Book]:
        if min_copies is None:
            min_copies = settings.low_availability_threshold
        return self.books.get_low_availability(min_copies)

    def most_popular(self, page: int = 1, size: int = 20) -> Tuple[List[Tuple[Book, int]], int]:
        return self.books.get_most_popular(page=page, size=size)

    def recently_added(self, page: int = 1, size: int = 20) -> Tuple[List[Book], int]:
        return self.books.get_recently_added(page=page, size=size)

    def by_language(self, language: str) -> List[Book]:
        return self.books.get_by_language(language)

    def by_price_range(self, min_price: float, max_price: float) -> List[Book]:
        if min_price > max_price:
            raise InvalidArgumentError("Minimum price cannot exceed maximum price")
        return self.books.get_by_price_range(min_price, max_price)

    def by_publication_date_range(self, start_date: date, end_date: date) -> List[Book]:
        if start_date > end_date:
            raise InvalidArgumentError("Start date cannot be after end date")
        return self.books.get_by_publication_date_range(start_date, end_date)

    def by_status(self, status: BookStatus) -> List[Book]:
        return self.books.get_by_status(BookStatus(status))

    def needing_restock(self) -> List[Book]:
        return self.books.get_needing_restock()

    def overdue_books(self) -> List[Book]:
        return self.books.get_overdue_books(self.today())

    def statistics(self) -> Dict[str, Any]:
        """Catalog-wide inventory figures for the statistics report"""
        books = self.books.get_all_live()
        average = sum(book.availability_percentage for book in books) / len(books) if books else 0.0
        return {
            "total_books": len(books),
            "available_books": self.books.count_by_status(BookStatus.AVAILABLE),
            "borrowed_books": self.books.count_by_status(BookStatus.BORROWED),
            "overdue_books": len(self.books.get_overdue_books(self.today())),
            "books_needing_restock": len(self.books.get_needing_restock()),
            "average_availability_percentage": round(average, 2),
        }

    # Helpers

    def _get_locked(self, book_id: int) -> Book:
        book = self.books.get_for_update(book_id)
        if book is None:
            raise BookNotFoundError(f"Book not found with ID: {book_id}")
        return book

    def _validate(self, data: Dict[str, Any]) -> None:
        total = data.get("total_copies")
        available = data.get("copies_available")
        if total is not None and total < 1:
            raise InvalidArgumentError("Total copies must be at least 1")
        if available is not None and available < 0:
            raise InvalidArgumentError("Number of copies cannot be negative")
        if total is not None and available is not None and available > total:
            raise InvalidArgumentError("Available copies cannot exceed total copies")
        if data.get("isbn") is not None:
            require_isbn(data["isbn"])
        require_not_future(data.get("publication_date"), "Publication date", self.today())

    @staticmethod
    def _apply_status(book: Book, status: BookStatus) -> None:
        if status == BookStatus.BORROWED and book.copies_available > 0:
            raise InvalidArgumentError("A book with copies on the shelf cannot be marked BORROWED")
        if status == BookStatus.AVAILABLE and book.copies_available == 0:
            raise InvalidArgumentError("A book with no copies on the shelf cannot be marked AVAILABLE")
        book.status = status
