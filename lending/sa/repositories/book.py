# lending/sa/repositories/book.py
from datetime import date
from typing import Optional, List, Tuple
from sqlalchemy import desc, func, or_, exists, and_
from lending.sa.models import Book, BookStatus, BorrowingRecord, BorrowingStatus
from .base import BaseRepository


class BookRepository(BaseRepository[Book]):
    model = Book

    SORT_FIELDS = {
        "id": Book.id,
        "title": Book.title,
        "author": Book.author,
        "publication_date": Book.publication_date,
        "created_at": Book.created_at,
        "copies_available": Book.copies_available,
    }

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        """Get a live book by its ISBN"""
        return self.query().filter(Book.isbn == isbn).first()

    def list_books(
        self,
        page: int = 1,
        size: int = 20,
        sort_field: str = "id",
        sort_order: str = "asc"
    ) -> Tuple[List[Book], int]:
        """Get one page of the catalog.

        Args:
            page: Page number (1-based)
            size: Number of books per page
            sort_field: Field to sort by (id, title, author, publication_date, created_at, copies_available)
            sort_order: Sort order (asc or desc)

        Returns:
            Tuple of (books on the page, total number of live books)
        """
        sort_column = self.SORT_FIELDS.get(sort_field, Book.id)
        query = self.query().order_by(desc(sort_column) if sort_order == "desc" else sort_column)
        return self.paginate(query, page, size)

    def search_by_title(self, title: str) -> List[Book]:
        return self.query().filter(Book.title.ilike(f"%{title}%")).order_by(Book.title).all()

    def search_by_author(self, author: str) -> List[Book]:
        return self.query().filter(Book.author.ilike(f"%{author}%")).order_by(Book.title).all()

    def search_by_category(self, category: str) -> List[Book]:
        return self.query().filter(Book.category.ilike(f"%{category}%")).order_by(Book.title).all()

    def search_by_criteria(
        self,
        title: Optional[str] = None,
        author: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        size: int = 20
    ) -> Tuple[List[Book], int]:
        """Search books on any combination of title, author and category.

        Each criterion is a case-insensitive substring match and is ignored when empty.

        Returns:
            Tuple of (matching books on the page, total matches)
        """
        query = self.query()
        if title:
            query = query.filter(Book.title.ilike(f"%{title}%"))
        if author:
            query = query.filter(Book.author.ilike(f"%{author}%"))
        if category:
            query = query.filter(Book.category.ilike(f"%{category}%"))
        return self.paginate(query.order_by(Book.title), page, size)

    def full_text_search(self, term: str, page: int = 1, size: int = 20) -> Tuple[List[Book], int]:
        """Match ``term`` against title, author, category, publisher and description"""
        pattern = f"%{term}%"
        query = self.query().filter(
            or_(
                Book.title.ilike(pattern),
                Book.author.ilike(pattern),
                Book.category.ilike(pattern),
                Book.publisher.ilike(pattern),
                Book.description.ilike(pattern),
            )
        ).order_by(Book.title)
        return self.paginate(query, page, size)

    def get_available_books(self) -> List[Book]:
        return (
            self.query()
            .filter(Book.status == BookStatus.AVAILABLE, Book.copies_available > 0)
            .order_by(Book.title)
            .all()
        )

    def get_low_availability(self, min_copies: int) -> List[Book]:
        """Books with fewer than ``min_copies`` copies on the shelf"""
        return (
            self.query()
            .filter(Book.copies_available < min_copies)
            .order_by(Book.copies_available, Book.title)
            .all()
        )

    def get_most_popular(self, page: int = 1, size: int = 20) -> Tuple[List[Tuple[Book, int]], int]:
        """(book, loan count) pairs, most borrowed first; soft-deleted loans do not count"""
        loan_count = func.count(BorrowingRecord.id).label("borrow_count")
        query = (
            self.session.query(Book, loan_count)
            .filter(Book.deleted.is_(False))
            .outerjoin(
                BorrowingRecord,
                and_(BorrowingRecord.book_id == Book.id, BorrowingRecord.deleted.is_(False))
            )
            .group_by(Book.id)
            .order_by(desc(loan_count), Book.title)
        )
        total = self.count()
        items = [(book, count) for book, count in query.offset((page - 1) * size).limit(size).all()]
        return items, total

    def get_recently_added(self, page: int = 1, size: int = 20) -> Tuple[List[Book], int]:
        query = self.query().order_by(desc(Book.created_at), desc(Book.id))
        return self.paginate(query, page, size)

    def get_by_language(self, language: str) -> List[Book]:
        return self.query().filter(func.lower(Book.language) == language.lower()).order_by(Book.title).all()

    def get_by_price_range(self, min_price: float, max_price: float) -> List[Book]:
        return (
            self.query()
            .filter(Book.price >= min_price, Book.price <= max_price)
            .order_by(Book.price)
            .all()
        )

    def get_by_publication_date_range(self, start_date: date, end_date: date) -> List[Book]:
        return (
            self.query()
            .filter(Book.publication_date >= start_date, Book.publication_date <= end_date)
            .order_by(Book.publication_date)
            .all()
        )

    def get_by_status(self, status: BookStatus) -> List[Book]:
        return self.query().filter(Book.status == status).order_by(Book.title).all()

    def count_by_status(self, status: BookStatus) -> int:
        return self.query().filter(Book.status == status).count()

    def get_needing_restock(self) -> List[Book]:
        """Books with every copy out on loan"""
        return (
            self.query()
            .filter(Book.copies_available == 0, Book.status == BookStatus.BORROWED)
            .order_by(Book.title)
            .all()
        )

    def get_overdue_books(self, today: date) -> List[Book]:
        """Distinct books that have at least one overdue loan outstanding"""
        overdue_loan = exists().where(
            BorrowingRecord.book_id == Book.id,
            BorrowingRecord.deleted.is_(False),
            BorrowingRecord.status == BorrowingStatus.BORROWED,
            BorrowingRecord.expected_return_date < today,
        )
        return self.query().filter(overdue_loan).order_by(Book.title).all()

    def has_active_loans(self, book_id: int) -> bool:
        return self.session.query(
            exists().where(
                BorrowingRecord.book_id == book_id,
                BorrowingRecord.deleted.is_(False),
                BorrowingRecord.status == BorrowingStatus.BORROWED,
            )
        ).scalar()

    def get_all_live(self) -> List[Book]:
        return self.query().all()
