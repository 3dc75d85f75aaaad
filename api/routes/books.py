# api/routes/books.py
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_book_service, get_lending_service
from api.schemas.borrowing import BorrowingRecord, BorrowingRecordList
from api.schemas.book import (
    Book, BookCreate, BookUpdate, BookList, PopularBook, PopularBookList, BookStatistics
)
from lending.enums import BookStatus
from lending.services import BookService, LendingService

router = APIRouter(prefix="/books", tags=["books"])


def _books(books) -> List[Book]:
    return [Book.model_validate(book) for book in books]


@router.post("", response_model=Book, status_code=status.HTTP_201_CREATED)
def create_book(payload: BookCreate, service: BookService = Depends(get_book_service)):
    """Add a title to the catalog"""
    return Book.model_validate(service.create_book(payload.model_dump()))


@router.get("", response_model=BookList)
def get_books(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    sort: str = Query("id", description="Sort by id, title, author, publication_date, created_at or copies_available"),
    order: str = Query("asc", pattern="^(asc|desc)$", description="Sort order"),
    service: BookService = Depends(get_book_service)
):
    """
    Get a paginated list of the catalog.

    Args:
        page: Page number (1-based)
        size: Number of items per page
        sort: Field to sort by
        order: Sort order (asc or desc)

    Returns:
        BookList containing one page of books and the total count
    """
    books, total = service.list_books(page=page, size=size, sort=sort, order=order)
    return BookList(items=_books(books), total=total, page=page, size=size)


@router.get("/search/title", response_model=List[Book])
def search_by_title(title: str = Query(..., min_length=1), service: BookService = Depends(get_book_service)):
    return _books(service.search_by_title(title))


@router.get("/search/author", response_model=List[Book])
def search_by_author(author: str = Query(..., min_length=1), service: BookService = Depends(get_book_service)):
    return _books(service.search_by_author(author))


@router.get("/search/category", response_model=List[Book])
def search_by_category(category: str = Query(..., min_length=1), service: BookService = Depends(get_book_service)):
    return _books(service.search_by_category(category))


@router.get("/search/isbn", response_model=Book)
def get_book_by_isbn(isbn: str = Query(..., min_length=10), service: BookService = Depends(get_book_service)):
    return Book.model_validate(service.get_book_by_isbn(isbn))


@router.get("/search/full-text", response_model=BookList)
def full_text_search(
    term: str = Query(..., min_length=1, description="Matched against title, author, category, publisher and description"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    service: BookService = Depends(get_book_service)
):
    books, total = service.full_text_search(term, page=page, size=size)
    return BookList(items=_books(books), total=total, page=page, size=size)


@router.get("/search", response_model=BookList)
def search_by_criteria(
    title: Optional[str] = Query(None),
    author: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    service: BookService = Depends(get_book_service)
):
    """Search on any combination of title, author and category substrings"""
    books, total = service.search_by_criteria(title=title, author=author, category=category, page=page, size=size)
    return BookList(items=_books(books), total=total, page=page, size=size)


@router.get("/available", response_model=List[Book])
def get_available_books(service: BookService = Depends(get_book_service)):
    return _books(service.available_books())


@router.get("/low-availability", response_model=List[Book])
def get_low_availability(
    min_copies: Optional[int] = Query(None, ge=1, description="Books with fewer copies on the shelf than this"),
    service: BookService = Depends(get_book_service)
):
    return _books(service.low_availability(min_copies))


@router.get("/popular", response_model=PopularBookList)
def get_popular_books(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    service: BookService = Depends(get_book_service)
):
    books, total = service.most_popular(page=page, size=size)
    return PopularBookList(
        items=[PopularBook(**Book.model_validate(book).model_dump(), borrow_count=count) for book, count in books],
        total=total, page=page, size=size
    )


@router.get("/recent", response_model=BookList)
def get_recent_books(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    service: BookService = Depends(get_book_service)
):
    books, total = service.recently_added(page=page, size=size)
    return BookList(items=_books(books), total=total, page=page, size=size)


@router.get("/language/{language}", response_model=List[Book])
def get_books_by_language(language: str, service: BookService = Depends(get_book_service)):
    return _books(service.by_language(language))


@router.get("/price-range", response_model=List[Book])
def get_books_by_price_range(
    min_price: float = Query(..., ge=0),
    max_price: float = Query(..., ge=0),
    service: BookService = Depends(get_book_service)
):
    return _books(service.by_price_range(min_price, max_price))


@router.get("/publication-date-range", response_model=List[Book])
def get_books_by_publication_date_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    service: BookService = Depends(get_book_service)
):
    return _books(service.by_publication_date_range(start_date, end_date))


@router.get("/status/{book_status}", response_model=List[Book])
def get_books_by_status(book_status: BookStatus, service: BookService = Depends(get_book_service)):
    return _books(service.by_status(book_status))


@router.get("/needing-restock", response_model=List[Book])
def get_books_needing_restock(service: BookService = Depends(get_book_service)):
    return _books(service.needing_restock())


@router.get("/overdue", response_model=List[Book])
def get_overdue_books(service: BookService = Depends(get_book_service)):
    """Books with at least one loan past its due date"""
    return _books(service.overdue_books())


@router.get("/statistics", response_model=BookStatistics)
def get_book_statistics(service: BookService = Depends(get_book_service)):
    return BookStatistics(**service.statistics())


@router.get("/{book_id}", response_model=Book)
def get_book(book_id: int, service: BookService = Depends(get_book_service)):
    return Book.model_validate(service.get_book(book_id))


@router.put("/{book_id}", response_model=Book)
def update_book(book_id: int, payload: BookUpdate, service: BookService = Depends(get_book_service)):
    """Update the catalog entry; a new ``total_copies`` adds or removes shelf copies"""
    return Book.model_validate(service.update_book(book_id, payload.model_dump(exclude_unset=True)))


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(book_id: int, service: BookService = Depends(get_book_service)):
    service.delete_book(book_id)


@router.post("/{book_id}/add-copies", response_model=Book)
def add_copies(
    book_id: int,
    additional_copies: int = Query(..., description="Number of copies to add"),
    service: BookService = Depends(get_book_service)
):
    return Book.model_validate(service.add_copies(book_id, additional_copies))


@router.post("/{book_id}/remove-copies", response_model=Book)
def remove_copies(
    book_id: int,
    copies_to_remove: int = Query(..., description="Number of shelf copies to withdraw"),
    service: BookService = Depends(get_book_service)
):
    return Book.model_validate(service.remove_copies(book_id, copies_to_remove))


@router.get("/{book_id}/loans", response_model=BorrowingRecordList)
def get_book_loans(
    book_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    service: LendingService = Depends(get_lending_service)
):
    records, total = service.records_for_book(book_id, page=page, size=size)
    today = service.today()
    return BorrowingRecordList(
        items=[BorrowingRecord.from_record(record, today) for record in records],
        total=total, page=page, size=size
    )
