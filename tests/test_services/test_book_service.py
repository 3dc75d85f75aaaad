# tests/test_services/test_book_service.py
import pytest
from datetime import date, timedelta
from decimal import Decimal
from lending.exceptions import BookNotFoundError, ConflictError, InvalidArgumentError
from lending.sa.models import BookStatus
from lending.services import BookService, LendingService


@pytest.fixture
def book_service(db_session, clock):
    return BookService(db_session, today=clock)


@pytest.fixture
def book_data():
    return {
        "title": "The Left Hand of Darkness",
        "author": "Ursula K. Le Guin",
        "isbn": "978-0-441-47812-5",
        "publisher": "Ace",
        "publication_date": date(1969, 3, 1),
        "category": "Science Fiction",
        "pages": 304,
        "price": Decimal("12.50"),
        "total_copies": 3,
    }


def test_create_book(book_service, book_data):
    book = book_service.create_book(book_data)
    assert book.id is not None
    assert book.copies_available == 3
    assert book.status == BookStatus.AVAILABLE
    assert book.language == "English"
    assert book.version == 1


def test_create_book_with_no_shelf_copies_is_borrowed(book_service, book_data):
    book = book_service.create_book(dict(book_data, copies_available=0))
    assert book.status == BookStatus.BORROWED


@pytest.mark.parametrize("changes,message", [
    ({"isbn": "not-an-isbn"}, "Invalid ISBN"),
    ({"publication_date": date(2024, 6, 16)}, "cannot be in the future"),
    ({"copies_available": 4}, "cannot exceed total copies"),
    ({"total_copies": 0}, "at least 1"),
    ({"status": BookStatus.BORROWED}, "cannot be marked BORROWED"),
])
def test_create_book_validation(book_service, book_data, changes, message):
    with pytest.raises(InvalidArgumentError, match=message):
        book_service.create_book(dict(book_data, **changes))


def test_create_book_duplicate_isbn(book_service, book_data):
    book_service.create_book(book_data)
    with pytest.raises(InvalidArgumentError, match="already exists"):
        book_service.create_book(dict(book_data, title="Another"))


def test_isbn_of_deleted_book_can_be_reused(book_service, book_data):
    first = book_service.create_book(book_data)
    book_service.delete_book(first.id)
    second = book_service.create_book(book_data)
    assert second.id != first.id


def test_get_book_not_found(book_service):
    with pytest.raises(BookNotFoundError, match="Book not found with ID: 42"):
        book_service.get_book(42)
    with pytest.raises(BookNotFoundError):
        book_service.get_book_by_isbn("9780306406157")


def test_update_book_fields(book_service, sample_book):
    book = book_service.update_book(sample_book.id, {"title": "Dune Messiah", "pages": 256})
    assert book.title == "Dune Messiah"
    assert book.pages == 256
    assert book.version == 2


def test_update_book_total_copies_goes_through_inventory(book_service, book_factory, sample_patron, clock):
    book = book_factory(isbn="0306406152", total_copies=3)
    LendingService(book_service.session, today=clock).borrow_book(sample_patron.id, book.id)

    grown = book_service.update_book(book.id, {"total_copies": 5})
    assert (grown.total_copies, grown.copies_available) == (5, 4)

    shrunk = book_service.update_book(book.id, {"total_copies": 1})
    assert (shrunk.total_copies, shrunk.copies_available) == (1, 0)
    assert shrunk.status == BookStatus.BORROWED


def test_update_book_duplicate_isbn(book_service, multiple_books):
    with pytest.raises(InvalidArgumentError, match="already exists"):
        book_service.update_book(multiple_books[0].id, {"isbn": multiple_books[1].isbn})


def test_update_status_must_match_shelf(book_service, sample_book):
    assert book_service.update_book(sample_book.id, {"status": BookStatus.MAINTENANCE}).status == BookStatus.MAINTENANCE
    with pytest.raises(InvalidArgumentError):
        book_service.update_book(sample_book.id, {"status": BookStatus.BORROWED})


def test_delete_book(book_service, sample_book):
    book_service.delete_book(sample_book.id)
    assert sample_book.deleted
    with pytest.raises(BookNotFoundError):
        book_service.get_book(sample_book.id)


def test_delete_book_with_active_loan(book_service, sample_book, sample_patron, clock):
    lending = LendingService(book_service.session, today=clock)
    record = lending.borrow_book(sample_patron.id, sample_book.id)

    with pytest.raises(ConflictError, match="active borrowing records"):
        book_service.delete_book(sample_book.id)

    lending.return_book(record.id)
    book_service.delete_book(sample_book.id)


def test_add_and_remove_copies(book_service, sample_book):
    book = book_service.add_copies(sample_book.id, 4)
    assert (book.total_copies, book.copies_available) == (5, 5)
    book = book_service.remove_copies(sample_book.id, 4)
    assert (book.total_copies, book.copies_available) == (1, 1)


@pytest.mark.parametrize("count", [0, -3])
def test_copy_adjustments_must_be_positive(book_service, sample_book, count):
    with pytest.raises(InvalidArgumentError, match="positive"):
        book_service.add_copies(sample_book.id, count)
    with pytest.raises(InvalidArgumentError, match="positive"):
        book_service.remove_copies(sample_book.id, count)


def test_remove_copies_on_loan_fails(book_service, book_factory, patron_factory, clock, db_session):
    book = book_factory(isbn="0306406152", total_copies=5)
    lending = LendingService(db_session, today=clock)
    for i in range(3):
        lending.borrow_book(patron_factory(username=f"reader{i}").id, book.id)

    with pytest.raises(InvalidArgumentError, match="than available copies"):
        book_service.remove_copies(book.id, 3)

    db_session.refresh(book)
    assert (book.total_copies, book.copies_available) == (5, 2)


def test_copy_adjustment_on_missing_book(book_service):
    with pytest.raises(BookNotFoundError):
        book_service.add_copies(9999, 1)


def test_range_queries_validate_order(book_service):
    with pytest.raises(InvalidArgumentError):
        book_service.by_price_range(20, 10)
    with pytest.raises(InvalidArgumentError):
        book_service.by_publication_date_range(date(2020, 1, 1), date(2019, 1, 1))


def test_low_availability_uses_configured_threshold(book_service, multiple_books):
    assert len(book_service.low_availability()) == 4
    assert len(book_service.low_availability(2)) == 1


def test_statistics(book_service, multiple_books, sample_patron, record_factory, today, db_session):
    multiple_books[0].borrow_copy()
    db_session.commit()
    record_factory(sample_patron, multiple_books[0], today - timedelta(days=30), today - timedelta(days=16))

    stats = book_service.statistics()
    assert stats["total_books"] == 5
    assert stats["available_books"] == 4
    assert stats["borrowed_books"] == 1
    assert stats["overdue_books"] == 1
    assert stats["books_needing_restock"] == 1
    assert stats["average_availability_percentage"] == 80.0


def test_statistics_on_empty_catalog(book_service):
    stats = book_service.statistics()
    assert stats["total_books"] == 0
    assert stats["average_availability_percentage"] == 0.0
