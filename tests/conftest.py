# tests/conftest.py
import sys
import pytest
from datetime import date
from decimal import Decimal
from pathlib import Path
from sqlalchemy.sql import text

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from sqlalchemy.orm import Session
from lending.passwords import hash_password
from lending.sa.database import Database
from lending.sa.models import Base, Book, Patron, BorrowingRecord, PatronRole, PatronStatus

FIXED_TODAY = date(2024, 6, 15)


def fixed_clock() -> date:
    return FIXED_TODAY


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory):
    """Create a temporary directory for the test database."""
    test_dir = tmp_path_factory.mktemp("test_db")
    return str(test_dir / "test_library.db")


@pytest.fixture(scope="session")
def database(test_db_path):
    """Create a test database instance"""
    db = Database(f"sqlite:///{test_db_path}")

    # Drop all tables and recreate schema
    Base.metadata.drop_all(db.engine)
    Base.metadata.create_all(db.engine)

    yield db

    db.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test"""
    session: Session = database.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def cleanup_db(db_session):
    """Clean up database tables before each test"""
    # Delete in reverse order of dependencies
    db_session.execute(text("DELETE FROM borrowing_records"))
    db_session.execute(text("DELETE FROM books"))
    db_session.execute(text("DELETE FROM patrons"))
    db_session.commit()
    yield
    db_session.rollback()


def make_book(db_session, isbn="9780441172719", title="Dune", total_copies=1, **kwargs):
    fields = dict(
        title=title,
        author="Frank Herbert",
        isbn=isbn,
        publisher="Ace",
        publication_date=date(1965, 8, 1),
        category="Fiction",
        pages=412,
        price=Decimal("9.99"),
        total_copies=total_copies,
    )
    fields.update(kwargs)
    book = Book(**fields)
    db_session.add(book)
    db_session.commit()
    return book


def make_patron(db_session, username="jdoe", role=PatronRole.STUDENT, status=PatronStatus.ACTIVE, **kwargs):
    fields = dict(
        first_name="Jane",
        last_name="Doe",
        email=f"{username}@example.com",
        phone_number="5551234567",
        date_of_birth=date(2000, 1, 1),
        address="12 Library Lane, Springfield",
        username=username,
        password_hash=hash_password("password123"),
        role=role,
        status=status,
    )
    fields.update(kwargs)
    patron = Patron(**fields)
    db_session.add(patron)
    db_session.commit()
    return patron


def make_record(db_session, patron, book, borrowed_date, expected_return_date, **kwargs):
    """Insert a loan row directly, without touching the book's copy counters"""
    record = BorrowingRecord(
        patron=patron,
        book=book,
        borrowed_date=borrowed_date,
        expected_return_date=expected_return_date,
        **kwargs
    )
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture
def sample_book(db_session):
    """Create a sample single-copy book for testing."""
    return make_book(db_session)


@pytest.fixture
def sample_patron(db_session):
    """Create a sample active student for testing."""
    return make_patron(db_session)


@pytest.fixture
def faculty_patron(db_session):
    return make_patron(db_session, username="prof_smith", role=PatronRole.FACULTY, first_name="Alan", last_name="Smith")


@pytest.fixture
def multiple_books(db_session):
    """Create five books in two categories for testing."""
    isbns = ["9780306406157", "9780140449136", "9780143039433", "9780316769488", "9780061120084"]
    books = []
    for i, isbn in enumerate(isbns):
        books.append(make_book(
            db_session,
            isbn=isbn,
            title=f"Test Book {i}",
            author=f"Test Author {i}",
            category="History" if i % 2 else "Science",
            total_copies=i + 1,
            language="French" if i == 4 else "English",
            price=Decimal(10 + i),
            publication_date=date(2000 + i, 1, 1),
        ))
    return books


@pytest.fixture
def today():
    """The fixed date every service under test treats as today"""
    return FIXED_TODAY


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def book_factory(db_session):
    def factory(**kwargs):
        return make_book(db_session, **kwargs)
    return factory


@pytest.fixture
def patron_factory(db_session):
    def factory(**kwargs):
        return make_patron(db_session, **kwargs)
    return factory


@pytest.fixture
def record_factory(db_session):
    def factory(patron, book, borrowed_date, expected_return_date, **kwargs):
        return make_record(db_session, patron, book, borrowed_date, expected_return_date, **kwargs)
    return factory
