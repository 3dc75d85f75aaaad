# tests/test_sa/test_repositories/test_borrowing_repository.py
import pytest
from datetime import timedelta
from lending.sa.models import BorrowingStatus
from lending.sa.repositories import BorrowingRecordRepository


@pytest.fixture
def record_repo(db_session):
    """Fixture to create a BorrowingRecordRepository instance"""
    return BorrowingRecordRepository(db_session)


@pytest.fixture
def ledger(sample_patron, faculty_patron, multiple_books, record_factory, today):
    """Four loans: overdue, due tomorrow, due in ten days (renewed twice) and returned with a paid fine"""
    return {
        "overdue": record_factory(
            sample_patron, multiple_books[0], today - timedelta(days=20), today - timedelta(days=6)
        ),
        "due_soon": record_factory(
            sample_patron, multiple_books[1], today - timedelta(days=13), today + timedelta(days=1)
        ),
        "exhausted": record_factory(
            faculty_patron, multiple_books[2], today - timedelta(days=4), today + timedelta(days=10),
            renewal_count=2,
        ),
        "returned": record_factory(
            faculty_patron, multiple_books[0], today - timedelta(days=30), today - timedelta(days=16),
            status=BorrowingStatus.RETURNED, actual_return_date=today - timedelta(days=14),
            fine_amount=2.0, fine_paid_date=today - timedelta(days=14),
        ),
    }


def test_active_and_counts(record_repo, ledger, sample_patron, faculty_patron):
    assert len(record_repo.get_active()) == 3
    assert record_repo.count_active_for_patron(sample_patron.id) == 2
    assert record_repo.count_active_for_patron(faculty_patron.id) == 1
    assert record_repo.count_by_status(BorrowingStatus.RETURNED) == 1


def test_overdue_due_soon_and_renewable(record_repo, ledger, today):
    assert record_repo.get_overdue(today) == [ledger["overdue"]]
    assert record_repo.get_due_soon(today, 3) == [ledger["due_soon"]]
    assert record_repo.get_renewable(today) == [ledger["due_soon"]]


def test_history_is_newest_first(record_repo, ledger, multiple_books):
    items, total = record_repo.get_history_for_book(multiple_books[0].id)
    assert total == 2
    assert items == [ledger["overdue"], ledger["returned"]]


def test_search_records(record_repo, ledger, faculty_patron):
    items, total = record_repo.search_records(patron_id=faculty_patron.id, status=BorrowingStatus.BORROWED)
    assert total == 1
    assert items == [ledger["exhausted"]]


def test_date_ranges(record_repo, ledger, today):
    borrowed = record_repo.get_borrowed_between(today - timedelta(days=14), today)
    assert set(borrowed) == {ledger["due_soon"], ledger["exhausted"]}
    assert record_repo.get_returned_between(today - timedelta(days=15), today) == [ledger["returned"]]


def test_fine_totals(record_repo, ledger, db_session):
    ledger["overdue"].fine_amount = 4.5
    db_session.commit()
    assert record_repo.sum_fines(paid=True) == 2.0
    assert record_repo.sum_fines(paid=False) == 4.5
    assert record_repo.get_with_outstanding_fines() == [ledger["overdue"]]


def test_loaded_records_carry_patron_and_book(record_repo, ledger):
    record = record_repo.get_by_id(ledger["due_soon"].id)
    assert record.patron.username == "jdoe"
    assert record.book.title == "Test Book 1"
