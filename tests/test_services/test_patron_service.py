# tests/test_services/test_patron_service.py
import pytest
from datetime import date
from lending.exceptions import ConflictError, InvalidArgumentError, PatronNotFoundError
from lending.passwords import verify_password
from lending.sa.models import PatronRole, PatronStatus
from lending.services import PatronService, LendingService


@pytest.fixture
def patron_service(db_session, clock):
    return PatronService(db_session, today=clock)


@pytest.fixture
def patron_data():
    return {
        "first_name": "Grace",
        "last_name": "Hopper",
        "email": "grace@example.com",
        "phone_number": "+15551234567",
        "date_of_birth": date(1990, 12, 9),
        "address": "1 Harbour Road, Arlington",
        "username": "ghopper",
        "password": "cobol-rules",
        "role": "FACULTY",
    }


def test_register_patron(patron_service, patron_data):
    patron = patron_service.register_patron(patron_data)
    assert patron.id is not None
    assert patron.role == PatronRole.FACULTY
    assert patron.status == PatronStatus.ACTIVE
    assert patron.password_hash != "cobol-rules"
    assert verify_password("cobol-rules", patron.password_hash)
    assert not verify_password("wrong-password", patron.password_hash)


@pytest.mark.parametrize("changes,message", [
    ({"email": "not-an-email"}, "Email"),
    ({"username": "no spaces"}, "Username"),
    ({"phone_number": "12345"}, "Phone"),
    ({"date_of_birth": date(2024, 6, 15)}, "in the past"),
    ({"password": "short"}, "at least 8"),
])
def test_register_patron_validation(patron_service, patron_data, changes, message):
    with pytest.raises(InvalidArgumentError, match=message):
        patron_service.register_patron(dict(patron_data, **changes))


def test_register_duplicate_email_or_username(patron_service, patron_data, sample_patron):
    with pytest.raises(InvalidArgumentError, match="email"):
        patron_service.register_patron(dict(patron_data, email="JDOE@example.com"))
    with pytest.raises(InvalidArgumentError, match="username"):
        patron_service.register_patron(dict(patron_data, username="jdoe"))


def test_lookups(patron_service, sample_patron):
    assert patron_service.get_by_email("jdoe@example.com").id == sample_patron.id
    assert patron_service.get_by_username("jdoe").id == sample_patron.id
    with pytest.raises(PatronNotFoundError):
        patron_service.get_patron(9999)
    with pytest.raises(PatronNotFoundError):
        patron_service.get_by_username("ghost")


def test_update_patron(patron_service, sample_patron):
    patron = patron_service.update_patron(sample_patron.id, {
        "status": "SUSPENDED",
        "department": "Physics",
        "password": "new-password",
    })
    assert patron.status == PatronStatus.SUSPENDED
    assert patron.department == "Physics"
    assert not patron.can_borrow_books
    assert verify_password("new-password", patron.password_hash)


def test_update_patron_keeps_own_email(patron_service, sample_patron):
    patron = patron_service.update_patron(sample_patron.id, {"email": "JDoe@example.com"})
    assert patron.email == "JDoe@example.com"


def test_update_patron_duplicate_username(patron_service, sample_patron, faculty_patron):
    with pytest.raises(InvalidArgumentError, match="already exists"):
        patron_service.update_patron(sample_patron.id, {"username": faculty_patron.username})


def test_delete_patron(patron_service, sample_patron, sample_book, clock):
    lending = LendingService(patron_service.session, today=clock)
    record = lending.borrow_book(sample_patron.id, sample_book.id)

    with pytest.raises(ConflictError):
        patron_service.delete_patron(sample_patron.id)

    lending.return_book(record.id)
    patron_service.delete_patron(sample_patron.id)
    with pytest.raises(PatronNotFoundError):
        patron_service.get_patron(sample_patron.id)


def test_counts(patron_service, patron_factory, sample_patron, faculty_patron):
    patron_factory(username="guest1", role=PatronRole.GUEST, status=PatronStatus.INACTIVE)
    assert patron_service.count_by_role() == {
        "ADMIN": 0, "LIBRARIAN": 0, "STUDENT": 1, "FACULTY": 1, "GUEST": 1,
    }
    assert patron_service.count_by_status()["INACTIVE"] == 1
    assert len(patron_service.patrons_who_can_borrow()) == 2
