# lending/enums.py
from enum import Enum


class BookStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    BORROWED = "BORROWED"
    RESERVED = "RESERVED"
    MAINTENANCE = "MAINTENANCE"   # Under maintenance
    LOST = "LOST"
    DAMAGED = "DAMAGED"


class PatronRole(str, Enum):
    ADMIN = "ADMIN"
    LIBRARIAN = "LIBRARIAN"
    STUDENT = "STUDENT"
    FACULTY = "FACULTY"
    GUEST = "GUEST"


class PatronStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    BANNED = "BANNED"


class BorrowingStatus(str, Enum):
    BORROWED = "BORROWED"
    RETURNED = "RETURNED"
    OVERDUE = "OVERDUE"
    LOST = "LOST"
    DAMAGED = "DAMAGED"


DISPLAY_NAMES = {
    BookStatus.MAINTENANCE: "Under Maintenance",
    PatronRole.ADMIN: "Administrator",
}


def display_name(value: Enum) -> str:
    """Human readable label, e.g. ``Under Maintenance`` for ``MAINTENANCE``"""
    return DISPLAY_NAMES.get(value, value.value.capitalize())
