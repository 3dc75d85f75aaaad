# lending/policies.py
from typing import Dict, NamedTuple

from lending.enums import PatronRole, PatronStatus

# Flat fine charged per overdue day when a late book comes back
DAILY_FINE_RATE = 1.0

DEFAULT_MAX_RENEWALS = 2


class BorrowingPolicy(NamedTuple):
    max_books: int
    loan_period_days: int


ROLE_POLICIES: Dict[PatronRole, BorrowingPolicy] = {
    PatronRole.STUDENT: BorrowingPolicy(max_books=5, loan_period_days=14),
    PatronRole.FACULTY: BorrowingPolicy(max_books=10, loan_period_days=30),
    PatronRole.LIBRARIAN: BorrowingPolicy(max_books=15, loan_period_days=60),
    PatronRole.ADMIN: BorrowingPolicy(max_books=15, loan_period_days=60),
    PatronRole.GUEST: BorrowingPolicy(max_books=0, loan_period_days=0),
}

BORROWING_ROLES = frozenset({PatronRole.STUDENT, PatronRole.FACULTY})


def policy_for(role: PatronRole) -> BorrowingPolicy:
    return ROLE_POLICIES.get(PatronRole(role), BorrowingPolicy(0, 0))


def max_books_allowed(role: PatronRole) -> int:
    return policy_for(role).max_books


def loan_period_days(role: PatronRole) -> int:
    return policy_for(role).loan_period_days


def can_borrow(role: PatronRole, status: PatronStatus) -> bool:
    """Only active students and faculty may take books out"""
    return PatronStatus(status) == PatronStatus.ACTIVE and PatronRole(role) in BORROWING_ROLES
