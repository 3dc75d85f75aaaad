# lending/sa/repositories/patron.py
from datetime import date
from typing import Optional, List, Tuple
from sqlalchemy import func, or_, exists
from lending.policies import BORROWING_ROLES
from lending.sa.models import Patron, PatronRole, PatronStatus, BorrowingRecord, BorrowingStatus
from .base import BaseRepository


class PatronRepository(BaseRepository[Patron]):
    """Repository for managing Patron entities."""
    model = Patron

    def get_by_email(self, email: str) -> Optional[Patron]:
        """Get a live patron by email, ignoring case"""
        return self.query().filter(func.lower(Patron.email) == email.lower()).first()

    def get_by_username(self, username: str) -> Optional[Patron]:
        return self.query().filter(Patron.username == username).first()

    def search_patrons(self, term: Optional[str] = None, page: int = 1, size: int = 20) -> Tuple[List[Patron], int]:
        """Search patrons by name, email or username.

        Args:
            term: Case-insensitive substring; all patrons when empty
            page: Page number (1-based)
            size: Number of patrons per page

        Returns:
            Tuple of (patrons on the page, total matches)
        """
        query = self.query()
        if term and term.strip():
            pattern = f"%{term.strip()}%"
            query = query.filter(
                or_(
                    Patron.first_name.ilike(pattern),
                    Patron.last_name.ilike(pattern),
                    Patron.email.ilike(pattern),
                    Patron.username.ilike(pattern),
                )
            )
        return self.paginate(query.order_by(Patron.last_name, Patron.first_name), page, size)

    def get_by_role(self, role: PatronRole) -> List[Patron]:
        return self.query().filter(Patron.role == role).order_by(Patron.last_name).all()

    def get_by_status(self, status: PatronStatus) -> List[Patron]:
        return self.query().filter(Patron.status == status).order_by(Patron.last_name).all()

    def get_patrons_who_can_borrow(self) -> List[Patron]:
        return (
            self.query()
            .filter(Patron.status == PatronStatus.ACTIVE, Patron.role.in_(list(BORROWING_ROLES)))
            .order_by(Patron.last_name)
            .all()
        )

    def get_patrons_with_overdue_books(self, today: date) -> List[Patron]:
        overdue_loan = exists().where(
            BorrowingRecord.patron_id == Patron.id,
            BorrowingRecord.deleted.is_(False),
            BorrowingRecord.status == BorrowingStatus.BORROWED,
            BorrowingRecord.expected_return_date < today,
        )
        return self.query().filter(overdue_loan).order_by(Patron.last_name).all()

    def get_patrons_with_outstanding_fines(self) -> List[Patron]:
        unpaid_fine = exists().where(
            BorrowingRecord.patron_id == Patron.id,
            BorrowingRecord.deleted.is_(False),
            BorrowingRecord.fine_amount > 0,
            BorrowingRecord.fine_paid_date.is_(None),
        )
        return self.query().filter(unpaid_fine).order_by(Patron.last_name).all()

    def count_by_role(self, role: PatronRole) -> int:
        return self.query().filter(Patron.role == role).count()

    def count_by_status(self, status: PatronStatus) -> int:
        return self.query().filter(Patron.status == status).count()
