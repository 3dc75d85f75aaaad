# lending/services/patron_service.py
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from lending.exceptions import ConflictError, InvalidArgumentError, PatronNotFoundError
from lending.passwords import hash_password
from lending.sa.models import Patron, PatronRole, PatronStatus
from lending.sa.repositories import PatronRepository, BorrowingRecordRepository
from lending.validators import is_valid_email, is_valid_phone, is_valid_username
from .base import BaseService

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "first_name", "last_name", "email", "phone_number", "date_of_birth", "address",
    "username", "role", "status", "student_id", "department", "profile_image_url",
)


class PatronService(BaseService):
    """Registration and profile maintenance for library patrons."""

    def __init__(self, session, today=date.today):
        super().__init__(session, today)
        self.patrons = PatronRepository(session)
        self.records = BorrowingRecordRepository(session)

    def register_patron(self, data: Dict[str, Any]) -> Patron:
        """Register a new patron.

        Raises:
            InvalidArgumentError: If a field is malformed or the email/username is taken
        """
        logger.info("Registering patron with username: %s", data.get("username"))
        self._validate(data)
        password = data.get("password")
        if not password or len(password) < 8:
            raise InvalidArgumentError("Password must be at least 8 characters long")
        self._ensure_unique(email=data.get("email"), username=data.get("username"))

        fields = self._normalize(data)
        patron = Patron(password_hash=hash_password(password), **fields)
        with self.transaction():
            self.patrons.add(patron)

        logger.info("Successfully registered patron with ID: %s", patron.id)
        return patron

    def get_patron(self, patron_id: int) -> Patron:
        patron = self.patrons.get_by_id(patron_id)
        if patron is None:
            raise PatronNotFoundError(f"Patron not found with ID: {patron_id}")
        return patron

    def get_by_email(self, email: str) -> Patron:
        patron = self.patrons.get_by_email(email)
        if patron is None:
            raise PatronNotFoundError(f"Patron not found with email: {email}")
        return patron

    def get_by_username(self, username: str) -> Patron:
        patron = self.patrons.get_by_username(username)
        if patron is None:
            raise PatronNotFoundError(f"Patron not found with username: {username}")
        return patron

    def update_patron(self, patron_id: int, data: Dict[str, Any]) -> Patron:
        logger.info("Updating patron with ID: %s", patron_id)
        patron = self.get_patron(patron_id)
        self._validate(data)
        self._ensure_unique(
            email=data.get("email") if data.get("email") and data["email"].lower() != patron.email.lower() else None,
            username=data.get("username") if data.get("username") and data["username"] != patron.username else None,
        )

        with self.transaction():
            for key, value in self._normalize(data).items():
                setattr(patron, key, value)
            if data.get("password"):
                if len(data["password"]) < 8:
                    raise InvalidArgumentError("Password must be at least 8 characters long")
                patron.password_hash = hash_password(data["password"])

        logger.info("Successfully updated patron with ID: %s", patron.id)
        return patron

    def delete_patron(self, patron_id: int) -> None:
        """Soft delete a patron who has nothing out on loan"""
        logger.info("Deleting patron with ID: %s", patron_id)
        with self.transaction():
            patron = self.patrons.get_for_update(patron_id)
            if patron is None:
                raise PatronNotFoundError(f"Patron not found with ID: {patron_id}")
            if self.records.count_active_for_patron(patron.id) > 0:
                logger.warning("Refusing to delete patron %s: books still on loan", patron_id)
                raise ConflictError("Cannot delete patron with active borrowing records")
            patron.soft_delete()
            patron.mark_loans_changed()
        logger.info("Successfully deleted patron with ID: %s", patron_id)

    def search_patrons(self, term: Optional[str] = None, page: int = 1, size: int = 20) -> Tuple[List[Patron], int]:
        return self.patrons.search_patrons(term, page=page, size=size)

    def by_role(self, role: PatronRole) -> List[Patron]:
        return self.patrons.get_by_role(PatronRole(role))

    def by_status(self, status: PatronStatus) -> List[Patron]:
        return self.patrons.get_by_status(PatronStatus(status))

    def patrons_who_can_borrow(self) -> List[Patron]:
        return self.patrons.get_patrons_who_can_borrow()

    def patrons_with_overdue_books(self) -> List[Patron]:
        return self.patrons.get_patrons_with_overdue_books(self.today())

    def patrons_with_outstanding_fines(self) -> List[Patron]:
        return self.patrons.get_patrons_with_outstanding_fines()

    def count_by_role(self) -> Dict[str, int]:
        return {role.value: self.patrons.count_by_role(role) for role in PatronRole}

    def count_by_status(self) -> Dict[str, int]:
        return {status.value: self.patrons.count_by_status(status) for status in PatronStatus}

    @staticmethod
    def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
        fields = {key: data[key] for key in PROFILE_FIELDS if data.get(key) is not None}
        if "role" in fields:
            fields["role"] = PatronRole(fields["role"])
        if "status" in fields:
            fields["status"] = PatronStatus(fields["status"])
        return fields

    def _ensure_unique(self, email: Optional[str] = None, username: Optional[str] = None) -> None:
        if email and self.patrons.get_by_email(email):
            raise InvalidArgumentError(f"Patron with email {email} already exists")
        if username and self.patrons.get_by_username(username):
            raise InvalidArgumentError(f"Patron with username {username} already exists")

    def _validate(self, data: Dict[str, Any]) -> None:
        if data.get("email") is not None and not is_valid_email(data["email"]):
            raise InvalidArgumentError("Email should be valid")
        if data.get("username") is not None and not is_valid_username(data["username"]):
            raise InvalidArgumentError(
                "Username must be 3-50 characters of letters, numbers, and underscores"
            )
        if data.get("phone_number") is not None and not is_valid_phone(data["phone_number"]):
            raise InvalidArgumentError("Phone number should be valid")
        date_of_birth = data.get("date_of_birth")
        if date_of_birth is not None and date_of_birth >= self.today():
            raise InvalidArgumentError("Date of birth must be in the past")
