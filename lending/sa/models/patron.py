# lending/sa/models/patron.py
from datetime import date
from typing import Optional
from sqlalchemy import Integer, String, Date, Enum as SAEnum, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from lending import policies
from .base import Base, AuditMixin
from lending.enums import PatronRole, PatronStatus


class Patron(Base, AuditMixin):
    __tablename__ = 'patrons'

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(15), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[PatronRole] = mapped_column(
        SAEnum(PatronRole, native_enum=False, length=20), nullable=False, default=PatronRole.STUDENT
    )
    status: Mapped[PatronStatus] = mapped_column(
        SAEnum(PatronStatus, native_enum=False, length=20), nullable=False, default=PatronStatus.ACTIVE
    )
    student_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    profile_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    # Advanced whenever the patron's set of loans changes; see mark_loans_changed
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Relationships
    borrowing_records = relationship(
        'BorrowingRecord', back_populates='patron', order_by='desc(BorrowingRecord.borrowed_date)'
    )

    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}

    __table_args__ = (
        Index('idx_patrons_email', 'email'),
        Index('idx_patrons_username', 'username'),
        Index('idx_patrons_role_status', 'role', 'status'),
    )

    def __init__(self, **kwargs):
        kwargs.setdefault('role', PatronRole.STUDENT)
        kwargs.setdefault('status', PatronStatus.ACTIVE)
        kwargs.setdefault('version', 1)
        super().__init__(**kwargs)

    def mark_loans_changed(self) -> None:
        """Advance the version so a concurrent writer still holding the old one fails to flush.

        Borrows of different books lock different book rows, so they contend on the
        patron row instead.
        """
        self.version += 1

    def __repr__(self) -> str:
        return f"<Patron id={self.id} username={self.username!r} {self.role}/{self.status}>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == PatronStatus.ACTIVE

    @property
    def is_librarian(self) -> bool:
        return self.role in (PatronRole.LIBRARIAN, PatronRole.ADMIN)

    @property
    def is_admin(self) -> bool:
        return self.role == PatronRole.ADMIN

    def age(self, today: Optional[date] = None) -> int:
        today = today or date.today()
        return today.year - self.date_of_birth.year

    @property
    def can_borrow_books(self) -> bool:
        return policies.can_borrow(self.role, self.status)

    @property
    def max_books_allowed(self) -> int:
        return policies.max_books_allowed(self.role)

    @property
    def borrowing_period_days(self) -> int:
        return policies.loan_period_days(self.role)
