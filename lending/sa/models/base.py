# lending/sa/models/base.py
from datetime import datetime, UTC
from sqlalchemy.orm import DeclarativeBase, mapped_column, Mapped
from sqlalchemy import Boolean, DateTime, Integer


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all models"""
    pass


class AuditMixin:
    """Identity and audit columns contributed to each model's own table.

    Every table gets its own ``id``, ``created_at``, ``updated_at`` and
    ``deleted`` columns. Rows are never physically removed; ``deleted`` hides
    them from every repository read path.
    """
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def soft_delete(self) -> None:
        self.deleted = True
