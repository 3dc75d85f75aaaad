# lending/sa/repositories/base.py
from typing import TypeVar, Generic, Optional, List, Tuple, Type
from sqlalchemy.orm import Session, Query
from lending.sa.models import Base

T = TypeVar('T', bound=Base)


class BaseRepository(Generic[T]):
    """Shared plumbing for repositories over soft-deletable models.

    Repositories never commit; the service calling them owns the transaction.
    """
    model: Type[T]

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def query(self) -> Query:
        """Query over live (not soft-deleted) rows only"""
        return self.session.query(self.model).filter(self.model.deleted.is_(False))

    def get_by_id(self, entity_id: int) -> Optional[T]:
        return self.query().filter(self.model.id == entity_id).first()

    def get_for_update(self, entity_id: int) -> Optional[T]:
        """Load a live row with a row lock (``SELECT ... FOR UPDATE`` where supported),
        refreshing any copy already held by the session"""
        return (
            self.session.query(self.model)
            .filter(self.model.deleted.is_(False), self.model.id == entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
            .first()
        )

    def count(self) -> int:
        return self.query().count()

    def add(self, entity: T) -> T:
        self.session.add(entity)
        self.session.flush()
        return entity

    def paginate(self, query: Query, page: int = 1, size: int = 20) -> Tuple[List[T], int]:
        """Return one page of ``query`` together with the total number of matches"""
        total = query.order_by(None).count()
        items = query.offset((page - 1) * size).limit(size).all()
        return items, total
