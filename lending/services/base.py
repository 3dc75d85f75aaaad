# lending/services/base.py
import logging
from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterator
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from lending.exceptions import ConflictError

logger = logging.getLogger(__name__)


class BaseService:
    """Common wiring for services: a session, a clock and the transaction boundary."""

    def __init__(self, session: Session, today: Callable[[], date] = date.today):
        """
        Args:
            session: SQLAlchemy session the service commits or rolls back
            today: Clock returning the current date; injectable for tests
        """
        self.session = session
        self._today = today

    def today(self) -> date:
        return self._today()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Run the enclosed mutations as one unit: all of them commit or none do."""
        try:
            yield self.session
            self.session.commit()
        except StaleDataError as e:
            self.session.rollback()
            logger.warning("Concurrent modification detected: %s", e)
            raise ConflictError("The record was modified by another request; reload and try again") from e
        except Exception:
            self.session.rollback()
            raise
