# api/dependencies.py
from datetime import date
from typing import Callable
from fastapi import Depends
from sqlalchemy.orm import Session
from lending.sa.database import get_db
from lending.services import BookService, PatronService, LendingService


def get_clock() -> Callable[[], date]:
    """Source of "today" for every service; tests override it with a fixed date"""
    return date.today


def get_book_service(db: Session = Depends(get_db), clock=Depends(get_clock)) -> BookService:
    return BookService(db, today=clock)


def get_patron_service(db: Session = Depends(get_db), clock=Depends(get_clock)) -> PatronService:
    return PatronService(db, today=clock)


def get_lending_service(db: Session = Depends(get_db), clock=Depends(get_clock)) -> LendingService:
    return LendingService(db, today=clock)
