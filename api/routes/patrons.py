# api/routes/patrons.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_patron_service, get_lending_service
from api.schemas.patron import Patron, PatronCreate, PatronUpdate, PatronList
from api.schemas.borrowing import BorrowingRecord, BorrowingRecordList
from lending.enums import PatronRole, PatronStatus
from lending.services import PatronService, LendingService

router = APIRouter(prefix="/patrons", tags=["patrons"])


def _patrons(patrons) -> List[Patron]:
    return [Patron.model_validate(patron) for patron in patrons]


@router.post("", response_model=Patron, status_code=status.HTTP_201_CREATED)
def register_patron(payload: PatronCreate, service: PatronService = Depends(get_patron_service)):
    return Patron.model_validate(service.register_patron(payload.model_dump()))


@router.get("", response_model=PatronList)
def get_patrons(
    query: Optional[str] = Query(None, description="Search patrons by name, email or username"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    service: PatronService = Depends(get_patron_service)
):
    """
    Get a paginated list of patrons with optional search.

    Args:
        query: Optional search string matched against names, email and username
        page: Page number (1-based)
        size: Number of items per page

    Returns:
        PatronList containing one page of patrons and the total count
    """
    patrons, total = service.search_patrons(query, page=page, size=size)
    return PatronList(items=_patrons(patrons), total=total, page=page, size=size)


@router.get("/by-email", response_model=Patron)
def get_patron_by_email(email: str = Query(...), service: PatronService = Depends(get_patron_service)):
    return Patron.model_validate(service.get_by_email(email))


@router.get("/by-username", response_model=Patron)
def get_patron_by_username(username: str = Query(...), service: PatronService = Depends(get_patron_service)):
    return Patron.model_validate(service.get_by_username(username))


@router.get("/role/{role}", response_model=List[Patron])
def get_patrons_by_role(role: PatronRole, service: PatronService = Depends(get_patron_service)):
    return _patrons(service.by_role(role))


@router.get("/status/{patron_status}", response_model=List[Patron])
def get_patrons_by_status(patron_status: PatronStatus, service: PatronService = Depends(get_patron_service)):
    return _patrons(service.by_status(patron_status))


@router.get("/can-borrow", response_model=List[Patron])
def get_patrons_who_can_borrow(service: PatronService = Depends(get_patron_service)):
    return _patrons(service.patrons_who_can_borrow())


@router.get("/with-overdue", response_model=List[Patron])
def get_patrons_with_overdue_books(service: PatronService = Depends(get_patron_service)):
    return _patrons(service.patrons_with_overdue_books())


@router.get("/with-fines", response_model=List[Patron])
def get_patrons_with_outstanding_fines(service: PatronService = Depends(get_patron_service)):
    return _patrons(service.patrons_with_outstanding_fines())


@router.get("/{patron_id}", response_model=Patron)
def get_patron(patron_id: int, service: PatronService = Depends(get_patron_service)):
    return Patron.model_validate(service.get_patron(patron_id))


@router.put("/{patron_id}", response_model=Patron)
def update_patron(patron_id: int, payload: PatronUpdate, service: PatronService = Depends(get_patron_service)):
    return Patron.model_validate(service.update_patron(patron_id, payload.model_dump(exclude_unset=True)))


@router.delete("/{patron_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patron(patron_id: int, service: PatronService = Depends(get_patron_service)):
    service.delete_patron(patron_id)


@router.get("/{patron_id}/loans", response_model=BorrowingRecordList)
def get_patron_loans(
    patron_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    service: LendingService = Depends(get_lending_service)
):
    """Loan history of one patron, newest first"""
    records, total = service.records_for_patron(patron_id, page=page, size=size)
    today = service.today()
    return BorrowingRecordList(
        items=[BorrowingRecord.from_record(record, today) for record in records],
        total=total, page=page, size=size
    )
