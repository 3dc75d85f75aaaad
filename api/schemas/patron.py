# api/schemas/patron.py
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from lending.enums import PatronRole, PatronStatus


class PatronBase(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=255)
    phone_number: str = Field(pattern=r"^[+]?[0-9]{10,15}$")
    date_of_birth: date
    address: str = Field(min_length=10, max_length=500)
    username: str = Field(min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_]+$")
    student_id: Optional[str] = Field(default=None, max_length=50)
    department: Optional[str] = Field(default=None, max_length=100)
    profile_image_url: Optional[str] = Field(default=None, max_length=500)


class PatronCreate(PatronBase):
    password: str = Field(min_length=8)
    role: PatronRole = PatronRole.STUDENT


class PatronUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    phone_number: Optional[str] = Field(default=None, pattern=r"^[+]?[0-9]{10,15}$")
    date_of_birth: Optional[date] = None
    address: Optional[str] = Field(default=None, min_length=10, max_length=500)
    username: Optional[str] = Field(default=None, min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_]+$")
    password: Optional[str] = Field(default=None, min_length=8)
    role: Optional[PatronRole] = None
    status: Optional[PatronStatus] = None
    student_id: Optional[str] = Field(default=None, max_length=50)
    department: Optional[str] = Field(default=None, max_length=100)
    profile_image_url: Optional[str] = Field(default=None, max_length=500)


class Patron(PatronBase):
    id: int
    full_name: str
    role: PatronRole
    status: PatronStatus
    is_active: bool
    can_borrow_books: bool
    max_books_allowed: int
    borrowing_period_days: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PatronList(BaseModel):
    items: List[Patron]
    total: int
    page: int
    size: int

    model_config = ConfigDict(from_attributes=True)
