# api/schemas/book.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from lending.enums import BookStatus


class BookBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    isbn: str = Field(min_length=10, max_length=20)
    publisher: str = Field(min_length=1, max_length=255)
    publication_date: date
    category: str = Field(min_length=1, max_length=100)
    pages: int = Field(ge=1, le=10000)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=1000)
    language: str = Field(default="English", min_length=2, max_length=50)
    cover_image_url: Optional[str] = Field(default=None, max_length=500)


class BookCreate(BookBase):
    total_copies: int = Field(default=1, ge=1)
    copies_available: Optional[int] = Field(default=None, ge=0)
    status: Optional[BookStatus] = None

    @model_validator(mode="after")
    def check_copies(self):
        if self.copies_available is not None and self.copies_available > self.total_copies:
            raise ValueError("Available copies cannot exceed total copies")
        return self


class BookUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    author: Optional[str] = Field(default=None, min_length=1, max_length=255)
    isbn: Optional[str] = Field(default=None, min_length=10, max_length=20)
    publisher: Optional[str] = Field(default=None, min_length=1, max_length=255)
    publication_date: Optional[date] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    pages: Optional[int] = Field(default=None, ge=1, le=10000)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=1000)
    language: Optional[str] = Field(default=None, min_length=2, max_length=50)
    cover_image_url: Optional[str] = Field(default=None, max_length=500)
    total_copies: Optional[int] = Field(default=None, ge=1)
    status: Optional[BookStatus] = None


class Book(BookBase):
    id: int
    copies_available: int
    total_copies: int
    status: BookStatus
    is_available: bool
    availability_percentage: float
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PopularBook(Book):
    borrow_count: int


class BookList(BaseModel):
    items: List[Book]
    total: int
    page: int
    size: int

    model_config = ConfigDict(from_attributes=True)


class PopularBookList(BookList):
    items: List[PopularBook]


class BookStatistics(BaseModel):
    total_books: int
    available_books: int
    borrowed_books: int
    overdue_books: int
    books_needing_restock: int
    average_availability_percentage: float
