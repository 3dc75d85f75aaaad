# lending/validators.py
import re
from datetime import date
from typing import Optional

from lending.exceptions import InvalidArgumentError

# Accepts bare ISBN-10/13 as well as hyphen or space separated forms,
# optionally prefixed with "ISBN", "ISBN-10:" or "ISBN-13:"
ISBN_PATTERN = re.compile(
    r"^(?:ISBN(?:-1[03])?:? )?"
    r"(?=[0-9X]{10}$|(?=(?:[0-9]+[- ]){3})[- 0-9X]{13}$|97[89][0-9]{10}$|(?=(?:[0-9]+[- ]){4})[- 0-9]{17}$)"
    r"(?:97[89][- ]?)?[0-9]{1,5}[- ]?[0-9]+[- ]?[0-9]+[- ]?[0-9X]$"
)
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
PHONE_PATTERN = re.compile(r"^[+]?[0-9]{10,15}$")


def is_valid_isbn(isbn: Optional[str]) -> bool:
    return bool(isbn) and ISBN_PATTERN.match(isbn) is not None


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def is_valid_username(username: Optional[str]) -> bool:
    return bool(username) and 3 <= len(username) <= 50 and USERNAME_PATTERN.match(username) is not None


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and PHONE_PATTERN.match(phone) is not None


def require_isbn(isbn: str) -> str:
    if not is_valid_isbn(isbn):
        raise InvalidArgumentError(f"Invalid ISBN format: {isbn}")
    return isbn


def require_not_future(value: Optional[date], field_name: str, today: date) -> None:
    if value is not None and value > today:
        raise InvalidArgumentError(f"{field_name} cannot be in the future")


def require_positive(value: int, message: str) -> int:
    if value is None or value <= 0:
        raise InvalidArgumentError(message)
    return value
