# lending/exceptions.py


class LibraryError(Exception):
    """Base class for every expected, recoverable lending error"""

    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LibraryError):
    code = "not_found"


class BookNotFoundError(NotFoundError):
    code = "book_not_found"


class PatronNotFoundError(NotFoundError):
    code = "patron_not_found"


class BorrowingRecordNotFoundError(NotFoundError):
    code = "borrowing_record_not_found"


class InvalidArgumentError(LibraryError, ValueError):
    """Bad input or a broken business rule; the caller must change the request"""

    code = "invalid_argument"


class ConflictError(LibraryError):
    code = "conflict"
