from __future__ import annotations

from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from book import Book


class LibraryError(Exception):
    """Base exception for failed catalog operations."""


class BookNotFoundError(LibraryError, LookupError):
    """No book with the given ID (or matching title fragment) exists."""

    def __init__(self, book_id: str) -> None:
        super().__init__(f"Book {book_id} not found.")
        self.book_id = book_id


class AlreadyBorrowedError(LibraryError):
    def __init__(self, book: "Book") -> None:
        super().__init__(f"Sorry, this book is already borrowed by: {book.borrower}")
        self.book = book
        self.borrower = book.borrower


class NotBorrowedError(LibraryError):
    def __init__(self, book: "Book") -> None:
        super().__init__(f"Book {book.id} is not borrowed.")
        self.book = book


class NameMismatchError(LibraryError):
    """The returning name does not match the stored borrower."""

    def __init__(self, book: "Book", name: str) -> None:
        super().__init__(
            f"Name does not match borrower ({book.borrower}). Return cancelled."
        )
        self.book = book
        self.name = name
        self.borrower = book.borrower


class BorrowLimitExceededError(LibraryError):
    def __init__(self, name: str, current: int, limit: int) -> None:
        super().__init__(
            f"Borrowing limit reached. {name} already has {current} borrowed book(s) (limit {limit})."
        )
        self.name = name
        self.current = current
        self.limit = limit


class EmptyNameError(LibraryError, ValueError):
    def __init__(self) -> None:
        super().__init__("Name cannot be empty.")


class AmbiguousMatchError(LibraryError):
    """A title fragment matched several books; an exact ID is needed."""

    def __init__(self, query: str, candidates: List["Book"]) -> None:
        ids = ", ".join(b.id for b in candidates)
        super().__init__(
            f"'{query}' matches {len(candidates)} books ({ids}). Please use an exact ID."
        )
        self.query = query
        self.candidates = candidates


class AuthenticationError(LibraryError):
    def __init__(self) -> None:
        super().__init__("Invalid credentials.")


class MalformedRecordError(ValueError):
    """A stored line could not be decoded; loaders skip it."""


class PersistenceWarning(UserWarning):
    """A store could not be written; in-memory state stays authoritative."""
